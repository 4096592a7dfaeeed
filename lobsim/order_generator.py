"""
Random order flow.

Each generated order is priced around the current market price with Gaussian
noise, shifted by the active news bias and by the mean-reversion bias.
"""

import numpy as np
from numpy.random import Generator

from lobsim.config import SimulationConfig
from lobsim.news_bias import NewsBias
from lobsim.order import Order, Side


class RandomOrderGenerator:
    """
    Produces synthetic limit orders.

    The generator holds no state besides its RNG; order ids are allocated by
    the caller.
    """

    def __init__(self, rng: Generator, config: SimulationConfig | None = None) -> None:
        """
        Args:
            rng: Shared random number generator (the simulation's only source of randomness)
            config: Market constants (defaults if None)
        """
        self.rng = rng
        self.config = config or SimulationConfig()

    def gaussian(self) -> float:
        """
        Standard normal draw via Box-Muller.

        1 - u keeps the log argument in (0, 1].
        """
        u1 = self.rng.random()
        u2 = self.rng.random()
        return float(np.sqrt(-2.0 * np.log(1.0 - u1)) * np.cos(2.0 * np.pi * u2))

    def orders_per_tick(self) -> int:
        """Number of orders arriving this tick."""
        cfg = self.config
        return int(self.rng.integers(cfg.min_orders_per_tick, cfg.max_orders_per_tick + 1))

    def generate(
        self,
        tick: int,
        current_price: float,
        news_bias: NewsBias | None,
        mean_reversion_bias: float,
        order_id: int,
    ) -> Order:
        """
        Generate one order.

        Args:
            tick: Current tick (becomes tick_placed)
            current_price: Market price the order is centred on
            news_bias: Live news bias, or None
            mean_reversion_bias: (running_average - current_price) / current_price
            order_id: Identifier allocated by the caller

        Returns:
            New active Order
        """
        cfg = self.config
        side = Side.BUY if self.rng.random() < 0.5 else Side.SELL

        noise = self.gaussian() * cfg.volatility * current_price
        news_effect = 0.0
        if news_bias is not None and news_bias.active_at(tick):
            news_effect = news_bias.direction * current_price * cfg.news_strength
        reversion_effect = mean_reversion_bias * current_price * cfg.reversion_strength

        price = round(current_price + noise + news_effect + reversion_effect, 2)
        if price < cfg.min_price:
            price = cfg.min_price

        quantity = int(self.rng.integers(cfg.min_quantity, cfg.max_quantity + 1))

        return Order(
            id=order_id,
            side=side,
            price=price,
            quantity=quantity,
            tick_placed=tick,
        )
