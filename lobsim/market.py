"""
Market orchestrator for the tick-driven double auction.

One call to Simulation.step() is one tick:
1. Advance the tick counter and the news-bias state machine
2. Feed the last price into the mean-reversion window
3. Generate 1-3 orders and add them to the book
4. Enforce book capacity
5. Cross the book
6. Record (tick, price) and emit a snapshot

All state, including the random number generator, lives on the Simulation
instance; two simulations built with the same seed replay identically.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
from numpy.random import Generator

from lobsim.config import SimulationConfig
from lobsim.exceptions import SimulationCorruptedError
from lobsim.matching import MatchingEngine
from lobsim.mean_reversion import MeanReversionTracker
from lobsim.news_bias import NewsBias, NewsBiasController
from lobsim.order import Order
from lobsim.order_generator import RandomOrderGenerator
from lobsim.orderbook import OrderBook
from lobsim.snapshot import MarketSnapshot

if TYPE_CHECKING:
    from lobsim.event_logger import EventLogger


@dataclass
class PriceState:
    """
    Market price and its history.

    Attributes:
        current_price: Last trade price (initial price before any trade)
        tick: Current tick, 0 before the first step
        price_history: (tick, price) after every step, seeded with (0, initial price)
    """

    current_price: float
    tick: int = 0
    price_history: list[tuple[int, float]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.price_history:
            self.price_history.append((self.tick, self.current_price))


class Simulation:
    """
    The simulation core.

    Attributes:
        config: Market constants
        rng: The only source of randomness
        state: Price, tick counter and history
        book: Active orders and completed log
        news: News-bias state machine
        reversion: Trailing price window
        generator: Random order flow
        matcher: Crossing algorithm
        corrupted: True once a step has raised part-way through
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        seed: int | None = None,
        rng: Generator | None = None,
        event_logger: "EventLogger | None" = None,
    ) -> None:
        """
        Initialize the simulation at tick 0.

        Args:
            config: Market constants (defaults if None)
            seed: Seed for a fresh generator (ignored when rng is given)
            rng: Pre-built generator to draw from
            event_logger: Optional EventLogger for order/trade/news events
        """
        self.config = config or SimulationConfig()
        self.rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        self.logger = logging.getLogger(__name__)
        self.event_logger = event_logger

        self.state = PriceState(current_price=self.config.initial_price)
        self.book = OrderBook(max_size=self.config.max_book_size)
        self.news = NewsBiasController(self.rng, self.config)
        self.reversion = MeanReversionTracker(self.config.window_size)
        self.generator = RandomOrderGenerator(self.rng, self.config)
        self.matcher = MatchingEngine()

        self.next_order_id = 1
        self.corrupted = False

    @property
    def tick(self) -> int:
        return self.state.tick

    @property
    def current_price(self) -> float:
        return self.state.current_price

    @property
    def mean_reversion_bias(self) -> float:
        return self.reversion.bias

    @property
    def running_average(self) -> float:
        average = self.reversion.running_average
        return self.state.current_price if average is None else average

    # =========================================================================
    # THE STEP FUNCTION
    # =========================================================================

    def step(self) -> MarketSnapshot:
        """
        Execute one tick.

        Returns:
            Snapshot of the state after the tick

        Raises:
            SimulationCorruptedError: If an earlier step failed part-way through
        """
        self._advance()
        return self.snapshot()

    def run(self, num_ticks: int) -> pd.DataFrame:
        """
        Run several steps without building intermediate snapshots.

        Args:
            num_ticks: Number of ticks to simulate

        Returns:
            Full price history (columns tick, price)
        """
        if num_ticks < 0:
            raise ValueError(f"num_ticks must be >= 0, got {num_ticks}")
        for _ in range(num_ticks):
            self._advance()
        return self.price_frame()

    def _advance(self) -> None:
        if self.corrupted:
            raise SimulationCorruptedError(
                f"Simulation failed during tick {self.state.tick}; start a new one"
            )

        try:
            self.state.tick += 1
            tick = self.state.tick

            self._advance_news(tick)
            self.reversion.update(self.state.current_price)

            for _ in range(self.generator.orders_per_tick()):
                self._place(self._generate(tick))

            evicted = self.book.enforce_capacity(self.rng)
            if self.event_logger is not None:
                for order in evicted:
                    self.event_logger.log_eviction(tick, order)

            self.matcher.cross(self.book, self.state)
            if self.event_logger is not None:
                for trade in self.matcher.last_trades:
                    self.event_logger.log_trade(trade)

            self.state.price_history.append((tick, self.state.current_price))
            self._check_invariants()
        except Exception:
            self.corrupted = True
            raise

        self.logger.debug(
            f"Tick {tick}: bids {len(self.book.bids)}, asks {len(self.book.asks)}, "
            f"price {self.state.current_price:.2f}"
        )

    # =========================================================================
    # STEP STAGES
    # =========================================================================

    def _advance_news(self, tick: int) -> NewsBias | None:
        previous = self.news.bias
        bias = self.news.advance(tick)
        if self.event_logger is not None:
            if previous is not None and bias is None:
                self.event_logger.log_news(tick, previous, started=False)
            elif previous is None and bias is not None:
                self.event_logger.log_news(tick, bias, started=True)
        return bias

    def _generate(self, tick: int) -> Order:
        order = self.generator.generate(
            tick=tick,
            current_price=self.state.current_price,
            news_bias=self.news.bias,
            mean_reversion_bias=self.reversion.bias,
            order_id=self.next_order_id,
        )
        self.next_order_id += 1
        return order

    def _place(self, order: Order) -> None:
        self.book.add(order)
        self.logger.debug(
            f"New {order.side.value} order {order.id}: price {order.price:.2f}, qty {order.quantity}"
        )
        if self.event_logger is not None:
            self.event_logger.log_order(order)

    def _check_invariants(self) -> None:
        assert len(self.book) <= self.book.max_size, (
            f"Book holds {len(self.book)} orders, capacity {self.book.max_size}"
        )
        for order in self.book.bids + self.book.asks:
            assert order.is_active, f"Inactive order {order.id} left in the book"
        assert self.state.current_price > 0, f"Non-positive price {self.state.current_price}"

    # =========================================================================
    # READ SIDE
    # =========================================================================

    def snapshot(self) -> MarketSnapshot:
        """
        Immutable copy of the current state.

        Raises:
            SimulationCorruptedError: If a step failed part-way through, since the
                state then mixes committed and half-applied ticks
        """
        if self.corrupted:
            raise SimulationCorruptedError(
                f"Simulation failed during tick {self.state.tick}; no committed snapshot available"
            )
        return MarketSnapshot(
            tick=self.state.tick,
            current_price=self.state.current_price,
            active_bids=tuple(o.copy() for o in self.book.sorted_bids()),
            active_asks=tuple(o.copy() for o in self.book.sorted_asks()),
            completed_orders=tuple(self.book.completed),
            news_bias=self.news.bias,
            running_average=self.running_average,
            price_history=tuple(self.state.price_history),
            trades=tuple(self.matcher.last_trades),
        )

    def price_frame(self) -> pd.DataFrame:
        """Price history as a DataFrame with columns tick, price."""
        return pd.DataFrame(self.state.price_history, columns=["tick", "price"])
