"""
Read-only view of the market handed to hosts after each step.

Snapshots hold copies, never references into the simulation, so a consumer
that keeps one around (a slow renderer, a test) never sees a later tick.
"""

from dataclasses import asdict, dataclass

import pandas as pd

from lobsim.news_bias import NewsBias
from lobsim.order import CompletedOrder, Order, Trade


@dataclass(frozen=True)
class MarketSnapshot:
    """
    State of the market after a fully applied step.

    active_bids are ordered best (highest) first and active_asks best
    (lowest) first.
    """

    tick: int
    current_price: float
    active_bids: tuple[Order, ...]
    active_asks: tuple[Order, ...]
    completed_orders: tuple[CompletedOrder, ...]
    news_bias: NewsBias | None
    running_average: float
    price_history: tuple[tuple[int, float], ...]
    trades: tuple[Trade, ...] = ()

    @property
    def spread(self) -> float | None:
        if not self.active_bids or not self.active_asks:
            return None
        return self.active_asks[0].price - self.active_bids[0].price

    def price_frame(self) -> pd.DataFrame:
        """Price history as a DataFrame with columns tick, price."""
        return pd.DataFrame(list(self.price_history), columns=["tick", "price"])

    def completed_frame(self) -> pd.DataFrame:
        """Completed orders as a DataFrame, one row per order."""
        columns = ["id", "side", "price", "quantity", "tick_placed", "tick_taken"]
        rows = [asdict(o) | {"side": o.side.value} for o in self.completed_orders]
        return pd.DataFrame(rows, columns=columns)

    def to_dict(self) -> dict:
        """Plain-data form (JSON serializable)."""

        def order_dict(order: Order | CompletedOrder) -> dict:
            return asdict(order) | {"side": order.side.value}

        return {
            "tick": self.tick,
            "current_price": self.current_price,
            "active_bids": [order_dict(o) for o in self.active_bids],
            "active_asks": [order_dict(o) for o in self.active_asks],
            "completed_orders": [order_dict(o) for o in self.completed_orders],
            "news_bias": asdict(self.news_bias) if self.news_bias else None,
            "running_average": self.running_average,
            "price_history": [list(point) for point in self.price_history],
            "trades": [asdict(t) for t in self.trades],
        }
