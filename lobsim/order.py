"""
Order, completed-order and trade records.

An Order is the only mutable record: its quantity is decremented by fills
until it reaches zero, at which point it is stamped with tick_taken and
frozen into a CompletedOrder.
"""

from dataclasses import dataclass, replace
from enum import Enum


class Side(str, Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


@dataclass(eq=False)
class Order:
    """
    A resting limit order.

    Equality is identity: two orders with identical fields are still distinct
    entries in the book.

    Attributes:
        id: Monotonic identifier, never reused
        side: BUY (bid) or SELL (ask)
        price: Limit price, 2-decimal resolution, always >= 0.01
        quantity: Remaining quantity
        tick_placed: Tick on which the order arrived
        tick_taken: Tick on which the order was fully filled (None while active)
    """

    id: int
    side: Side
    price: float
    quantity: int
    tick_placed: int
    tick_taken: int | None = None

    @property
    def is_active(self) -> bool:
        return self.tick_taken is None and self.quantity > 0

    def copy(self) -> "Order":
        """Detached copy for snapshots."""
        return replace(self)


@dataclass(frozen=True)
class CompletedOrder:
    """A fully filled order. Immutable once logged."""

    id: int
    side: Side
    price: float
    quantity: int
    tick_placed: int
    tick_taken: int

    @classmethod
    def from_order(cls, order: Order) -> "CompletedOrder":
        assert order.tick_taken is not None, f"Order {order.id} has no tick_taken"
        return cls(
            id=order.id,
            side=order.side,
            price=order.price,
            quantity=order.quantity,
            tick_placed=order.tick_placed,
            tick_taken=order.tick_taken,
        )


@dataclass(frozen=True)
class Trade:
    """A single transaction between the best bid and the best ask."""

    tick: int
    price: float
    quantity: int
    bid_id: int
    ask_id: int
