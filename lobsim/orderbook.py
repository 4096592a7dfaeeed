"""
lobsim/orderbook.py - Bid/ask storage with bounded capacity

The book keeps its two sides as plain insertion-ordered lists. Ordering is
never maintained on insert; sorted_bids()/sorted_asks() produce fresh
price-time ordered views for matching and for any external read.

Capacity is enforced by random eviction, which is not a fill: evicted orders
are discarded and never reach the completed log.
"""

import logging

from numpy.random import Generator

from lobsim.order import CompletedOrder, Order, Side

logger = logging.getLogger(__name__)

ORDER_BOOK_MAX_SIZE = 100


def bid_priority(order: Order) -> tuple[float, int, int]:
    """Sort key: highest price first, then earliest tick, then lowest id."""
    return (-order.price, order.tick_placed, order.id)


def ask_priority(order: Order) -> tuple[float, int, int]:
    """Sort key: lowest price first, then earliest tick, then lowest id."""
    return (order.price, order.tick_placed, order.id)


class OrderBook:
    """
    Active bids and asks plus the append-only log of completed orders.

    Attributes:
        bids: Active buy orders (unordered)
        asks: Active sell orders (unordered)
        completed: Fully filled orders in fill order
        max_size: Combined bid+ask capacity enforced at the end of every tick
    """

    def __init__(self, max_size: int = ORDER_BOOK_MAX_SIZE) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self.max_size = max_size
        self.bids: list[Order] = []
        self.asks: list[Order] = []
        self.completed: list[CompletedOrder] = []

    def __len__(self) -> int:
        return len(self.bids) + len(self.asks)

    def side(self, side: Side) -> list[Order]:
        return self.bids if side is Side.BUY else self.asks

    def add(self, order: Order) -> None:
        """
        Append an active order to its side.

        Args:
            order: Order with quantity > 0 and no tick_taken
        """
        assert order.is_active, f"Cannot add inactive order {order.id}"
        self.side(order.side).append(order)

    def sorted_bids(self) -> list[Order]:
        """New list of bids, best (highest) first."""
        return sorted(self.bids, key=bid_priority)

    def sorted_asks(self) -> list[Order]:
        """New list of asks, best (lowest) first."""
        return sorted(self.asks, key=ask_priority)

    def best_bid(self) -> Order | None:
        return min(self.bids, key=bid_priority) if self.bids else None

    def best_ask(self) -> Order | None:
        return min(self.asks, key=ask_priority) if self.asks else None

    def complete(self, order: Order, tick: int) -> CompletedOrder:
        """
        Move a fully filled order to the completed log.

        Args:
            order: Active order whose quantity has reached exactly 0
            tick: Tick of the fill

        Returns:
            The logged CompletedOrder
        """
        assert order.quantity == 0, f"Order {order.id} completed with quantity {order.quantity}"
        assert order.tick_taken is None, f"Order {order.id} already taken at {order.tick_taken}"
        assert tick >= order.tick_placed, f"Order {order.id} taken before it was placed"

        order.tick_taken = tick
        self.side(order.side).remove(order)
        record = CompletedOrder.from_order(order)
        self.completed.append(record)
        return record

    def enforce_capacity(self, rng: Generator) -> list[Order]:
        """
        Evict random orders until the book fits max_size.

        Each eviction picks bids or asks with probability 1/2 (the other side
        is forced when one is empty), then a uniformly random order on it.

        Args:
            rng: Shared random number generator

        Returns:
            Evicted orders, in eviction order
        """
        evicted: list[Order] = []
        while len(self) > self.max_size:
            if not self.asks:
                orders = self.bids
            elif not self.bids:
                orders = self.asks
            else:
                orders = self.bids if rng.random() < 0.5 else self.asks
            index = int(rng.integers(0, len(orders)))
            evicted.append(orders.pop(index))

        if evicted:
            logger.debug(f"Evicted {len(evicted)} orders to keep book at {self.max_size}")
        return evicted
