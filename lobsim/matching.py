"""
Price-time priority crossing of the order book.

Trade price follows the standing-order rule: when one side is strictly older
it sets the price; orders placed on the same tick trade at the midpoint.
Every trade moves the public market price.
"""

import logging
from typing import TYPE_CHECKING

from lobsim.order import Order, Trade
from lobsim.orderbook import OrderBook

if TYPE_CHECKING:
    from lobsim.market import PriceState

logger = logging.getLogger(__name__)


def transaction_price(bid: Order, ask: Order) -> float:
    """
    Price of a trade between a crossing bid and ask.

    Args:
        bid: Best bid
        ask: Best ask

    Returns:
        Ask price if the bid is newer, bid price if the ask is newer,
        midpoint if both arrived on the same tick
    """
    if bid.tick_placed > ask.tick_placed:
        return ask.price
    if ask.tick_placed > bid.tick_placed:
        return bid.price
    return (bid.price + ask.price) / 2


class MatchingEngine:
    """
    Crosses the book until the best bid is below the best ask.

    Attributes:
        last_trades: Trades produced by the most recent cross()
    """

    def __init__(self) -> None:
        self.last_trades: list[Trade] = []

    def cross(self, book: OrderBook, state: "PriceState") -> bool:
        """
        Match crossing orders.

        Works on local sorted views of both sides; filled orders are moved to
        the book's completed log as they fill, partially filled orders stay at
        the head of their view and may trade again.

        Args:
            book: Order book to cross
            state: Price state; its tick stamps fills and its current_price is
                updated on every trade

        Returns:
            True if at least one trade occurred
        """
        self.last_trades = []
        bids = book.sorted_bids()
        asks = book.sorted_asks()
        b = 0
        a = 0

        while b < len(bids) and a < len(asks) and bids[b].price >= asks[a].price:
            bid = bids[b]
            ask = asks[a]
            assert bid.quantity > 0 and ask.quantity > 0, (
                f"Non-positive quantity at head of book: bid {bid.id}={bid.quantity}, "
                f"ask {ask.id}={ask.quantity}"
            )

            price = transaction_price(bid, ask)
            quantity = min(bid.quantity, ask.quantity)
            bid.quantity -= quantity
            ask.quantity -= quantity
            assert bid.quantity >= 0 and ask.quantity >= 0

            state.current_price = price
            trade = Trade(
                tick=state.tick,
                price=price,
                quantity=quantity,
                bid_id=bid.id,
                ask_id=ask.id,
            )
            self.last_trades.append(trade)
            logger.debug(f"Transaction: {quantity} units at {price:.2f}")

            if bid.quantity == 0:
                book.complete(bid, state.tick)
                b += 1
            if ask.quantity == 0:
                book.complete(ask, state.tick)
                a += 1

        return bool(self.last_trades)
