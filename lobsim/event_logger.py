"""
Event Logger for post-hoc analysis of a simulation run.

Logs order arrivals, evictions, trades and news shocks at the tick level
as JSONL, one event per line.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

from lobsim.news_bias import NewsBias
from lobsim.order import Order, Trade


@dataclass
class OrderEvent:
    """An order entering or being evicted from the book."""

    tick: int
    order_id: int
    side: str  # "buy", "sell"
    price: float
    quantity: int


@dataclass
class TradeEvent:
    """A transaction between a bid and an ask."""

    tick: int
    bid_id: int
    ask_id: int
    price: float
    quantity: int


@dataclass
class NewsEvent:
    """Start or end of a news bias."""

    tick: int
    direction: int
    start_tick: int
    end_tick: int


class EventLogger:
    """
    Logs market events to JSONL format.

    Usage:
        with EventLogger(Path("logs/run_events.jsonl")) as event_logger:
            sim = Simulation(seed=1, event_logger=event_logger)
            sim.run(1000)
    """

    def __init__(self, output_path: Path):
        """
        Initialize the event logger.

        Args:
            output_path: Path to write JSONL file
        """
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._open()

    def _open(self) -> None:
        """Open the output file for writing."""
        self._file = open(self.output_path, "w")

    def _order_event(self, tick: int, order: Order) -> OrderEvent:
        return OrderEvent(
            tick=tick,
            order_id=order.id,
            side=order.side.value,
            price=order.price,
            quantity=order.quantity,
        )

    def log_order(self, order: Order) -> None:
        """Log a newly generated order."""
        self._write_event("order_placed", self._order_event(order.tick_placed, order))

    def log_eviction(self, tick: int, order: Order) -> None:
        """Log an order dropped by capacity enforcement."""
        self._write_event("order_evicted", self._order_event(tick, order))

    def log_trade(self, trade: Trade) -> None:
        """Log a transaction."""
        event = TradeEvent(
            tick=trade.tick,
            bid_id=trade.bid_id,
            ask_id=trade.ask_id,
            price=trade.price,
            quantity=trade.quantity,
        )
        self._write_event("trade", event)

    def log_news(self, tick: int, bias: NewsBias, started: bool) -> None:
        """Log the start (started=True) or end of a news bias."""
        event = NewsEvent(
            tick=tick,
            direction=bias.direction,
            start_tick=bias.start_tick,
            end_tick=bias.end_tick,
        )
        self._write_event("news_start" if started else "news_end", event)

    def _write_event(self, event_type: str, event: OrderEvent | TradeEvent | NewsEvent) -> None:
        """Write an event to the JSONL file."""
        if self._file is None:
            return

        data = asdict(event)
        data["event_type"] = event_type
        self._file.write(json.dumps(data) + "\n")

    def flush(self) -> None:
        """Flush the output buffer."""
        if self._file:
            self._file.flush()

    def close(self) -> None:
        """Close the output file."""
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> "EventLogger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_events(log_path: Path) -> list[dict[str, object]]:
    """
    Load events from a JSONL file.

    Args:
        log_path: Path to the JSONL file

    Returns:
        List of event dictionaries
    """
    events = []
    with open(log_path) as f:
        for line in f:
            if line.strip():
                events.append(json.loads(line))
    return events
