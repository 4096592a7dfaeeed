"""
Headless host driver.

Calls Simulation.step() at a fixed interval and hands snapshots to a
consumer. The consumer is throttled the way a renderer would be: it is called
at most once per publish interval, and always after the last tick.
"""

import logging
import threading
import time
from typing import Any, Callable

from lobsim.config import parse_tick_interval
from lobsim.market import Simulation
from lobsim.snapshot import MarketSnapshot

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[MarketSnapshot], None]


class TickRunner:
    """
    Drives a Simulation from a timer loop.

    Every step() call is made under a single lock, so several threads may
    share one runner without interleaving ticks.
    """

    def __init__(
        self,
        simulation: Simulation,
        tick_interval_ms: Any,
        on_snapshot: SnapshotCallback | None = None,
        publish_interval_ms: int = 100,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            simulation: Core to drive
            tick_interval_ms: Raw interval, validated with parse_tick_interval
            on_snapshot: Consumer of published snapshots
            publish_interval_ms: Minimum time between two publications
            clock: Monotonic clock in seconds
            sleep: Sleep function in seconds

        Raises:
            InvalidTickIntervalError: If the interval is not an integer >= 10ms
        """
        self.tick_interval_ms = parse_tick_interval(tick_interval_ms)
        self.simulation = simulation
        self.on_snapshot = on_snapshot
        self.publish_interval_ms = publish_interval_ms
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._running = False
        self._last_publish = 0.0
        self.last_snapshot: MarketSnapshot | None = None

    @property
    def running(self) -> bool:
        """True only while run() is ticking."""
        return self._running

    def stop(self) -> None:
        """Stop after the tick in progress, or keep the next run() from starting."""
        self._stop.set()

    def step(self) -> MarketSnapshot:
        """Run one tick under the runner's lock."""
        with self._lock:
            snapshot = self.simulation.step()
        self.last_snapshot = snapshot
        return snapshot

    def _publish(self, snapshot: MarketSnapshot, force: bool = False) -> None:
        if self.on_snapshot is None:
            return
        now = self._clock()
        if force or (now - self._last_publish) * 1000 >= self.publish_interval_ms:
            self.on_snapshot(snapshot)
            self._last_publish = now

    def run(self, num_ticks: int) -> MarketSnapshot | None:
        """
        Run up to num_ticks ticks, sleeping tick_interval_ms between them.

        A stop() issued before the call is honoured: no tick runs until
        restart() clears it.

        Returns:
            The last snapshot, or last_snapshot if no tick ran
        """
        if self._stop.is_set():
            logger.info(f"Stop already requested; not starting at tick {self.simulation.tick}")
            return self.last_snapshot

        self._running = True
        self._last_publish = self._clock()
        logger.info(
            f"Simulation started with tick speed {self.tick_interval_ms}ms for {num_ticks} ticks"
        )

        snapshot = None
        try:
            for i in range(num_ticks):
                if self._stop.is_set():
                    break
                snapshot = self.step()
                self._publish(snapshot)
                if i < num_ticks - 1:
                    self._sleep(self.tick_interval_ms / 1000)

            if snapshot is not None:
                self._publish(snapshot, force=True)
        finally:
            self._running = False
        logger.info(f"Simulation stopped at tick {self.simulation.tick}")
        return snapshot if snapshot is not None else self.last_snapshot

    def restart(self, num_ticks: int) -> MarketSnapshot | None:
        """Clear a pending stop and run again."""
        self._stop.clear()
        return self.run(num_ticks)
