"""
News bias: a temporary exogenous push on order prices.

Two states, Inactive (bias is None) and Active(direction, start_tick,
end_tick). The magnitude of the push is fixed by the order generator; this
module only decides when a bias exists and which way it points.
"""

import logging
from dataclasses import dataclass

from numpy.random import Generator

from lobsim.config import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewsBias:
    """Directional news shock covering ticks [start_tick, end_tick]."""

    direction: int  # +1 or -1
    start_tick: int
    end_tick: int

    def active_at(self, tick: int) -> bool:
        return self.start_tick <= tick <= self.end_tick

    @property
    def duration(self) -> int:
        return self.end_tick - self.start_tick


class NewsBiasController:
    """
    Per-tick state machine for the news bias.

    Transitions on advance(tick):
    - Active -> Inactive when tick > end_tick (no activation roll that tick)
    - Inactive -> Active with probability news_probability
    """

    def __init__(self, rng: Generator, config: SimulationConfig | None = None) -> None:
        self.rng = rng
        self.config = config or SimulationConfig()
        self.bias: NewsBias | None = None

    def advance(self, tick: int) -> NewsBias | None:
        """
        Apply this tick's transition.

        Args:
            tick: The tick being simulated

        Returns:
            The live bias after the transition, or None
        """
        if self.bias is not None:
            if tick > self.bias.end_tick:
                logger.info(
                    f"News bias ended at tick {tick} "
                    f"(direction {self.bias.direction:+d}, ran {self.bias.start_tick}-{self.bias.end_tick})"
                )
                self.bias = None
            return self.bias

        if self.rng.random() < self.config.news_probability:
            self.activate(tick)
        return self.bias

    def activate(self, tick: int, direction: int | None = None, duration: int | None = None) -> NewsBias:
        """
        Start a news bias at tick.

        Direction and duration are drawn when not given.
        """
        if direction is None:
            direction = 1 if self.rng.random() < 0.5 else -1
        if duration is None:
            duration = int(self.rng.integers(1, self.config.max_news_duration + 1))
        if direction not in (1, -1):
            raise ValueError(f"direction must be +1 or -1, got {direction}")
        if duration < 1:
            raise ValueError(f"duration must be >= 1, got {duration}")

        self.bias = NewsBias(direction=direction, start_tick=tick, end_tick=tick + duration)
        logger.info(
            f"News bias started at tick {tick}: direction {direction:+d}, "
            f"until tick {self.bias.end_tick}"
        )
        return self.bias
