"""
Simulation configuration.

SimulationConfig carries every tunable constant of the market core. It can be
built directly or from an omegaconf section (see conf/config.yaml), and it
validates itself on construction.

parse_tick_interval() is the host-side validation of the timer interval; it
runs before any scheduling so the core is never entered with a bad interval.
"""

from dataclasses import dataclass, fields
from typing import Any

from omegaconf import DictConfig, OmegaConf

from lobsim.exceptions import InvalidTickIntervalError

MIN_TICK_INTERVAL_MS = 10


@dataclass(frozen=True)
class SimulationConfig:
    """
    Constants of the simulated market.

    Attributes:
        initial_price: Price at tick 0
        max_book_size: Combined bid+ask capacity (ORDER_BOOK_MAX_SIZE)
        window_size: Length of the trailing mean-reversion window
        news_probability: Per-tick probability that a news bias starts
        max_news_duration: Upper bound (inclusive) of a news bias duration in ticks
        news_strength: News effect as a fraction of the current price
        reversion_strength: Weight applied to the mean-reversion bias
        volatility: Std of the order price noise as a fraction of the current price
        min_price: Floor applied to generated prices
        min_quantity: Smallest generated order quantity
        max_quantity: Largest generated order quantity
        min_orders_per_tick: Fewest orders generated per tick
        max_orders_per_tick: Most orders generated per tick
    """

    initial_price: float = 100.0
    max_book_size: int = 100
    window_size: int = 1000
    news_probability: float = 1 / 500
    max_news_duration: int = 500
    news_strength: float = 0.02
    reversion_strength: float = 0.03
    volatility: float = 0.05
    min_price: float = 0.01
    min_quantity: int = 1
    max_quantity: int = 10
    min_orders_per_tick: int = 1
    max_orders_per_tick: int = 3

    def __post_init__(self) -> None:
        if self.initial_price <= 0:
            raise ValueError(f"initial_price must be positive, got {self.initial_price}")
        if self.min_price <= 0:
            raise ValueError(f"min_price must be positive, got {self.min_price}")
        if self.max_book_size < 1:
            raise ValueError(f"max_book_size must be >= 1, got {self.max_book_size}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")
        if not 0.0 <= self.news_probability <= 1.0:
            raise ValueError(
                f"news_probability must be in [0, 1], got {self.news_probability}"
            )
        if self.max_news_duration < 1:
            raise ValueError(
                f"max_news_duration must be >= 1, got {self.max_news_duration}"
            )
        if self.volatility < 0:
            raise ValueError(f"volatility must be >= 0, got {self.volatility}")
        if not 1 <= self.min_quantity <= self.max_quantity:
            raise ValueError(
                f"quantity range [{self.min_quantity}, {self.max_quantity}] is invalid"
            )
        if not 1 <= self.min_orders_per_tick <= self.max_orders_per_tick:
            raise ValueError(
                f"orders per tick range [{self.min_orders_per_tick}, "
                f"{self.max_orders_per_tick}] is invalid"
            )

    @classmethod
    def from_config(cls, cfg: DictConfig | dict[str, Any] | None) -> "SimulationConfig":
        """
        Build from a config section.

        Missing keys keep their defaults.

        Raises:
            ValueError: If the section holds a key that is not a field
        """
        if cfg is None:
            return cls()
        if isinstance(cfg, DictConfig):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise ValueError(f"Unknown simulation config keys: {unknown}")
        return cls(**cfg)


def parse_tick_interval(value: Any, minimum: int = MIN_TICK_INTERVAL_MS) -> int:
    """
    Validate a host-supplied tick interval in milliseconds.

    Accepts ints and integer strings (surrounding whitespace allowed).

    Args:
        value: Raw interval as received from the host (CLI, config, form field)
        minimum: Smallest accepted interval

    Returns:
        The interval as an int

    Raises:
        InvalidTickIntervalError: If value is not an integer or is below minimum
    """
    if isinstance(value, bool):
        raise InvalidTickIntervalError(f"Tick interval must be an integer, got {value!r}")
    if isinstance(value, int):
        interval = value
    elif isinstance(value, str):
        try:
            interval = int(value.strip())
        except ValueError:
            raise InvalidTickIntervalError(
                f"Tick interval must be an integer, got {value!r}"
            ) from None
    else:
        raise InvalidTickIntervalError(f"Tick interval must be an integer, got {value!r}")

    if interval < minimum:
        raise InvalidTickIntervalError(
            f"Tick interval must be at least {minimum}ms, got {interval}ms"
        )
    return interval
