"""Error types raised by the simulation core and its host driver."""


class SimulationCorruptedError(RuntimeError):
    """A previous step raised part-way through; the state can no longer be trusted."""


class InvalidTickIntervalError(ValueError):
    """Host-supplied tick interval is not an integer or is below the minimum."""
