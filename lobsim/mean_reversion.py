"""Trailing-average price window and the mean-reversion bias derived from it."""

from collections import deque
from typing import Iterable


class MeanReversionTracker:
    """
    Sliding window of the most recent trade prices.

    bias = (mean - current_price) / current_price, positive when the price
    sits below its trailing average. An empty window gives no bias.
    """

    def __init__(self, window_size: int = 1000) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self.window_size = window_size
        self.window: deque[float] = deque(maxlen=window_size)
        self._total = 0.0
        self.bias = 0.0

    def __len__(self) -> int:
        return len(self.window)

    def _push(self, price: float) -> None:
        if len(self.window) == self.window_size:
            self._total -= self.window[0]
        self.window.append(price)
        self._total += price

    @property
    def running_average(self) -> float | None:
        if not self.window:
            return None
        return self._total / len(self.window)

    def extend(self, prices: Iterable[float]) -> None:
        """Seed the window with historical prices without publishing a bias."""
        for price in prices:
            self._push(float(price))

    def update(self, price: float) -> float:
        """
        Append the latest price and recompute the bias against it.

        Args:
            price: Latest trade price (always positive)

        Returns:
            The new mean-reversion bias
        """
        self._push(float(price))
        self.bias = self.bias_for(price)
        return self.bias

    def bias_for(self, current_price: float) -> float:
        """Bias of the current window relative to current_price."""
        mean = self.running_average
        if mean is None or current_price <= 0:
            return 0.0
        return (mean - current_price) / current_price
