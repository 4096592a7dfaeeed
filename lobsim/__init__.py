"""
lobsim - Tick-driven continuous double auction simulator

This package contains the single-instrument market core: synthetic order
flow, a price-time priority order book and the news / mean-reversion bias
model that feeds the trade price back into order generation.

Modules:
    market: The step function and simulation state management
    orderbook: Bid/ask storage and capacity enforcement
    matching: The crossing algorithm
    order_generator: Random order flow
    news_bias: Exogenous news shocks
    mean_reversion: Trailing-average price pressure
"""

from lobsim.config import SimulationConfig, parse_tick_interval
from lobsim.exceptions import InvalidTickIntervalError, SimulationCorruptedError
from lobsim.market import PriceState, Simulation
from lobsim.order import CompletedOrder, Order, Side, Trade
from lobsim.snapshot import MarketSnapshot

__version__ = "1.0.0"

__all__ = [
    "CompletedOrder",
    "InvalidTickIntervalError",
    "MarketSnapshot",
    "Order",
    "PriceState",
    "Side",
    "Simulation",
    "SimulationConfig",
    "SimulationCorruptedError",
    "Trade",
    "parse_tick_interval",
]
