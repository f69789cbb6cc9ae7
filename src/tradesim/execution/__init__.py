"""Execution — market ордера и сводки портфеля."""

from .market_orders import ExecutionConfig, OrderExecution
from .portfolio import PortfolioService

__all__ = [
    "ExecutionConfig",
    "OrderExecution",
    "PortfolioService",
]
