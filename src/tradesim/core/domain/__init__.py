"""
Domain models and value objects.

Contains fundamental domain entities: Order, Holding, portfolio summaries
and the typed error family.
"""

from tradesim.core.domain.errors import (
    ERROR_TYPES,
    InsufficientBalance,
    InsufficientShares,
    OrderAlreadyCancelled,
    OrderAlreadyFilled,
    OrderExpired,
    OrderNotFound,
    StockNotFound,
    TradingError,
    describe_error,
)
from tradesim.core.domain.holding import Holding
from tradesim.core.domain.ids import Clock, IdGenerator, SequentialIdGenerator, utc_now_ms
from tradesim.core.domain.order import (
    DRAFT_ORDER_ID,
    TERMINAL_STATUSES,
    ExecutionType,
    InvalidOrderTransition,
    Order,
    OrderSide,
    OrderStatus,
)
from tradesim.core.domain.portfolio import HoldingDetail, PortfolioSummary

__all__ = [
    # Order model
    "Order",
    "OrderSide",
    "ExecutionType",
    "OrderStatus",
    "TERMINAL_STATUSES",
    "DRAFT_ORDER_ID",
    "InvalidOrderTransition",
    # Holding / portfolio
    "Holding",
    "HoldingDetail",
    "PortfolioSummary",
    # Ids and time
    "Clock",
    "IdGenerator",
    "SequentialIdGenerator",
    "utc_now_ms",
    # Errors
    "TradingError",
    "InsufficientBalance",
    "InsufficientShares",
    "OrderNotFound",
    "OrderAlreadyCancelled",
    "OrderAlreadyFilled",
    "OrderExpired",
    "StockNotFound",
    "ERROR_TYPES",
    "describe_error",
]
