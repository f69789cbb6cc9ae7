"""
Core math modules для tradesim

Чистые функции: условия исполнения ордеров и оценка портфеля.
"""

# Fill conditions
from tradesim.core.math.fill_conditions import is_expired, is_valid_price, should_fill

# Portfolio valuation
from tradesim.core.math.portfolio import (
    HoldingPnL,
    TotalPnL,
    holding_pnl,
    portfolio_value,
    total_pnl,
)

__all__ = [
    "should_fill",
    "is_expired",
    "is_valid_price",
    "HoldingPnL",
    "TotalPnL",
    "holding_pnl",
    "portfolio_value",
    "total_pnl",
]
