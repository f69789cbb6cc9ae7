"""
Contract Validation Module

Модуль для валидации JSON контрактов, которые ядро отдаёт наружу.
"""

from .validators import (
    ContractValidator,
    MatchResultValidator,
    OrderValidator,
    SchemaLoader,
    order_to_contract,
    validate_match_result,
    validate_order,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "OrderValidator",
    "MatchResultValidator",
    # Functions
    "order_to_contract",
    "validate_order",
    "validate_match_result",
]
