"""Matching — книга условных ордеров и драйвер тиков."""

from .loop import MatchingLoop
from .order_book import (
    ConditionalOrderBook,
    MatchResult,
    OrderBookConfig,
    PlaceConditionalOrderParams,
)

__all__ = [
    "ConditionalOrderBook",
    "MatchResult",
    "OrderBookConfig",
    "PlaceConditionalOrderParams",
    "MatchingLoop",
]
