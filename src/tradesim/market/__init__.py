"""Market data — котировки символов."""

from .quotes import QuoteBook

__all__ = ["QuoteBook"]
