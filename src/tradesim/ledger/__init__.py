"""Ledgers — балансы и позиции пользователей."""

from .accounts import AccountLedger, to_cents
from .holdings import HoldingsLedger

__all__ = [
    "AccountLedger",
    "HoldingsLedger",
    "to_cents",
]
