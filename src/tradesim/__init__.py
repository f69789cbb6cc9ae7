"""tradesim — conditional order matching engine for a simulated stock trading platform."""

__version__ = "0.1.0"
