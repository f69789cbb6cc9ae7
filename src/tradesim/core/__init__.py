"""
Core domain models, pure evaluation functions, and contracts.

This module contains the foundational building blocks that are independent
of ledgers, execution and the order book.
"""
