"""
Test suite for tradesim

Contains:
- tests/unit/          : Unit tests for individual modules
- tests/integration/   : Integration tests for order flows
"""
