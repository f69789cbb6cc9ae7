"""Общие fixtures: управляемые часы и собранный движок."""

import pytest

from tradesim.engine import TradingEngine, build_engine

T0_MS = 1_700_000_000_000

STOCK_PRICES = {
    "AAPL": 178.5,
    "GOOGL": 141.8,
    "MSFT": 378.9,
    "TSLA": 248.5,
    "AMZN": 185.6,
}


class FakeClock:
    """Часы UTC (мс), которые двигаются только вручную."""

    def __init__(self, now_ms: int = T0_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> TradingEngine:
    """Движок с двумя пользователями и начальными котировками."""
    return build_engine(
        initial_balances={"user-1": 100_000.0, "user-2": 50_000.0},
        initial_prices=STOCK_PRICES,
        clock=clock,
    )
