"""
QuoteBook — последние цены символов

In-memory хранилище котировок. Снапшот фида применяется целиком как
point-in-time истина для всех присутствующих в нём символов. Цена должна
быть конечной и положительной: NaN/inf отклоняются вместе со всем снапшотом.
"""

import threading
from typing import Mapping

from tradesim.core.domain.errors import StockNotFound
from tradesim.core.math.fill_conditions import is_valid_price


def _check_quote(symbol: str, price: float) -> None:
    if not symbol:
        raise ValueError("symbol must be non-empty")
    if not is_valid_price(price):
        raise ValueError(f"price must be finite and positive, got {price} for {symbol}")


class QuoteBook:
    """Последние цены по символам."""

    def __init__(self, initial_prices: Mapping[str, float] | None = None):
        self._prices: dict[str, float] = {}
        self._lock = threading.Lock()
        if initial_prices:
            self.apply_snapshot(initial_prices)

    def get_price(self, symbol: str) -> float:
        """
        Последняя цена символа.

        Raises:
            StockNotFound: если котировки нет
        """
        with self._lock:
            price = self._prices.get(symbol)
        if price is None:
            raise StockNotFound(symbol=symbol)
        return price

    def update_price(self, symbol: str, price: float) -> None:
        _check_quote(symbol, price)
        with self._lock:
            self._prices[symbol] = price

    def apply_snapshot(self, prices: Mapping[str, float]) -> None:
        """
        Применение снапшота цен.

        Raises:
            ValueError: если хотя бы одна цена не конечная или не положительная
                (снапшот не применяется)
        """
        for symbol, price in prices.items():
            _check_quote(symbol, price)
        with self._lock:
            self._prices.update(prices)

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            return dict(self._prices)
