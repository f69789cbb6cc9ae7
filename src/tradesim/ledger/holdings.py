"""
HoldingsLedger — позиции пользователей по символам

Хранилище user_id → symbol → Holding. Позиция с нулевым количеством
удаляется; следующая покупка начинает новую среднюю цену.
"""

import logging
import threading

from tradesim.core.domain.errors import InsufficientShares
from tradesim.core.domain.holding import Holding


class HoldingsLedger:
    """Позиции пользователей (in-memory)."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self._holdings: dict[str, dict[str, Holding]] = {}
        self._lock = threading.RLock()

    def get_holding(self, user_id: str, symbol: str) -> Holding | None:
        with self._lock:
            return self._holdings.get(user_id, {}).get(symbol)

    def get_holdings(self, user_id: str) -> list[Holding]:
        """Все позиции пользователя (в порядке открытия)."""
        with self._lock:
            return list(self._holdings.get(user_id, {}).values())

    def held_quantity(self, user_id: str, symbol: str) -> int:
        holding = self.get_holding(user_id, symbol)
        return holding.quantity if holding is not None else 0

    def apply_buy(self, user_id: str, symbol: str, quantity: int, price: float) -> Holding:
        """
        Учёт покупки: новая позиция или пересчёт средней цены.

        Args:
            user_id: Пользователь
            symbol: Тикер
            quantity: Количество (> 0)
            price: Цена покупки (> 0)

        Returns:
            Обновлённая позиция
        """
        with self._lock:
            updated = self.project_buy(user_id, symbol, quantity, price)
            self.store(user_id, updated)
            return updated

    def project_buy(self, user_id: str, symbol: str, quantity: int, price: float) -> Holding:
        """
        Позиция, которая получится после покупки, без записи в леджер.

        Позволяет построить (и провалидировать) позицию до списания средств.
        """
        if quantity <= 0:
            raise ValueError(f"quantity must be positive, got {quantity}")
        existing = self.get_holding(user_id, symbol)
        if existing is None:
            return Holding(symbol=symbol, quantity=quantity, average_price=price)
        return existing.with_buy(quantity, price)

    def store(self, user_id: str, holding: Holding) -> None:
        """Запись позиции (замена текущей по символу)."""
        with self._lock:
            self._holdings.setdefault(user_id, {})[holding.symbol] = holding

    def apply_sell(self, user_id: str, symbol: str, quantity: int) -> Holding | None:
        """
        Учёт продажи: уменьшение количества, средняя цена не меняется.

        Returns:
            Обновлённая позиция, или None если позиция закрыта полностью

        Raises:
            InsufficientShares: если акций меньше, чем продаётся (без мутации)
        """
        if quantity <= 0:
            raise ValueError(f"quantity must be positive, got {quantity}")
        with self._lock:
            positions = self._holdings.get(user_id, {})
            existing = positions.get(symbol)
            available = existing.quantity if existing is not None else 0
            if available < quantity:
                raise InsufficientShares(symbol=symbol, required=quantity, available=available)

            remaining = existing.quantity - quantity
            if remaining == 0:
                del positions[symbol]
                if not positions:
                    self._holdings.pop(user_id, None)
                self.logger.debug("[LEDGER] holding closed user=%s symbol=%s", user_id, symbol)
                return None

            updated = existing.model_copy(update={"quantity": remaining})
            positions[symbol] = updated
            return updated
