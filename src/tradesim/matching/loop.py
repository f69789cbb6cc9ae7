"""
MatchingLoop — обработка тиков ценового фида

На каждый снапшот: обновить QuoteBook, прогнать evaluate_orders, отдать
MatchResult вызывающему (для обновления UI state). Таймеров нет: истечение
ордеров проверяется лениво на каждом тике.
"""

import logging
from typing import Mapping

from tradesim.market.quotes import QuoteBook
from tradesim.matching.order_book import ConditionalOrderBook, MatchResult


class MatchingLoop:
    """Драйвер тиков для ConditionalOrderBook."""

    def __init__(
        self,
        book: ConditionalOrderBook,
        quotes: QuoteBook,
        logger: logging.Logger | None = None,
    ):
        self.book = book
        self.quotes = quotes
        self.logger = logger or logging.getLogger(__name__)
        self.ticks_processed = 0

    def on_snapshot(self, prices: Mapping[str, float]) -> MatchResult:
        """
        Обработка одного снапшота цен.

        Args:
            prices: symbol → цена (символы вне снапшота в этом тике не оцениваются)

        Returns:
            MatchResult тика
        """
        self.quotes.apply_snapshot(prices)
        result = self.book.evaluate_orders(prices)
        self.ticks_processed += 1

        for order in result.filled:
            self.logger.info(
                "[LOOP] tick=%d filled %s %s %s x%d @ %.4f",
                self.ticks_processed, order.order_id, order.side.value,
                order.symbol, order.quantity, order.price,
            )
        for order_id in result.expired:
            self.logger.info("[LOOP] tick=%d expired %s", self.ticks_processed, order_id)
        return result

    def on_tick(self, symbol: str, price: float) -> MatchResult:
        """Одиночный тик (push-фид по одному символу)."""
        return self.on_snapshot({symbol: price})
