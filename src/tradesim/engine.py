"""
TradingEngine — сборка ядра

Связывает леджеры, исполнение, книгу условных ордеров, котировки и
портфель с общими часами и единым mutation lock.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from tradesim.core.domain.ids import Clock, utc_now_ms
from tradesim.core.domain.order import ExecutionType, Order, OrderSide
from tradesim.execution.market_orders import ExecutionConfig, OrderExecution
from tradesim.execution.portfolio import PortfolioService
from tradesim.ledger.accounts import AccountLedger
from tradesim.ledger.holdings import HoldingsLedger
from tradesim.market.quotes import QuoteBook
from tradesim.matching.loop import MatchingLoop
from tradesim.matching.order_book import (
    ConditionalOrderBook,
    OrderBookConfig,
    PlaceConditionalOrderParams,
)


@dataclass
class TradingEngine:
    """Собранный движок."""

    accounts: AccountLedger
    holdings: HoldingsLedger
    execution: OrderExecution
    book: ConditionalOrderBook
    quotes: QuoteBook
    portfolio: PortfolioService
    loop: MatchingLoop

    def place_at_market(
        self,
        user_id: str,
        symbol: str,
        side: OrderSide,
        execution_type: ExecutionType,
        quantity: int,
        limit_price: Optional[float] = None,
        stop_price: Optional[float] = None,
        expires_ts_utc_ms: Optional[int] = None,
    ) -> Order:
        """
        Размещение условного ордера с текущей ценой из QuoteBook.

        Raises:
            StockNotFound: нет котировки символа
            InsufficientBalance / InsufficientShares: см. place_conditional_order
        """
        current_price = self.quotes.get_price(symbol)
        return self.book.place_conditional_order(
            PlaceConditionalOrderParams(
                user_id=user_id,
                symbol=symbol,
                side=side,
                execution_type=execution_type,
                quantity=quantity,
                current_price=current_price,
                limit_price=limit_price,
                stop_price=stop_price,
                expires_ts_utc_ms=expires_ts_utc_ms,
            )
        )

    def buy_at_market(self, user_id: str, symbol: str, quantity: int) -> Order:
        """Market покупка по последней котировке."""
        return self.execution.execute_market_buy(
            user_id, symbol, quantity, self.quotes.get_price(symbol)
        )

    def sell_at_market(self, user_id: str, symbol: str, quantity: int) -> Order:
        """Market продажа по последней котировке."""
        return self.execution.execute_market_sell(
            user_id, symbol, quantity, self.quotes.get_price(symbol)
        )


def build_engine(
    initial_balances: Optional[Mapping[str, float]] = None,
    initial_prices: Optional[Mapping[str, float]] = None,
    clock: Optional[Clock] = None,
    execution_config: Optional[ExecutionConfig] = None,
    book_config: Optional[OrderBookConfig] = None,
    logger: logging.Logger | None = None,
) -> TradingEngine:
    """
    Сборка движка с in-memory состоянием.

    Args:
        initial_balances: user_id → начальный баланс
        initial_prices: symbol → начальная цена
        clock: общие часы (UTC, миллисекунды)
        execution_config: конфигурация исполнения
        book_config: конфигурация книги ордеров
        logger: общий логгер (по умолчанию логгер каждого модуля)

    Returns:
        TradingEngine
    """
    clock = clock or utc_now_ms

    accounts = AccountLedger(logger=logger)
    for user_id, balance in (initial_balances or {}).items():
        accounts.open_account(user_id, balance)

    holdings = HoldingsLedger(logger=logger)
    execution = OrderExecution(
        accounts, holdings, config=execution_config, clock=clock, logger=logger
    )
    book = ConditionalOrderBook(
        execution, accounts, config=book_config, clock=clock, logger=logger
    )
    quotes = QuoteBook(initial_prices)

    return TradingEngine(
        accounts=accounts,
        holdings=holdings,
        execution=execution,
        book=book,
        quotes=quotes,
        portfolio=PortfolioService(accounts, holdings),
        loop=MatchingLoop(book, quotes, logger=logger),
    )
