"""
OrderExecution — немедленное исполнение market ордеров

Проверяет средства/акции по леджерам, обновляет их и записывает
исполненный (FILLED) ордер в историю.

Владеет единым mutation lock (RLock), который разделяет с
ConditionalOrderBook: многошаговые транзакции книги ордеров
("вернуть резерв, затем списать по цене fill") выполняются под этим
же lock и не перемежаются с market сделками.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from tradesim.core.domain.holding import Holding
from tradesim.core.domain.ids import Clock, IdGenerator, SequentialIdGenerator, utc_now_ms
from tradesim.core.domain.order import DRAFT_ORDER_ID, ExecutionType, Order, OrderSide, OrderStatus
from tradesim.core.math.fill_conditions import is_valid_price
from tradesim.ledger.accounts import AccountLedger
from tradesim.ledger.holdings import HoldingsLedger


def _validate_trade(quantity: int, price: float) -> None:
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")
    if not is_valid_price(price):
        raise ValueError(f"price must be finite and positive, got {price}")


@dataclass(frozen=True)
class ExecutionConfig:
    """Конфигурация исполнения market ордеров."""

    order_id_prefix: str = "order"


class OrderExecution:
    """Исполнение market buy/sell."""

    def __init__(
        self,
        accounts: AccountLedger,
        holdings: HoldingsLedger,
        config: Optional[ExecutionConfig] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        logger: logging.Logger | None = None,
    ):
        """
        Args:
            accounts: леджер балансов
            holdings: леджер позиций
            config: конфигурация
            id_generator: генератор id (по умолчанию '<prefix>-<n>')
            clock: часы UTC в миллисекундах
            logger: логгер
        """
        self.accounts = accounts
        self.holdings = holdings
        self.config = config or ExecutionConfig()
        self._next_id = id_generator or SequentialIdGenerator(self.config.order_id_prefix)
        self._clock = clock or utc_now_ms
        self.logger = logger or logging.getLogger(__name__)

        self.lock = threading.RLock()
        self._orders: dict[str, Order] = {}

    def execute_market_buy(self, user_id: str, symbol: str, quantity: int, price: float) -> Order:
        """
        Market покупка по цене price.

        Позиция и запись ордера строятся до списания средств: если что-то
        из них не строится, леджеры не тронуты.

        Returns:
            Исполненный ордер

        Raises:
            InsufficientBalance: если средств меньше price × quantity (без мутации)
        """
        _validate_trade(quantity, price)
        with self.lock:
            holding = self.holdings.project_buy(user_id, symbol, quantity, price)
            draft = self._draft(user_id, symbol, OrderSide.BUY, quantity, price)
            self.accounts.debit(user_id, price * quantity)
            self.holdings.store(user_id, holding)
            order = self._record(draft)

        self.logger.info(
            "[EXEC] buy %s x%d @ %.4f user=%s avg=%.4f",
            symbol, quantity, price, user_id, holding.average_price,
        )
        return order

    def execute_market_sell(self, user_id: str, symbol: str, quantity: int, price: float) -> Order:
        """
        Market продажа по цене price.

        Returns:
            Исполненный ордер

        Raises:
            InsufficientShares: если акций меньше quantity (без мутации)
        """
        _validate_trade(quantity, price)
        with self.lock:
            draft = self._draft(user_id, symbol, OrderSide.SELL, quantity, price)
            self.holdings.apply_sell(user_id, symbol, quantity)
            self.accounts.credit(user_id, price * quantity)
            order = self._record(draft)

        self.logger.info("[EXEC] sell %s x%d @ %.4f user=%s", symbol, quantity, price, user_id)
        return order

    def get_orders(self, user_id: str) -> list[Order]:
        """История исполненных market ордеров пользователя."""
        with self.lock:
            return [o for o in self._orders.values() if o.user_id == user_id]

    def get_holdings(self, user_id: str) -> list[Holding]:
        return self.holdings.get_holdings(user_id)

    def _draft(
        self, user_id: str, symbol: str, side: OrderSide, quantity: int, price: float
    ) -> Order:
        # id назначается в _record, только после успешной сделки
        now = self._clock()
        return Order(
            order_id=DRAFT_ORDER_ID,
            user_id=user_id,
            symbol=symbol,
            side=side,
            execution_type=ExecutionType.MARKET,
            quantity=quantity,
            price=price,
            status=OrderStatus.FILLED,
            created_ts_utc_ms=now,
            filled_ts_utc_ms=now,
        )

    def _record(self, draft: Order) -> Order:
        order = draft.model_copy(update={"order_id": self._next_id()})
        self._orders[order.order_id] = order
        return order
