"""
ConditionalOrderBook — книга условных ордеров (limit/stop/stop_limit)

Принимает условные ордера, резервирует под них средства (buy) или проверяет
доступные акции (sell), хранит их в статусе PENDING и на каждом снапшоте цен
решает, какие исполнить, а какие истекли.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Хранилище ордеров мутируется только операциями книги
2. Ошибка валидации при размещении не мутирует ничего (all-or-nothing)
3. Pending buy держит резерв = (limit_price или price) × quantity
4. Два pending sell не могут претендовать на одни и те же акции
5. Переходы статуса только PENDING → FILLED | CANCELLED | EXPIRED
6. Доменная ошибка (TradingError) исполнения одного ордера не прерывает
   проход evaluate_orders: ордер остаётся PENDING и проверяется снова на
   следующем тике
7. Неудачный buy fill по любой причине оставляет резерв на месте
8. Цены снапшота, не конечные или не > 0, не участвуют в оценке

Все операции выполняются под единым mutation lock, общим с OrderExecution.
Проход evaluate_orders обрабатывает снапшот pending ордеров, взятый на
старте; ордера, размещённые во время прохода, увидит следующий тик.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from tradesim.core.domain.errors import (
    InsufficientShares,
    OrderAlreadyCancelled,
    OrderAlreadyFilled,
    OrderExpired,
    OrderNotFound,
    TradingError,
)
from tradesim.core.domain.ids import Clock, IdGenerator, SequentialIdGenerator, utc_now_ms
from tradesim.core.domain.order import (
    DRAFT_ORDER_ID,
    ExecutionType,
    Order,
    OrderSide,
    OrderStatus,
)
from tradesim.core.math.fill_conditions import is_expired, is_valid_price, should_fill
from tradesim.execution.market_orders import OrderExecution
from tradesim.ledger.accounts import AccountLedger


# =============================================================================
# CONFIG / PARAMS / RESULT
# =============================================================================


@dataclass(frozen=True)
class OrderBookConfig:
    """Конфигурация книги условных ордеров."""

    order_id_prefix: str = "pending"


class PlaceConditionalOrderParams(BaseModel):
    """
    Параметры размещения условного ордера.

    current_price — цена на момент размещения, передаётся вызывающим.
    Используется для оценки резерва (если нет limit_price) и как price
    ордера до исполнения.
    """

    user_id: str = Field(..., min_length=1, description="Пользователь")
    symbol: str = Field(..., min_length=1, description="Тикер")
    side: OrderSide = Field(..., description="buy/sell")
    execution_type: ExecutionType = Field(..., description="Тип исполнения")
    quantity: int = Field(..., gt=0, description="Количество акций")
    current_price: float = Field(..., gt=0, description="Текущая цена")
    limit_price: Optional[float] = Field(None, gt=0, description="Лимитная цена")
    stop_price: Optional[float] = Field(None, gt=0, description="Стоп цена")
    expires_ts_utc_ms: Optional[int] = Field(None, ge=0, description="Время истечения")

    model_config = {"frozen": True, "allow_inf_nan": False}

    @model_validator(mode="after")
    def validate_trigger_prices(self) -> "PlaceConditionalOrderParams":
        """limit/stop цены должны соответствовать типу исполнения."""
        if self.execution_type in (ExecutionType.LIMIT, ExecutionType.STOP_LIMIT):
            if self.limit_price is None:
                raise ValueError(f"{self.execution_type.value} order requires limit_price")
        if self.execution_type in (ExecutionType.STOP, ExecutionType.STOP_LIMIT):
            if self.stop_price is None:
                raise ValueError(f"{self.execution_type.value} order requires stop_price")
        return self


class MatchResult(BaseModel):
    """Результат прохода evaluate_orders."""

    filled: list[Order] = Field(default_factory=list, description="Исполненные ордера")
    expired: list[str] = Field(default_factory=list, description="id истёкших ордеров")

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return not self.filled and not self.expired


# =============================================================================
# ORDER BOOK
# =============================================================================


class ConditionalOrderBook:
    """Книга условных ордеров."""

    def __init__(
        self,
        execution: OrderExecution,
        accounts: AccountLedger,
        config: Optional[OrderBookConfig] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        logger: logging.Logger | None = None,
    ):
        """
        Args:
            execution: исполнение market ордеров (и владелец mutation lock)
            accounts: леджер балансов (для резервов)
            config: конфигурация
            id_generator: генератор id (по умолчанию '<prefix>-<n>')
            clock: часы UTC в миллисекундах
            logger: логгер
        """
        self.execution = execution
        self.accounts = accounts
        self.config = config or OrderBookConfig()
        self._next_id = id_generator or SequentialIdGenerator(self.config.order_id_prefix)
        self._clock = clock or utc_now_ms
        self.logger = logger or logging.getLogger(__name__)

        self._lock = execution.lock
        # Порядок вставки = порядок обхода в evaluate_orders
        self._orders: dict[str, Order] = {}

    # ------------------------------------------------------------------
    # placement
    # ------------------------------------------------------------------
    def place_conditional_order(self, params: PlaceConditionalOrderParams) -> Order:
        """
        Размещение условного ордера.

        Порядок:
        1. buy: резерв (limit_price или current_price) × quantity списывается
           с баланса сразу, до исполнения
        2. sell: доступно = акции − количество в других pending sell
           этого пользователя по символу
        3. Ордер получает id и сохраняется в статусе PENDING (отклонённое
           размещение id не расходует)

        Returns:
            Созданный ордер

        Raises:
            InsufficientBalance: средств меньше резерва (без мутации)
            InsufficientShares: доступных акций меньше quantity (без мутации)
        """
        with self._lock:
            order = Order(
                order_id=DRAFT_ORDER_ID,
                user_id=params.user_id,
                symbol=params.symbol,
                side=params.side,
                execution_type=params.execution_type,
                quantity=params.quantity,
                price=params.current_price,
                limit_price=params.limit_price,
                stop_price=params.stop_price,
                status=OrderStatus.PENDING,
                created_ts_utc_ms=self._clock(),
                expires_ts_utc_ms=params.expires_ts_utc_ms,
            )

            if order.side == OrderSide.BUY:
                self.accounts.debit(order.user_id, order.reserved_amount())
            else:
                available = self.available_shares(order.user_id, order.symbol)
                if available < order.quantity:
                    raise InsufficientShares(
                        symbol=order.symbol,
                        required=order.quantity,
                        available=max(0, available),
                    )

            order = order.model_copy(update={"order_id": self._next_id()})
            self._orders[order.order_id] = order

        self.logger.info(
            "[BOOK] placed %s %s %s %s x%d limit=%s stop=%s user=%s",
            order.order_id, order.execution_type.value, order.side.value,
            order.symbol, order.quantity, order.limit_price, order.stop_price, order.user_id,
        )
        return order

    def available_shares(self, user_id: str, symbol: str) -> int:
        """
        Акции, доступные для нового sell ордера.

        Пересчитывается с нуля: позиция минус сумма quantity pending sell
        ордеров пользователя по символу.
        """
        with self._lock:
            held = self.execution.holdings.held_quantity(user_id, symbol)
            reserved = sum(
                o.quantity
                for o in self._orders.values()
                if o.is_pending()
                and o.side == OrderSide.SELL
                and o.user_id == user_id
                and o.symbol == symbol
            )
            return held - reserved

    # ------------------------------------------------------------------
    # cancellation
    # ------------------------------------------------------------------
    def cancel_order(self, order_id: str, user_id: str) -> Order:
        """
        Отмена pending ордера.

        Для buy резерв возвращается на баланс владельца. После успешного
        возврата ни один последующий проход evaluate_orders ордер не тронет.

        Returns:
            Отменённый ордер

        Raises:
            OrderNotFound: нет ордера или он принадлежит другому пользователю
            OrderAlreadyCancelled: ордер уже отменён
            OrderAlreadyFilled: ордер уже исполнен
            OrderExpired: ордер уже истёк
        """
        with self._lock:
            order = self._orders.get(order_id)
            if order is None or order.user_id != user_id:
                raise OrderNotFound(order_id=order_id)
            if order.status == OrderStatus.CANCELLED:
                raise OrderAlreadyCancelled(order_id=order_id)
            if order.status == OrderStatus.FILLED:
                raise OrderAlreadyFilled(order_id=order_id)
            if order.status == OrderStatus.EXPIRED:
                raise OrderExpired(order_id=order_id)

            if order.side == OrderSide.BUY:
                self.accounts.credit(order.user_id, order.reserved_amount())

            cancelled = order.transition_to(OrderStatus.CANCELLED, self._clock())
            self._orders[order_id] = cancelled

        self.logger.info("[BOOK] cancelled %s user=%s", order_id, user_id)
        return cancelled

    # ------------------------------------------------------------------
    # evaluation
    # ------------------------------------------------------------------
    def evaluate_orders(self, prices: Mapping[str, float]) -> MatchResult:
        """
        Оценка всех pending ордеров по снапшоту цен.

        Для каждого pending ордера (в порядке размещения):
        - нет цены символа в снапшоте, или она не конечная / не > 0 →
          пропуск, остаётся PENDING
        - истёк → EXPIRED, резерв buy возвращается, id в expired
        - условие исполнения выполнено → исполнение по цене снапшота;
          при успехе FILLED и в filled, при ошибке остаётся PENDING

        Args:
            prices: symbol → цена

        Returns:
            MatchResult(filled, expired)
        """
        filled: list[Order] = []
        expired: list[str] = []
        prices = self._usable_prices(prices)

        with self._lock:
            now = self._clock()
            pending = [o for o in self._orders.values() if o.is_pending()]

            for order in pending:
                current_price = prices.get(order.symbol)
                if current_price is None:
                    continue

                if is_expired(order, now):
                    self._expire(order, now)
                    expired.append(order.order_id)
                    continue

                if not should_fill(order, current_price, now):
                    continue

                try:
                    filled_order = self._fill(order, current_price, now)
                except TradingError as err:
                    self.logger.warning(
                        "[BOOK] fill failed %s @ %.4f, stays pending: %r",
                        order.order_id, current_price, err,
                    )
                    continue
                filled.append(filled_order)

        if filled or expired:
            self.logger.info(
                "[BOOK] evaluation: filled=%d expired=%d", len(filled), len(expired)
            )
        return MatchResult(filled=filled, expired=expired)

    def _usable_prices(self, prices: Mapping[str, float]) -> dict[str, float]:
        usable = {}
        for symbol, price in prices.items():
            if is_valid_price(price):
                usable[symbol] = price
            else:
                self.logger.warning("[BOOK] ignoring invalid price %s=%r", symbol, price)
        return usable

    def _expire(self, order: Order, now: int) -> None:
        if order.side == OrderSide.BUY:
            self.accounts.credit(order.user_id, order.reserved_amount())
        self._orders[order.order_id] = order.transition_to(OrderStatus.EXPIRED, now)
        self.logger.info("[BOOK] expired %s user=%s", order.order_id, order.user_id)

    def _fill(self, order: Order, price: float, now: int) -> Order:
        if order.side == OrderSide.BUY:
            self._fill_buy(order, price)
        else:
            self.execution.execute_market_sell(order.user_id, order.symbol, order.quantity, price)

        filled_order = order.transition_to(OrderStatus.FILLED, now, fill_price=price)
        self._orders[order.order_id] = filled_order
        return filled_order

    def _fill_buy(self, order: Order, price: float) -> None:
        """
        Транзакция исполнения buy: вернуть резерв, затем списать по цене fill.

        Итоговое списание отражает фактическую цену исполнения. Если
        исполнение не удалось по любой причине, резерв восстанавливается и
        ордер продолжает его держать; исключение уходит вызывающему.

        Raises:
            InsufficientBalance: средств не хватает по цене fill
        """
        reserved = order.reserved_amount()
        self.accounts.credit(order.user_id, reserved)
        try:
            self.execution.execute_market_buy(order.user_id, order.symbol, order.quantity, price)
        except Exception:
            self.accounts.debit(order.user_id, reserved)
            raise

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def get_pending_orders(self, user_id: str) -> list[Order]:
        """Pending ордера пользователя."""
        with self._lock:
            return [o for o in self._orders.values() if o.user_id == user_id and o.is_pending()]

    def get_all_conditional_orders(self, user_id: str) -> list[Order]:
        """Все условные ордера пользователя, включая терминальные."""
        with self._lock:
            return [o for o in self._orders.values() if o.user_id == user_id]

    def get_order(self, order_id: str) -> Order:
        """
        Raises:
            OrderNotFound: нет ордера с таким id
        """
        with self._lock:
            order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id=order_id)
        return order
