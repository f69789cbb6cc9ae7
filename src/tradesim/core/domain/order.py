"""
Order — Модель торгового ордера

Immutable Pydantic модель, представляющая одно торговое намерение:
market ордер (исполняется сразу) или условный ордер (limit/stop/stop_limit),
который ждёт в статусе PENDING до исполнения, отмены или истечения.

Жизненный цикл (только в одну сторону):
    PENDING → FILLED | CANCELLED | EXPIRED
Из терминального статуса переходов нет. Ордера никогда не удаляются,
терминальные ордера остаются в хранилище для истории.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class OrderSide(str, Enum):
    """Сторона ордера"""

    BUY = "buy"
    SELL = "sell"


class ExecutionType(str, Enum):
    """Тип исполнения ордера"""

    MARKET = "market"  # Исполняется всегда
    LIMIT = "limit"  # "or-better": не хуже limit_price
    STOP = "stop"  # Пробой stop_price
    STOP_LIMIT = "stop_limit"  # Коридор между stop_price и limit_price


class OrderStatus(str, Enum):
    """Статус ордера"""

    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.FILLED, OrderStatus.CANCELLED, OrderStatus.EXPIRED}
)

# Временный id ордера, собранного до проверок; настоящий id выдаётся после них
DRAFT_ORDER_ID = "draft"


class InvalidOrderTransition(ValueError):
    """Попытка перехода из терминального статуса или в PENDING."""

    pass


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Модель ордера.

    Immutable модель (frozen=True). Все изменения статуса создают новый
    экземпляр через transition_to().
    """

    # Идентификация
    order_id: str = Field(..., min_length=1, description="Уникальный идентификатор ордера")
    user_id: str = Field(..., min_length=1, description="Владелец ордера")
    symbol: str = Field(..., min_length=1, description="Тикер (например, 'AAPL')")

    # Параметры
    side: OrderSide = Field(..., description="buy/sell")
    execution_type: ExecutionType = Field(..., description="market/limit/stop/stop_limit")
    quantity: int = Field(..., gt=0, description="Количество акций")
    price: float = Field(
        ..., gt=0, description="Цена на момент размещения, после исполнения цена fill"
    )
    limit_price: Optional[float] = Field(None, gt=0, description="Лимитная цена")
    stop_price: Optional[float] = Field(None, gt=0, description="Стоп цена")

    # Статус и время (UTC, миллисекунды)
    status: OrderStatus = Field(..., description="Статус ордера")
    created_ts_utc_ms: int = Field(..., ge=0, description="Время создания")
    expires_ts_utc_ms: Optional[int] = Field(None, ge=0, description="Время истечения")
    filled_ts_utc_ms: Optional[int] = Field(None, ge=0, description="Время исполнения")
    cancelled_ts_utc_ms: Optional[int] = Field(None, ge=0, description="Время отмены")

    model_config = {"frozen": True, "allow_inf_nan": False}  # Immutable

    @model_validator(mode="after")
    def validate_trigger_prices(self) -> "Order":
        """Проверка наличия limit/stop цен в соответствии с типом исполнения."""
        needs_limit = self.execution_type in (ExecutionType.LIMIT, ExecutionType.STOP_LIMIT)
        needs_stop = self.execution_type in (ExecutionType.STOP, ExecutionType.STOP_LIMIT)
        if needs_limit and self.limit_price is None:
            raise ValueError(f"{self.execution_type.value} order requires limit_price")
        if needs_stop and self.stop_price is None:
            raise ValueError(f"{self.execution_type.value} order requires stop_price")
        return self

    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def reserved_amount(self) -> float:
        """
        Сумма, зарезервированная под pending buy ордер.

        Резерв = (limit_price если задан, иначе price на момент размещения) × quantity.
        Для sell ордеров резерв средств не делается.

        Returns:
            Зарезервированная сумма
        """
        if self.side != OrderSide.BUY:
            return 0.0
        reference = self.limit_price if self.limit_price is not None else self.price
        return reference * self.quantity

    def transition_to(
        self,
        status: OrderStatus,
        ts_utc_ms: int,
        fill_price: Optional[float] = None,
    ) -> "Order":
        """
        Переход в терминальный статус.

        Args:
            status: Целевой статус (FILLED/CANCELLED/EXPIRED)
            ts_utc_ms: Время перехода
            fill_price: Цена исполнения (только для FILLED)

        Returns:
            Новый экземпляр Order

        Raises:
            InvalidOrderTransition: если ордер уже терминальный или status=PENDING
        """
        if self.is_terminal():
            raise InvalidOrderTransition(
                f"order {self.order_id}: {self.status.value} -> {status.value} not allowed"
            )
        if status == OrderStatus.PENDING:
            raise InvalidOrderTransition(f"order {self.order_id}: already pending")

        update: dict = {"status": status}
        if status == OrderStatus.FILLED:
            update["filled_ts_utc_ms"] = ts_utc_ms
            if fill_price is not None:
                update["price"] = fill_price
        elif status == OrderStatus.CANCELLED:
            update["cancelled_ts_utc_ms"] = ts_utc_ms
        return self.model_copy(update=update)
