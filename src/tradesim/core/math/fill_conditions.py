"""
Fill Conditions — Условия исполнения условных ордеров

Чистые функции без состояния: решают, должен ли pending ордер исполниться
при текущей цене, и истёк ли он.

ТАБЛИЦА РЕШЕНИЙ (все сравнения включительные):

    | тип        | buy исполняется при           | sell исполняется при          |
    |------------|-------------------------------|-------------------------------|
    | market     | всегда                        | всегда                        |
    | limit      | price ≤ limit                 | price ≥ limit                 |
    | stop       | price ≥ stop                  | price ≤ stop                  |
    | stop_limit | stop ≤ price ≤ limit          | limit ≤ price ≤ stop          |

ИНВАРИАНТЫ:
1. Не-PENDING ордер никогда не исполняется
2. Истёкший ордер никогда не исполняется, он только истекает
3. Истечение: одноразовый переход, терминальный ордер не "истёкший"
"""

import math

from tradesim.core.domain.order import ExecutionType, Order, OrderSide, OrderStatus


def is_valid_price(price: float) -> bool:
    """Цена пригодна для оценки и исполнения: конечная и > 0 (NaN и inf отбрасываются)."""
    return math.isfinite(price) and price > 0


def is_expired(order: Order, now_ms: int) -> bool:
    """
    Проверка истечения ордера.

    Args:
        order: Ордер
        now_ms: Момент оценки (UTC, миллисекунды)

    Returns:
        True только если ордер PENDING и expires_ts_utc_ms <= now_ms
    """
    return (
        order.status == OrderStatus.PENDING
        and order.expires_ts_utc_ms is not None
        and order.expires_ts_utc_ms <= now_ms
    )


def should_fill(order: Order, current_price: float, now_ms: int) -> bool:
    """
    Проверка условия исполнения ордера по текущей цене.

    Args:
        order: Ордер
        current_price: Текущая цена символа
        now_ms: Момент оценки (UTC, миллисекунды)

    Returns:
        True если ордер должен быть исполнен
    """
    if order.status != OrderStatus.PENDING:
        return False

    if order.expires_ts_utc_ms is not None and order.expires_ts_utc_ms <= now_ms:
        return False

    is_buy = order.side == OrderSide.BUY
    kind = order.execution_type

    if kind == ExecutionType.MARKET:
        return True

    if kind == ExecutionType.LIMIT:
        if is_buy:
            return current_price <= order.limit_price
        return current_price >= order.limit_price

    if kind == ExecutionType.STOP:
        if is_buy:
            return current_price >= order.stop_price
        return current_price <= order.stop_price

    if kind == ExecutionType.STOP_LIMIT:
        if is_buy:
            return order.stop_price <= current_price <= order.limit_price
        return order.limit_price <= current_price <= order.stop_price

    return False
