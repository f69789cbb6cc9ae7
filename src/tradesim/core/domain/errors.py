"""
Errors — Типизированные ошибки торгового ядра

Закрытое семейство исключений с тегами. Каждое исключение несёт структурные
поля, достаточные для точного сообщения пользователю, и поддерживает
structural pattern matching через __match_args__:

    try:
        book.place_conditional_order(params)
    except TradingError as err:
        match err:
            case InsufficientBalance(required, available):
                ...

Ошибки валидации при размещении не мутируют состояние (all-or-nothing).
Ошибки исполнения внутри evaluate_orders гасятся на уровне ордера.
"""

from typing import ClassVar


# =============================================================================
# BASE
# =============================================================================


class TradingError(Exception):
    """
    Базовый класс доменных ошибок.

    tag — стабильный строковый идентификатор ошибки (для UI и логов).
    """

    tag: ClassVar[str] = "TradingError"
    __match_args__: ClassVar[tuple[str, ...]] = ()

    def fields(self) -> dict:
        """Структурные поля ошибки (для сериализации/рендеринга)."""
        return {name: getattr(self, name) for name in self.__match_args__}

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.fields() == other.fields()

    def __hash__(self) -> int:
        return hash((self.tag, tuple(self.fields().values())))

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.fields().items())
        return f"{type(self).__name__}({args})"


# =============================================================================
# FUNDS / SHARES
# =============================================================================


class InsufficientBalance(TradingError):
    """Недостаточно средств для покупки или резервирования."""

    tag = "InsufficientBalance"
    __match_args__ = ("required", "available")

    def __init__(self, required: float, available: float):
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient balance: required {required:.2f}, available {available:.2f}"
        )


class InsufficientShares(TradingError):
    """Недостаточно акций для продажи (с учётом pending sell ордеров)."""

    tag = "InsufficientShares"
    __match_args__ = ("symbol", "required", "available")

    def __init__(self, symbol: str, required: int, available: int):
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient shares of {symbol}: required {required}, available {available}"
        )


# =============================================================================
# ORDERS
# =============================================================================


class OrderNotFound(TradingError):
    """Ордер с таким id не существует (или принадлежит другому пользователю)."""

    tag = "OrderNotFound"
    __match_args__ = ("order_id",)

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order not found: {order_id}")


class OrderAlreadyCancelled(TradingError):
    """Повторная отмена ордера."""

    tag = "OrderAlreadyCancelled"
    __match_args__ = ("order_id",)

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order already cancelled: {order_id}")


class OrderAlreadyFilled(TradingError):
    """Попытка отменить уже исполненный ордер."""

    tag = "OrderAlreadyFilled"
    __match_args__ = ("order_id",)

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order already filled: {order_id}")


class OrderExpired(TradingError):
    """
    Явный отказ из-за истечения ордера.

    Истечение во время evaluate_orders не бросается, а попадает в
    MatchResult.expired. Это исключение используется только там, где
    операция отклоняется, потому что ордер уже истёк (например, cancel).
    """

    tag = "OrderExpired"
    __match_args__ = ("order_id",)

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order expired: {order_id}")


# =============================================================================
# MARKET DATA
# =============================================================================


class StockNotFound(TradingError):
    """Нет котировки для символа."""

    tag = "StockNotFound"
    __match_args__ = ("symbol",)

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"stock not found: {symbol}")


ERROR_TYPES: tuple[type[TradingError], ...] = (
    InsufficientBalance,
    InsufficientShares,
    OrderNotFound,
    OrderAlreadyCancelled,
    OrderAlreadyFilled,
    OrderExpired,
    StockNotFound,
)


# =============================================================================
# USER-FACING MESSAGES
# =============================================================================


def describe_error(error: TradingError) -> str:
    """
    Человекочитаемое сообщение для ошибки.

    Args:
        error: Доменная ошибка

    Returns:
        Детерминированное сообщение для UI
    """
    match error:
        case InsufficientBalance(required, available):
            return (
                f"Insufficient balance: {required:,.2f} required, "
                f"{available:,.2f} available"
            )
        case InsufficientShares(symbol, required, available):
            return (
                f"Insufficient shares of {symbol}: {required} required, "
                f"{available} available"
            )
        case OrderNotFound(order_id):
            return f"Order {order_id} was not found"
        case OrderAlreadyCancelled(order_id):
            return f"Order {order_id} is already cancelled"
        case OrderAlreadyFilled(order_id):
            return f"Order {order_id} is already filled and cannot be cancelled"
        case OrderExpired(order_id):
            return f"Order {order_id} has expired"
        case StockNotFound(symbol):
            return f"Stock {symbol} was not found"
        case _:
            return str(error)
