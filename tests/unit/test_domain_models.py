"""
Тесты для доменных моделей: Order, Holding, ошибки

Проверяет:
1. Создание и валидацию моделей Pydantic
2. Обязательные limit/stop цены по типу исполнения
3. Immutability (frozen=True)
4. Односторонние переходы статуса
5. Типизированные ошибки: теги, поля, pattern matching, сообщения
"""

import pytest
from pydantic import ValidationError

from tradesim.core.domain import (
    ERROR_TYPES,
    ExecutionType,
    Holding,
    InsufficientBalance,
    InsufficientShares,
    InvalidOrderTransition,
    Order,
    OrderAlreadyCancelled,
    OrderAlreadyFilled,
    OrderExpired,
    OrderNotFound,
    OrderSide,
    OrderStatus,
    SequentialIdGenerator,
    StockNotFound,
    TradingError,
    describe_error,
)


@pytest.fixture
def pending_limit_buy() -> Order:
    """Pending limit buy AAPL x10 @ 170."""
    return Order(
        order_id="pending-1",
        user_id="user-1",
        symbol="AAPL",
        side=OrderSide.BUY,
        execution_type=ExecutionType.LIMIT,
        quantity=10,
        price=178.5,
        limit_price=170.0,
        status=OrderStatus.PENDING,
        created_ts_utc_ms=1_700_000_000_000,
    )


# =============================================================================
# ORDER TESTS
# =============================================================================


class TestOrder:
    """Тесты для модели Order"""

    def test_order_creation(self, pending_limit_buy: Order) -> None:
        assert pending_limit_buy.is_pending()
        assert not pending_limit_buy.is_terminal()
        assert pending_limit_buy.limit_price == 170.0

    def test_order_immutable(self, pending_limit_buy: Order) -> None:
        with pytest.raises(ValidationError):
            pending_limit_buy.quantity = 5  # type: ignore

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, pending_limit_buy: Order, quantity: int) -> None:
        data = pending_limit_buy.model_dump()
        data["quantity"] = quantity
        with pytest.raises(ValidationError):
            Order(**data)

    @pytest.mark.parametrize("execution_type,missing", [
        (ExecutionType.LIMIT, "limit_price"),
        (ExecutionType.STOP, "stop_price"),
        (ExecutionType.STOP_LIMIT, "limit_price"),
        (ExecutionType.STOP_LIMIT, "stop_price"),
    ])
    def test_trigger_prices_required(self, execution_type, missing) -> None:
        data = {
            "order_id": "pending-1",
            "user_id": "user-1",
            "symbol": "AAPL",
            "side": OrderSide.BUY,
            "execution_type": execution_type,
            "quantity": 1,
            "price": 100.0,
            "limit_price": 110.0,
            "stop_price": 100.0,
            "status": OrderStatus.PENDING,
            "created_ts_utc_ms": 0,
        }
        data[missing] = None
        with pytest.raises(ValidationError) as exc_info:
            Order(**data)
        assert missing in str(exc_info.value)

    def test_reserved_amount_uses_limit_price(self, pending_limit_buy: Order) -> None:
        assert pending_limit_buy.reserved_amount() == 1700.0

    def test_reserved_amount_falls_back_to_price(self, pending_limit_buy: Order) -> None:
        stop_buy = pending_limit_buy.model_copy(
            update={"execution_type": ExecutionType.STOP, "limit_price": None, "stop_price": 180.0}
        )
        assert stop_buy.reserved_amount() == 1785.0

    def test_reserved_amount_zero_for_sell(self, pending_limit_buy: Order) -> None:
        sell = pending_limit_buy.model_copy(update={"side": OrderSide.SELL})
        assert sell.reserved_amount() == 0.0

    def test_transition_to_filled(self, pending_limit_buy: Order) -> None:
        filled = pending_limit_buy.transition_to(OrderStatus.FILLED, 1_700_000_001_000, 168.0)
        assert filled.status == OrderStatus.FILLED
        assert filled.price == 168.0
        assert filled.filled_ts_utc_ms == 1_700_000_001_000
        # Исходный экземпляр не меняется
        assert pending_limit_buy.status == OrderStatus.PENDING

    def test_transition_to_cancelled(self, pending_limit_buy: Order) -> None:
        cancelled = pending_limit_buy.transition_to(OrderStatus.CANCELLED, 5)
        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancelled_ts_utc_ms == 5
        assert cancelled.price == 178.5

    @pytest.mark.parametrize(
        "terminal", [OrderStatus.FILLED, OrderStatus.CANCELLED, OrderStatus.EXPIRED]
    )
    def test_no_transition_out_of_terminal(self, pending_limit_buy: Order, terminal) -> None:
        done = pending_limit_buy.transition_to(terminal, 1)
        with pytest.raises(InvalidOrderTransition):
            done.transition_to(OrderStatus.CANCELLED, 2)

    def test_no_transition_to_pending(self, pending_limit_buy: Order) -> None:
        with pytest.raises(InvalidOrderTransition):
            pending_limit_buy.transition_to(OrderStatus.PENDING, 1)

    def test_json_roundtrip(self, pending_limit_buy: Order) -> None:
        restored = Order.model_validate_json(pending_limit_buy.model_dump_json())
        assert restored == pending_limit_buy


# =============================================================================
# HOLDING TESTS
# =============================================================================


class TestHolding:
    """Тесты для модели Holding"""

    def test_weighted_average_on_buy(self) -> None:
        holding = Holding(symbol="AAPL", quantity=10, average_price=100.0)
        updated = holding.with_buy(10, 200.0)
        assert updated.quantity == 20
        assert updated.average_price == 150.0

    def test_zero_quantity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Holding(symbol="AAPL", quantity=0, average_price=100.0)

    def test_cost_basis(self) -> None:
        assert Holding(symbol="AAPL", quantity=4, average_price=25.0).cost_basis() == 100.0


# =============================================================================
# ID GENERATOR
# =============================================================================


class TestSequentialIdGenerator:

    def test_sequence(self) -> None:
        gen = SequentialIdGenerator("pending")
        assert [gen(), gen(), gen()] == ["pending-1", "pending-2", "pending-3"]

    def test_instances_are_independent(self) -> None:
        a = SequentialIdGenerator("order")
        b = SequentialIdGenerator("order")
        a()
        assert b() == "order-1"

    def test_empty_prefix_rejected(self) -> None:
        with pytest.raises(ValueError):
            SequentialIdGenerator("")


# =============================================================================
# ERROR TESTS
# =============================================================================


ALL_ERRORS = [
    InsufficientBalance(required=1700.0, available=500.0),
    InsufficientShares(symbol="AAPL", required=10, available=4),
    OrderNotFound(order_id="pending-9"),
    OrderAlreadyCancelled(order_id="pending-1"),
    OrderAlreadyFilled(order_id="pending-2"),
    OrderExpired(order_id="pending-3"),
    StockNotFound(symbol="NOPE"),
]


class TestErrors:
    """Типизированные ошибки различимы и несут поля для сообщений."""

    def test_every_error_type_covered(self) -> None:
        assert {type(e) for e in ALL_ERRORS} == set(ERROR_TYPES)

    def test_tags_are_distinct(self) -> None:
        tags = [cls.tag for cls in ERROR_TYPES]
        assert len(tags) == len(set(tags))
        assert all(cls.tag == cls.__name__ for cls in ERROR_TYPES)

    @pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: e.tag)
    def test_errors_are_trading_errors(self, error: TradingError) -> None:
        assert isinstance(error, TradingError)
        assert isinstance(error, Exception)

    def test_insufficient_balance_fields(self) -> None:
        err = InsufficientBalance(required=1700.0, available=500.0)
        assert err.fields() == {"required": 1700.0, "available": 500.0}

    def test_insufficient_shares_fields(self) -> None:
        err = InsufficientShares(symbol="AAPL", required=10, available=4)
        assert err.fields() == {"symbol": "AAPL", "required": 10, "available": 4}

    def test_structural_equality(self) -> None:
        assert OrderNotFound("x") == OrderNotFound("x")
        assert OrderNotFound("x") != OrderNotFound("y")
        assert OrderNotFound("x") != OrderAlreadyCancelled("x")

    def test_pattern_matching(self) -> None:
        err: TradingError = InsufficientShares("AAPL", 10, 4)
        match err:
            case InsufficientShares(symbol, required, available):
                assert (symbol, required, available) == ("AAPL", 10, 4)
            case _:
                pytest.fail("InsufficientShares did not match")

    @pytest.mark.parametrize("error,expected", [
        (ALL_ERRORS[0], "Insufficient balance: 1,700.00 required, 500.00 available"),
        (ALL_ERRORS[1], "Insufficient shares of AAPL: 10 required, 4 available"),
        (ALL_ERRORS[2], "Order pending-9 was not found"),
        (ALL_ERRORS[3], "Order pending-1 is already cancelled"),
        (ALL_ERRORS[4], "Order pending-2 is already filled and cannot be cancelled"),
        (ALL_ERRORS[5], "Order pending-3 has expired"),
        (ALL_ERRORS[6], "Stock NOPE was not found"),
    ])
    def test_describe_error(self, error: TradingError, expected: str) -> None:
        assert describe_error(error) == expected

    def test_messages_are_distinct(self) -> None:
        messages = [describe_error(e) for e in ALL_ERRORS]
        assert len(messages) == len(set(messages))
