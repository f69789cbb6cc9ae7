"""
Tests for JSON Schema Contract Validators

Комплексное тестирование контрактов, которые ядро отдаёт наружу:
- Валидность самих схем
- Валидация сериализованных Order и MatchResult
- Детекция нарушений required полей, типов и enum
- Условные правила (limit/stop цены по типу, timestamps по статусу)
- Разрешение $ref между схемами
"""

import json

import pytest
from jsonschema import Draft202012Validator, ValidationError

from tradesim.core.contracts import (
    MatchResultValidator,
    OrderValidator,
    SchemaLoader,
    order_to_contract,
    validate_match_result,
    validate_order,
)
from tradesim.core.domain import ExecutionType, Order, OrderSide, OrderStatus
from tradesim.matching import MatchResult

T0 = 1_700_000_000_000


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def pending_order() -> Order:
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
        created_ts_utc_ms=T0,
        expires_ts_utc_ms=T0 + 86_400_000,
    )


@pytest.fixture
def filled_order(pending_order: Order) -> Order:
    return pending_order.transition_to(OrderStatus.FILLED, T0 + 1_000, fill_price=168.0)


@pytest.fixture
def valid_order_data(pending_order: Order) -> dict:
    return order_to_contract(pending_order)


# =============================================================================
# SCHEMA LOADING
# =============================================================================


class TestSchemaLoader:

    @pytest.mark.parametrize("name", ["order", "match_result"])
    def test_schemas_are_valid(self, name: str) -> None:
        schema = SchemaLoader().load_schema(name)
        Draft202012Validator.check_schema(schema)
        assert schema["title"] == name

    def test_schema_cached(self) -> None:
        loader = SchemaLoader()
        assert loader.load_schema("order") is loader.load_schema("order")

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does_not_exist")

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(RuntimeError):
            SchemaLoader(tmp_path / "nope")

    def test_invalid_schema_rejected(self, tmp_path) -> None:
        (tmp_path / "broken.json").write_text('{"type": 42}', encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON Schema"):
            SchemaLoader(tmp_path).load_schema("broken")


# =============================================================================
# ORDER CONTRACT
# =============================================================================


class TestOrderContract:

    def test_pending_order_valid(self, valid_order_data: dict) -> None:
        validate_order(valid_order_data)

    def test_filled_order_valid(self, filled_order: Order) -> None:
        data = order_to_contract(filled_order)
        assert data["status"] == "filled"
        assert data["price"] == 168.0
        validate_order(data)

    def test_market_order_valid(self) -> None:
        order = Order(
            order_id="order-1",
            user_id="user-1",
            symbol="MSFT",
            side=OrderSide.SELL,
            execution_type=ExecutionType.MARKET,
            quantity=3,
            price=378.9,
            status=OrderStatus.FILLED,
            created_ts_utc_ms=T0,
            filled_ts_utc_ms=T0,
        )
        validate_order(order_to_contract(order))

    def test_enums_serialized_as_values(self, valid_order_data: dict) -> None:
        assert valid_order_data["side"] == "buy"
        assert valid_order_data["execution_type"] == "limit"
        assert valid_order_data["status"] == "pending"

    @pytest.mark.parametrize("field", ["order_id", "user_id", "symbol", "quantity", "status"])
    def test_missing_required_field(self, valid_order_data: dict, field: str) -> None:
        del valid_order_data[field]
        with pytest.raises(ValidationError):
            validate_order(valid_order_data)

    @pytest.mark.parametrize("field,value", [
        ("side", "short"),
        ("execution_type", "trailing_stop"),
        ("status", "partially_filled"),
        ("quantity", 0),
        ("quantity", 1.5),
        ("price", 0),
        ("price", "178.5"),
    ])
    def test_invalid_values(self, valid_order_data: dict, field: str, value) -> None:
        valid_order_data[field] = value
        with pytest.raises(ValidationError):
            validate_order(valid_order_data)

    def test_unknown_field_rejected(self, valid_order_data: dict) -> None:
        valid_order_data["leverage"] = 10
        assert not OrderValidator().is_valid(valid_order_data)

    def test_limit_without_limit_price(self, valid_order_data: dict) -> None:
        valid_order_data["limit_price"] = None
        with pytest.raises(ValidationError):
            validate_order(valid_order_data)

    def test_stop_without_stop_price(self, valid_order_data: dict) -> None:
        valid_order_data["execution_type"] = "stop"
        with pytest.raises(ValidationError):
            validate_order(valid_order_data)

    def test_filled_without_timestamp(self, filled_order: Order) -> None:
        data = order_to_contract(filled_order)
        data["filled_ts_utc_ms"] = None
        with pytest.raises(ValidationError):
            validate_order(data)

    def test_iter_errors_reports_all(self, valid_order_data: dict) -> None:
        valid_order_data["side"] = "short"
        valid_order_data["quantity"] = -1
        errors = list(OrderValidator().iter_errors(valid_order_data))
        assert len(errors) == 2

    def test_violations_listed_by_path(self, valid_order_data: dict) -> None:
        validator = OrderValidator()
        assert validator.violations(valid_order_data) == []

        valid_order_data["side"] = "short"
        valid_order_data["quantity"] = -1
        violations = validator.violations(valid_order_data)
        assert len(violations) == 2
        assert violations[0].startswith("$.quantity: ")
        assert violations[1].startswith("$.side: ")

    def test_custom_schema_dir(self, tmp_path) -> None:
        schema = {
            "$schema": "https://json-schema.org/draft/2020-12/schema",
            "$id": "https://tradesim.local/schema/order.json",
            "type": "object",
            "required": ["order_id"],
        }
        (tmp_path / "order.json").write_text(json.dumps(schema), encoding="utf-8")
        validator = OrderValidator(SchemaLoader(tmp_path))
        assert validator.is_valid({"order_id": "x"})
        assert not validator.is_valid({})


# =============================================================================
# MATCH RESULT CONTRACT
# =============================================================================


class TestMatchResultContract:

    def test_empty_result_valid(self) -> None:
        validate_match_result(MatchResult().model_dump(mode="json"))

    def test_result_with_fills_valid(self, filled_order: Order) -> None:
        result = MatchResult(filled=[filled_order], expired=["pending-2"])
        validate_match_result(result.model_dump(mode="json"))

    def test_pending_order_in_filled_rejected(self, pending_order: Order) -> None:
        data = {"filled": [order_to_contract(pending_order)], "expired": []}
        with pytest.raises(ValidationError):
            validate_match_result(data)

    def test_nested_order_checked_via_ref(self, filled_order: Order) -> None:
        bad = order_to_contract(filled_order)
        del bad["symbol"]
        assert not MatchResultValidator().is_valid({"filled": [bad], "expired": []})

    def test_duplicate_expired_ids_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_match_result({"filled": [], "expired": ["pending-1", "pending-1"]})

    def test_missing_expired_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_match_result({"filled": []})
