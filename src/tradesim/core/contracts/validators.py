"""
Контракты данных, которые движок отдаёт наружу

Ордера и результаты тиков уходят в UI state как JSON. Форма этих данных
зафиксирована JSON Schema (Draft 2020-12) в tradesim/core/contracts/schema/:

- order.json        ордер в любом статусе
- match_result.json результат evaluate_orders, filled ссылается на order.json

Схемы читаются один раз на процесс; $ref между файлами разрешается через
referencing.Registry, собранный по $id всех схем каталога.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator
from referencing import Registry, Resource

from tradesim.core.domain.order import Order

SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """Чтение схем каталога и сборка registry для $ref."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._registry: Registry | None = None

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Схема по имени файла без .json.

        Raises:
            FileNotFoundError: файла нет
            ValueError: файл не проходит meta-validation Draft 2020-12
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        path = self._schema_dir / f"{schema_name}.json"
        if not path.exists():
            raise FileNotFoundError(f"Schema not found: {path}")
        schema = json.loads(path.read_text(encoding="utf-8"))

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e

        self._schemas[schema_name] = schema
        return schema

    def registry(self) -> Registry:
        """Registry всех схем каталога, ключ — $id схемы."""
        if self._registry is None:
            schemas = [self.load_schema(p.stem) for p in sorted(self._schema_dir.glob("*.json"))]
            self._registry = Registry().with_resources(
                (s["$id"], Resource.from_contents(s)) for s in schemas
            )
        return self._registry


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Проверка dict против одной схемы каталога."""

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        loader = loader or _SCHEMA_LOADER
        self.schema_name = schema_name
        self.schema = loader.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema, registry=loader.registry())

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: первое найденное нарушение контракта
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[jsonschema.ValidationError]:
        return self.validator.iter_errors(data)

    def violations(self, data: Dict[str, Any]) -> list[str]:
        """
        Все нарушения в виде строк '<json path>: <сообщение>' (для логов).

        Пустой список означает, что данные соответствуют контракту.
        """
        errors = sorted(self.iter_errors(data), key=lambda e: e.json_path)
        return [f"{e.json_path}: {e.message}" for e in errors]


class OrderValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__("order", loader)


class MatchResultValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__("match_result", loader)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def order_to_contract(order: Order) -> Dict[str, Any]:
    """Order → JSON-совместимый dict (enum как строковые значения)."""
    return order.model_dump(mode="json")


def validate_order(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: данные не соответствуют order.json
    """
    OrderValidator().validate(data)


def validate_match_result(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: данные не соответствуют match_result.json
    """
    MatchResultValidator().validate(data)
