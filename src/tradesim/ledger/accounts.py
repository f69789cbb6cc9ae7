"""
AccountLedger — денежные балансы пользователей

Единственный владелец балансов. Баланс никогда не становится отрицательным:
операция, которая увела бы его ниже нуля, отклоняется до мутации.
Каждый вызов атомарен относительно собственного read-then-write.

Балансы хранятся в Decimal с точностью до цента. Каждая сумма на входе
округляется до цента (ROUND_HALF_UP), поэтому debit(x) и credit(x) одной и
той же суммы взаимно обратны: отмена резерва возвращает баланс точно.
Наружу отдаются float.
"""

import logging
import math
import threading
from decimal import ROUND_HALF_UP, Decimal

from tradesim.core.domain.errors import InsufficientBalance

CENT = Decimal("0.01")


def to_cents(amount: float) -> Decimal:
    """
    Сумма → Decimal, округлённый до цента.

    Raises:
        ValueError: если сумма не конечная (NaN, inf)
    """
    if not math.isfinite(amount):
        raise ValueError(f"amount must be finite, got {amount}")
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


class AccountLedger:
    """Балансы пользователей (in-memory)."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self._balances: dict[str, Decimal] = {}
        self._lock = threading.RLock()

    def open_account(self, user_id: str, initial_balance: float) -> None:
        """
        Открытие (или сброс) счёта с начальным балансом.

        Raises:
            ValueError: если initial_balance < 0
        """
        self.set_balance(user_id, initial_balance)
        self.logger.debug("[LEDGER] account opened user=%s balance=%.2f", user_id, initial_balance)

    def get_balance(self, user_id: str) -> float:
        """Баланс пользователя (0.0 для неизвестного пользователя)."""
        with self._lock:
            return float(self._balances.get(user_id, Decimal(0)))

    def set_balance(self, user_id: str, new_balance: float) -> None:
        """
        Абсолютная установка баланса.

        Raises:
            ValueError: если new_balance < 0 или не конечный
        """
        if new_balance < 0:
            raise ValueError(f"balance must be non-negative, got {new_balance}")
        value = to_cents(new_balance)
        with self._lock:
            self._balances[user_id] = value

    def debit(self, user_id: str, amount: float) -> float:
        """
        Списание средств.

        Args:
            user_id: Пользователь
            amount: Сумма списания (>= 0, округляется до цента)

        Returns:
            Новый баланс

        Raises:
            InsufficientBalance: если баланс меньше суммы (без мутации)
            ValueError: если amount < 0 или не конечная
        """
        if amount < 0:
            raise ValueError(f"debit amount must be non-negative, got {amount}")
        value = to_cents(amount)
        with self._lock:
            balance = self._balances.get(user_id, Decimal(0))
            if balance < value:
                raise InsufficientBalance(required=float(value), available=float(balance))
            new_balance = balance - value
            self._balances[user_id] = new_balance
            return float(new_balance)

    def credit(self, user_id: str, amount: float) -> float:
        """
        Зачисление средств.

        Returns:
            Новый баланс

        Raises:
            ValueError: если amount < 0 или не конечная
        """
        if amount < 0:
            raise ValueError(f"credit amount must be non-negative, got {amount}")
        value = to_cents(amount)
        with self._lock:
            new_balance = self._balances.get(user_id, Decimal(0)) + value
            self._balances[user_id] = new_balance
            return float(new_balance)
