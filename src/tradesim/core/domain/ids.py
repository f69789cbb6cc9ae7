"""
Генераторы идентификаторов и часы.

Идентификаторы и время инжектируются в сервисы, чтобы несколько экземпляров
движка не конфликтовали по id, а тесты управляли последовательностью и временем.
"""

import itertools
import threading
import time
from typing import Callable

IdGenerator = Callable[[], str]
Clock = Callable[[], int]


class SequentialIdGenerator:
    """
    Монотонный счётчик id вида '<prefix>-<n>'.

    Счётчик принадлежит экземпляру, а не модулю.
    """

    def __init__(self, prefix: str, start: int = 1):
        if not prefix:
            raise ValueError("prefix must be non-empty")
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}-{n}"


def utc_now_ms() -> int:
    """Текущее время UTC в миллисекундах."""
    return time.time_ns() // 1_000_000
