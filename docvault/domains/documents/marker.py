"""Маркер версии документа.

Маркер - непрозрачное 64-битное число, которое движок хранения присваивает
каждой ревизии. Для одного ключа маркеры строго возрастают, поэтому ими
можно пользоваться как курсором по истории. Клиентам маркер отдается
десятичной строкой, чтобы не терять точность в JavaScript.
"""

import time
from dataclasses import dataclass
from typing import Optional

from docvault.core.errors import InvalidMarker

MAX_MARKER_VALUE = 2 ** 64 - 1


@dataclass(frozen=True, order=True)
class VersionMarker:
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= MAX_MARKER_VALUE:
            raise InvalidMarker(f"Marker out of range: {self.value}")

    @classmethod
    def parse(cls, raw: Optional[str]) -> "VersionMarker":
        """Разбор десятичной строки, пришедшей от клиента"""
        if raw is None or raw == "":
            raise InvalidMarker("Marker value is required")
        # str.isdigit пропускает не-ASCII цифры
        if not (raw.isascii() and raw.isdigit()):
            raise InvalidMarker(f"Invalid marker value: {raw}")

        value = int(raw)
        if value > MAX_MARKER_VALUE:
            raise InvalidMarker(f"Invalid marker value: {raw}")
        return cls(value)

    @classmethod
    def next_after(cls, previous: Optional["VersionMarker"]) -> "VersionMarker":
        """Следующий маркер для ключа: время в наносекундах, но строго больше предыдущего"""
        candidate = time.time_ns()
        if previous is not None and candidate <= previous.value:
            candidate = previous.value + 1
        return cls(candidate)

    def __str__(self) -> str:
        return str(self.value)


# "Самая свежая точка истории" - используется для поиска надгробий
MAX_MARKER = VersionMarker(MAX_MARKER_VALUE)
