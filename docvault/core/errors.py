"""Иерархия ошибок слоя доступа к документам.

Все ошибки несут человекочитаемое сообщение и, если есть, классификацию
ошибки нижнего уровня (`kind`), которая уходит клиенту как `exceptionType`.
"""

from typing import Optional


class DocumentStoreError(Exception):
    """Базовая ошибка фасада хранилища"""

    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        return self.message


class MalformedInput(DocumentStoreError):
    """Пустое или невалидное тело запроса"""


class InvalidMarker(DocumentStoreError):
    """Маркер версии не является неотрицательным 64-битным целым"""


class NotFound(DocumentStoreError):
    """Нет документа, предыдущей ревизии или надгробия"""


class StoreFailure(DocumentStoreError):
    """Любая ошибка движка хранения"""
