from typing import AsyncContextManager, AsyncIterator, Protocol

from docvault.domains.documents.entities import LookupResult, Revision
from docvault.domains.documents.marker import VersionMarker


class RevisionEngine(Protocol):
    """Граница с движком хранения, которая нужна фасаду.

    Точечные операции не бросают исключений на уровне движка, а возвращают
    `Found` / `Missing` / `EngineFault`. Сканирование и ping бросают
    `StoreFailure`, если движок недоступен.
    """

    async def upsert(self, key: str, content: str) -> LookupResult:
        ...

    async def remove(self, key: str) -> LookupResult:
        ...

    async def get(self, key: str) -> LookupResult:
        ...

    async def get_before(self, key: str, marker: VersionMarker) -> LookupResult:
        ...

    def scan(self, prefix: str = "") -> AsyncContextManager[AsyncIterator[Revision]]:
        ...

    async def ping(self) -> None:
        ...
