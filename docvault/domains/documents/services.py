import json
import logging
from contextlib import aclosing
from typing import AsyncIterator, Optional, Union

from docvault.core.errors import MalformedInput, NotFound, StoreFailure
from docvault.domains.documents.engine import RevisionEngine
from docvault.domains.documents.entities import (
    DocumentView, EngineFault, Found, LookupResult, Missing, Revision,
    ScanEntry, ScanSummary
)
from docvault.domains.documents.marker import MAX_MARKER, VersionMarker

logger = logging.getLogger(__name__)

MAX_KEY_BYTES = 250


def reject_constant(name: str):
    """NaN и Infinity не являются валидным JSON"""
    raise ValueError(f"Unsupported JSON constant: {name}")


def render_content(revision: Revision) -> Optional[str]:
    """JSON-текст ревизии в отформатированном виде (None для надгробия)"""
    if revision.is_tombstone:
        return None
    return json.dumps(json.loads(revision.content), indent=2, ensure_ascii=False)


class DocumentStoreFacade:
    """Фасад версионированного хранилища документов.

    Каждая операция делает ровно одно обращение к движку (сканирование -
    один потоковый курсор) и не хранит состояния между запросами.
    Повторов нет: их делает вызывающая сторона, если нужно.
    """

    def __init__(self, engine: RevisionEngine, max_document_bytes: int = 20 * 1024 * 1024):
        self.engine = engine
        self.max_document_bytes = max_document_bytes

    async def put(self, key: str, body: Union[bytes, str, None]) -> DocumentView:
        """Запись документа как новой текущей ревизии (создает документ при необходимости)"""
        self._validate_key(key)
        content = self._parse_body(body)

        revision = self._unwrap(await self.engine.upsert(key, content), key)
        logger.info(f"Upserted document {key} at marker {revision.marker}")
        return DocumentView(key=key, marker=revision.marker)

    async def remove(self, key: str) -> DocumentView:
        """Удаление документа - в истории остается надгробие"""
        self._validate_key(key)
        revision = self._unwrap(
            await self.engine.remove(key),
            key,
            not_found=f"Document with id '{key}' not found",
        )
        logger.info(f"Removed document {key}, tombstone marker {revision.marker}")
        return DocumentView(key=key, marker=revision.marker)

    async def get_current(self, key: str) -> DocumentView:
        """Текущая ревизия документа"""
        revision = self._unwrap(
            await self.engine.get(key),
            key,
            not_found=f"Document with id '{key}' not found",
        )
        return DocumentView(key=key, marker=revision.marker, content=self._render(revision))

    async def get_before(self, key: str, raw_marker: Optional[str]) -> DocumentView:
        """Ревизия, непосредственно предшествующая маркеру.

        Если ревизии нет, это NotFound - нельзя отличить "никогда не было"
        от "история уже уплотнена движком".
        """
        marker = VersionMarker.parse(raw_marker)
        revision = self._unwrap(
            await self.engine.get_before(key, marker),
            key,
            not_found=f"No previous version found for document '{key}' before marker {marker}",
        )
        return DocumentView(key=key, marker=revision.marker, content=self._render(revision))

    async def get_tombstone(self, key: str) -> DocumentView:
        """Надгробие - последняя запись истории, если у нее нет значения"""
        revision = self._unwrap(
            await self.engine.get_before(key, MAX_MARKER),
            key,
            not_found=f"No previous version found for document '{key}'",
        )
        content = self._render(revision)
        if content:
            # История есть, но документ не удален
            raise NotFound(f"Document '{key}' is not deleted (no tombstone found)")
        return DocumentView(key=key, marker=revision.marker, content=content)

    async def iter_documents(self, prefix: str = "") -> AsyncIterator[ScanEntry]:
        """Ленивый проход по текущим ревизиям всех живых документов.

        Курсор открыт, пока генератор не исчерпан или не закрыт через aclose().
        Ошибка конвертации одного документа не прерывает проход.
        """
        async with self.engine.scan(prefix) as cursor:
            async for revision in cursor:
                try:
                    content = render_content(revision)
                except (TypeError, ValueError, RecursionError) as e:
                    logger.warning(f"Error processing document {revision.key}: {e}")
                    yield ScanEntry(key=revision.key, marker=revision.marker, error=str(e))
                else:
                    yield ScanEntry(key=revision.key, marker=revision.marker, content=content)

    async def scan_all(self) -> ScanSummary:
        """Полное сканирование коллекции"""
        logger.info("Starting scan of all documents")
        summary = ScanSummary()

        async with aclosing(self.iter_documents("")) as entries:
            async for entry in entries:
                summary.count += 1
                summary.entries.append(entry)

        logger.info(f"Scan complete, found {summary.count} document(s)")
        return summary

    async def ping(self) -> None:
        await self.engine.ping()

    def _validate_key(self, key: str) -> None:
        if not key:
            raise MalformedInput("Document id cannot be empty")
        if len(key.encode("utf-8")) > MAX_KEY_BYTES:
            raise MalformedInput(f"Document id exceeds {MAX_KEY_BYTES} bytes")

    def _parse_body(self, body: Union[bytes, str, None]) -> str:
        """Проверка тела запроса; возвращает компактный JSON-текст для хранения"""
        if isinstance(body, bytes):
            if len(body) > self.max_document_bytes:
                raise MalformedInput(f"Request body exceeds {self.max_document_bytes} bytes")
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedInput(f"Request body is not valid UTF-8: {e}", kind=type(e).__name__)

        if body is None or not body.strip():
            raise MalformedInput("Request body cannot be empty")
        if len(body.encode("utf-8")) > self.max_document_bytes:
            raise MalformedInput(f"Request body exceeds {self.max_document_bytes} bytes")

        try:
            document = json.loads(body, parse_constant=reject_constant)
        except (ValueError, RecursionError) as e:
            raise MalformedInput(f"Invalid JSON: {e}", kind=type(e).__name__)

        if document is None:
            raise MalformedInput("Invalid JSON format")

        return json.dumps(document, ensure_ascii=False, separators=(",", ":"))

    def _render(self, revision: Revision) -> Optional[str]:
        try:
            return render_content(revision)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error(f"Stored content of document {revision.key} cannot be decoded: {e}")
            raise StoreFailure(
                f"Stored content of document '{revision.key}' cannot be decoded: {e}",
                kind=type(e).__name__,
            )

    def _unwrap(self, result: LookupResult, key: str, not_found: Optional[str] = None) -> Revision:
        """Разбор варианта, который вернул движок"""
        if isinstance(result, Found):
            return result.revision
        if isinstance(result, Missing):
            raise NotFound(not_found or f"Document with id '{key}' not found")
        if isinstance(result, EngineFault):
            raise StoreFailure(result.message, kind=result.kind)
        raise TypeError(f"Unexpected engine result: {result!r}")
