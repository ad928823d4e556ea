import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import and_, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docvault.core.errors import StoreFailure
from docvault.db.models.revision import DocumentRevision as RevisionModel
from docvault.domains.documents.entities import (
    EngineFault, Found, LookupResult, Missing, Revision
)
from docvault.domains.documents.marker import VersionMarker

logger = logging.getLogger(__name__)

# Верхняя граница BIGINT; маркеры выше нее означают "без ограничения сверху"
SQL_BIGINT_MAX = 2 ** 63 - 1


class RevisionRepository:
    """Движок хранения ревизий поверх SQLAlchemy.

    Каждая запись добавляет строку, история не удаляется. Репозиторий
    держит общую фабрику сессий и открывает короткую сессию на каждый вызов.
    """

    def __init__(self, session_factory: async_sessionmaker, collection: str = "_default"):
        self.session_factory = session_factory
        self.collection = collection

    async def upsert(self, key: str, content: str) -> LookupResult:
        """Новая текущая ревизия документа"""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    latest = await self._latest(session, key)
                    marker = VersionMarker.next_after(self._marker_of(latest))
                    session.add(self._new_row(key, marker, content))
            return Found(Revision(key=key, marker=marker, content=content))
        except SQLAlchemyError as e:
            return self._fault("upsert", key, e)

    async def remove(self, key: str) -> LookupResult:
        """Надгробие поверх живого документа"""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    latest = await self._latest(session, key)
                    if latest is None or latest.deleted:
                        return Missing(key)
                    marker = VersionMarker.next_after(self._marker_of(latest))
                    session.add(self._new_row(key, marker, None))
            return Found(Revision(key=key, marker=marker))
        except SQLAlchemyError as e:
            return self._fault("remove", key, e)

    async def get(self, key: str) -> LookupResult:
        """Текущая ревизия; удаленный документ считается отсутствующим"""
        try:
            async with self.session_factory() as session:
                latest = await self._latest(session, key)
        except SQLAlchemyError as e:
            return self._fault("get", key, e)

        if latest is None or latest.deleted:
            return Missing(key)
        return Found(self._to_domain(latest))

    async def get_before(self, key: str, marker: VersionMarker) -> LookupResult:
        """Ревизия, непосредственно предшествующая маркеру (надгробия включительно)"""
        query = (
            select(RevisionModel)
            .where(
                RevisionModel.collection == self.collection,
                RevisionModel.key == key,
            )
            .order_by(RevisionModel.marker.desc())
            .limit(1)
        )
        if marker.value <= SQL_BIGINT_MAX:
            query = query.where(RevisionModel.marker < marker.value)

        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                row = result.scalars().first()
        except SQLAlchemyError as e:
            return self._fault("get_before", key, e)

        if row is None:
            return Missing(key)
        return Found(self._to_domain(row))

    @asynccontextmanager
    async def scan(self, prefix: str = "") -> AsyncIterator[AsyncIterator[Revision]]:
        """Потоковый курсор по текущим ревизиям живых документов с данным префиксом.

        Курсор закрывается при любом выходе из контекста.
        """
        latest = (
            select(RevisionModel.key, func.max(RevisionModel.marker).label("marker"))
            .where(RevisionModel.collection == self.collection)
            .group_by(RevisionModel.key)
            .subquery()
        )
        query = (
            select(RevisionModel)
            .join(latest, and_(
                RevisionModel.key == latest.c.key,
                RevisionModel.marker == latest.c.marker,
            ))
            .where(
                RevisionModel.collection == self.collection,
                RevisionModel.deleted.is_(False),
            )
            .order_by(RevisionModel.key)
        )
        if prefix:
            query = query.where(RevisionModel.key.startswith(prefix, autoescape=True))

        async with AsyncExitStack() as stack:
            try:
                session = await stack.enter_async_context(self.session_factory())
                result = await session.stream(query)
            except SQLAlchemyError as e:
                logger.error(f"Cannot start scan of collection {self.collection}: {e}")
                raise StoreFailure(str(e), kind=type(e).__name__) from e

            rows = self._iterate(result.scalars())
            try:
                yield rows
            finally:
                await rows.aclose()
                await result.close()

    async def ping(self) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreFailure(str(e), kind=type(e).__name__) from e

    async def _iterate(self, rows) -> AsyncIterator[Revision]:
        try:
            async for row in rows:
                yield self._to_domain(row)
        except SQLAlchemyError as e:
            logger.error(f"Scan of collection {self.collection} interrupted: {e}")
            raise StoreFailure(str(e), kind=type(e).__name__) from e

    async def _latest(self, session: AsyncSession, key: str) -> Optional[RevisionModel]:
        result = await session.execute(
            select(RevisionModel)
            .where(
                RevisionModel.collection == self.collection,
                RevisionModel.key == key,
            )
            .order_by(RevisionModel.marker.desc())
            .limit(1)
        )
        return result.scalars().first()

    def _new_row(self, key: str, marker: VersionMarker, content: Optional[str]) -> RevisionModel:
        return RevisionModel(
            collection=self.collection,
            key=key,
            marker=marker.value,
            content=content,
            deleted=content is None,
        )

    @staticmethod
    def _marker_of(row: Optional[RevisionModel]) -> Optional[VersionMarker]:
        return VersionMarker(row.marker) if row is not None else None

    def _fault(self, operation: str, key: str, error: SQLAlchemyError) -> EngineFault:
        logger.error(f"Engine error during {operation} of {key}: {error}")
        return EngineFault(message=str(error), kind=type(error).__name__)

    def _to_domain(self, row: RevisionModel) -> Revision:
        """Преобразование модели БД в доменную ревизию"""
        return Revision(
            key=row.key,
            marker=VersionMarker(row.marker),
            content=None if row.deleted else row.content,
        )
