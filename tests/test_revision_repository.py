"""Тесты SQLAlchemy-движка ревизий."""

import pytest
from contextlib import aclosing
from unittest.mock import MagicMock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from docvault.core.errors import StoreFailure
from docvault.db.models import DocumentRevision
from docvault.db.repositories import RevisionRepository
from docvault.domains.documents.entities import EngineFault, Found, Missing
from docvault.domains.documents.marker import MAX_MARKER, VersionMarker


async def collect(repository, prefix=""):
    async with repository.scan(prefix) as cursor:
        return [revision async for revision in cursor]


@pytest.mark.asyncio
async def test_upsert_creates_and_advances_marker(repository):
    first = await repository.upsert("doc", '{"v":1}')
    second = await repository.upsert("doc", '{"v":2}')

    assert isinstance(first, Found) and isinstance(second, Found)
    assert second.revision.marker > first.revision.marker

    current = await repository.get("doc")
    assert current == Found(second.revision)


@pytest.mark.asyncio
async def test_get_unknown_key_is_missing(repository):
    assert await repository.get("nope") == Missing("nope")


@pytest.mark.asyncio
async def test_get_before_walks_history(repository):
    first = (await repository.upsert("doc", '{"v":1}')).revision
    second = (await repository.upsert("doc", '{"v":2}')).revision

    previous = await repository.get_before("doc", second.marker)
    assert previous == Found(first)
    assert await repository.get_before("doc", first.marker) == Missing("doc")


@pytest.mark.asyncio
async def test_get_before_max_marker_returns_latest_entry(repository):
    await repository.upsert("doc", '{"v":1}')
    second = (await repository.upsert("doc", '{"v":2}')).revision

    assert await repository.get_before("doc", MAX_MARKER) == Found(second)


@pytest.mark.asyncio
async def test_remove_leaves_tombstone(repository):
    await repository.upsert("doc", '{"v":1}')
    removed = await repository.remove("doc")

    assert isinstance(removed, Found)
    assert removed.revision.is_tombstone
    assert await repository.get("doc") == Missing("doc")

    latest = await repository.get_before("doc", MAX_MARKER)
    assert latest == Found(removed.revision)


@pytest.mark.asyncio
async def test_remove_missing_or_deleted_document(repository):
    assert await repository.remove("ghost") == Missing("ghost")

    await repository.upsert("doc", "1")
    await repository.remove("doc")
    assert await repository.remove("doc") == Missing("doc")


@pytest.mark.asyncio
async def test_scan_returns_live_current_revisions(repository):
    await repository.upsert("a", '{"n":1}')
    await repository.upsert("b", '{"n":1}')
    latest_b = (await repository.upsert("b", '{"n":2}')).revision
    await repository.upsert("c", '{"n":1}')
    await repository.remove("c")

    revisions = await collect(repository)

    assert [r.key for r in revisions] == ["a", "b"]
    assert revisions[1] == latest_b


@pytest.mark.asyncio
async def test_scan_with_prefix(repository):
    for key in ("user:1", "user:2", "order:1", "user%x"):
        await repository.upsert(key, "{}")

    revisions = await collect(repository, prefix="user:")
    assert [r.key for r in revisions] == ["user:1", "user:2"]


@pytest.mark.asyncio
async def test_collections_are_isolated(session_factory, repository):
    other = RevisionRepository(session_factory, collection="other")
    await repository.upsert("doc", '{"here":true}')

    assert await other.get("doc") == Missing("doc")
    assert await collect(other) == []


@pytest.mark.asyncio
async def test_scan_early_exit_releases_cursor(repository):
    for key in ("a", "b", "c"):
        await repository.upsert(key, "{}")

    async with repository.scan() as cursor:
        async with aclosing(cursor) as rows:
            async for revision in rows:
                assert revision.key == "a"
                break

    # После раннего выхода база доступна для записи
    assert isinstance(await repository.upsert("d", "{}"), Found)
    assert len(await collect(repository)) == 4


@pytest.mark.asyncio
async def test_stored_rows_keep_marker_and_flag(session_factory, repository):
    written = (await repository.upsert("doc", '{"v":1}')).revision
    await repository.remove("doc")

    async with session_factory() as session:
        result = await session.execute(
            select(DocumentRevision).order_by(DocumentRevision.marker)
        )
        rows = result.scalars().all()

    assert [(row.deleted, row.content) for row in rows] == [(False, '{"v":1}'), (True, None)]
    assert rows[0].marker == written.marker.value
    assert all(row.collection == "test" for row in rows)


def broken_factory():
    factory = MagicMock()
    factory.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    return factory


@pytest.mark.asyncio
async def test_engine_errors_become_faults():
    repository = RevisionRepository(broken_factory())

    for result in (
        await repository.upsert("doc", "{}"),
        await repository.get("doc"),
        await repository.get_before("doc", VersionMarker(10)),
        await repository.remove("doc"),
    ):
        assert isinstance(result, EngineFault)
        assert result.kind == "OperationalError"
        assert "connection refused" in result.message


@pytest.mark.asyncio
async def test_scan_and_ping_raise_store_failure():
    repository = RevisionRepository(broken_factory())

    with pytest.raises(StoreFailure):
        await repository.ping()

    with pytest.raises(StoreFailure):
        async with repository.scan():
            pass
