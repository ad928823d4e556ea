"""
Фикстуры тестов: временная SQLite-база, репозиторий ревизий, фасад и
TestClient поверх приложения с той же базой.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from docvault.config import Settings
from docvault.core.db import create_engine, create_session_factory, init_models
from docvault.db.repositories import RevisionRepository
from docvault.domains.documents.services import DocumentStoreFacade
from docvault.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'docvault.db'}",
        collection="test",
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine(settings)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def repository(session_factory, settings):
    return RevisionRepository(session_factory, collection=settings.collection)


@pytest.fixture
def store(repository):
    return DocumentStoreFacade(repository)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client
