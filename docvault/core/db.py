from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from docvault.config import Settings
from docvault.db.base import Base
import docvault.db.models  # noqa: F401  регистрирует модели в Base.metadata


def create_engine(settings: Settings) -> AsyncEngine:
    """Асинхронный движок - один на процесс"""
    return create_async_engine(settings.database_url, future=True, echo=settings.database_echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Фабрика сессий поверх общего движка"""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Создание таблиц, если их еще нет"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
