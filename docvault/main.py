import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docvault.api.http import documents_router, health_router
from docvault.api.http.errors import document_store_error_handler
from docvault.config import Settings, get_settings
from docvault.core.db import create_engine, create_session_factory, init_models
from docvault.core.errors import DocumentStoreError
from docvault.core.logging import configure_logging
from docvault.db.repositories import RevisionRepository
from docvault.domains.documents.schemas import ServiceDescriptor
from docvault.domains.documents.services import DocumentStoreFacade

logger = logging.getLogger(__name__)

ENDPOINTS = [
    "GET    /health - Health check endpoint",
    "POST   /api/documents/{id} - Upsert a document",
    "GET    /api/documents/{id} - Get a document",
    "DELETE /api/documents/{id} - Remove a document (leaves a tombstone)",
    "GET    /api/documents/{id}/tombstone - Get a tombstone (deleted document)",
    "GET    /api/documents/{id}/before?marker={marker} - Get previous version of a document",
    "GET    /api/documents/all - Get all documents in the collection",
]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Одно подключение к хранилищу на весь процесс
        engine = create_engine(settings)
        await init_models(engine)
        repository = RevisionRepository(create_session_factory(engine), collection=settings.collection)
        app.state.document_store = DocumentStoreFacade(
            repository,
            max_document_bytes=settings.max_document_bytes
        )
        logger.info(f"Connected to {engine.url.render_as_string(hide_password=True)}, collection {settings.collection}")
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(
        title=settings.service_name,
        description="HTTP facade over a versioned document store",
        version=settings.service_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DocumentStoreError, document_store_error_handler)

    app.include_router(health_router)
    app.include_router(documents_router)

    @app.get("/", response_model=ServiceDescriptor)
    async def root():
        """Описание сервиса"""
        return ServiceDescriptor(
            service=settings.service_name,
            version=settings.service_version,
            endpoints=ENDPOINTS
        )

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("docvault.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
