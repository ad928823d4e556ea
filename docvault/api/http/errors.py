import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from docvault.core.errors import DocumentStoreError, NotFound
from docvault.domains.documents.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def status_for(error: DocumentStoreError) -> int:
    """NotFound - 404, остальные ошибки фасада - 400"""
    if isinstance(error, NotFound):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


async def document_store_error_handler(request: Request, exc: DocumentStoreError) -> JSONResponse:
    """Преобразование ошибки фасада в конверт ответа"""
    logger.info(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}")
    body = ErrorResponse(error=exc.message, exception_type=exc.kind)
    return JSONResponse(
        status_code=status_for(exc),
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
