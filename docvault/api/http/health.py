import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from docvault.api.deps import get_document_store
from docvault.domains.documents.schemas import HealthResponse, StorageStatus
from docvault.domains.documents.services import DocumentStoreFacade

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, response_model_exclude_none=True)
async def health(store: DocumentStoreFacade = Depends(get_document_store)):
    """Проверка живости; всегда 200, даже если хранилище недоступно"""
    try:
        await store.ping()
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        return HealthResponse(
            status="unhealthy",
            timestamp=datetime.now(timezone.utc),
            error=str(e),
            storage=StorageStatus(connected=False),
        )

    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))
