from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from docvault.api.deps import get_document_store
from docvault.domains.documents.schemas import (
    DocumentHistoryResponse, DocumentResponse, DocumentWriteResponse,
    ScanEntryResponse, ScanResponse
)
from docvault.domains.documents.services import DocumentStoreFacade

router = APIRouter(prefix="/api/documents", tags=["documents"])


# Должен быть объявлен до /{document_id}, иначе "all" уйдет как id
@router.get("/all", response_model=ScanResponse, response_model_exclude_none=True)
async def get_all_documents(store: DocumentStoreFacade = Depends(get_document_store)):
    """Все документы коллекции"""
    summary = await store.scan_all()

    return ScanResponse(
        count=summary.count,
        documents=[
            ScanEntryResponse(
                success=entry.success,
                id=entry.key,
                marker=str(entry.marker),
                content=entry.content,
                error=entry.error
            )
            for entry in summary.entries
        ]
    )


@router.post("/{document_id}", response_model=DocumentWriteResponse)
async def upsert_document(
    document_id: str,
    request: Request,
    store: DocumentStoreFacade = Depends(get_document_store)
):
    """Вставка или обновление документа; тело - произвольный JSON"""
    body = await request.body()
    written = await store.put(document_id, body)

    return DocumentWriteResponse(id=written.key, marker=str(written.marker))


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    store: DocumentStoreFacade = Depends(get_document_store)
):
    """Текущая версия документа"""
    document = await store.get_current(document_id)

    return DocumentResponse(
        id=document.key,
        marker=str(document.marker),
        content=document.content
    )


@router.delete("/{document_id}", response_model=DocumentWriteResponse)
async def remove_document(
    document_id: str,
    store: DocumentStoreFacade = Depends(get_document_store)
):
    """Удаление документа (в истории остается надгробие)"""
    removed = await store.remove(document_id)

    return DocumentWriteResponse(id=removed.key, marker=str(removed.marker))


@router.get("/{document_id}/before", response_model=DocumentHistoryResponse)
async def get_document_before(
    document_id: str,
    marker: Optional[str] = Query(None),
    store: DocumentStoreFacade = Depends(get_document_store)
):
    """Предыдущая версия документа относительно маркера"""
    document = await store.get_before(document_id, marker)

    return DocumentHistoryResponse(
        id=document.key,
        marker=str(document.marker),
        content=document.content,
        message=f"Retrieved version before marker {marker}"
    )


@router.get("/{document_id}/tombstone", response_model=DocumentHistoryResponse)
async def get_document_tombstone(
    document_id: str,
    store: DocumentStoreFacade = Depends(get_document_store)
):
    """Надгробие удаленного документа"""
    tombstone = await store.get_tombstone(document_id)

    return DocumentHistoryResponse(
        id=tombstone.key,
        marker=str(tombstone.marker),
        content=tombstone.content,
        message="Retrieved tombstone"
    )
