from fastapi import Request

from docvault.domains.documents.services import DocumentStoreFacade


def get_document_store(request: Request) -> DocumentStoreFacade:
    """Фасад, созданный при старте приложения (один на процесс)"""
    return request.app.state.document_store
