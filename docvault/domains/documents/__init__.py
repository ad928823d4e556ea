from docvault.domains.documents.entities import (
    Revision, Found, Missing, EngineFault, LookupResult,
    DocumentView, ScanEntry, ScanSummary
)
from docvault.domains.documents.marker import VersionMarker, MAX_MARKER, MAX_MARKER_VALUE
from docvault.domains.documents.schemas import (
    DocumentWriteResponse, DocumentResponse, DocumentHistoryResponse,
    ScanEntryResponse, ScanResponse, ErrorResponse, HealthResponse,
    StorageStatus, ServiceDescriptor
)
from docvault.domains.documents.services import DocumentStoreFacade

__all__ = [
    "Revision", "Found", "Missing", "EngineFault", "LookupResult",
    "DocumentView", "ScanEntry", "ScanSummary",
    "VersionMarker", "MAX_MARKER", "MAX_MARKER_VALUE",
    "DocumentWriteResponse", "DocumentResponse", "DocumentHistoryResponse",
    "ScanEntryResponse", "ScanResponse", "ErrorResponse", "HealthResponse",
    "StorageStatus", "ServiceDescriptor",
    "DocumentStoreFacade"
]
