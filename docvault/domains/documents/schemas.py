from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentWriteResponse(BaseModel):
    """Ответ на запись или удаление документа"""
    success: bool = True
    id: str
    marker: str


class DocumentResponse(BaseModel):
    """Ревизия документа; маркер всегда строкой"""
    success: bool = True
    id: str
    marker: str
    content: Optional[str] = None


class DocumentHistoryResponse(DocumentResponse):
    """Историческая ревизия или надгробие"""
    message: str


class ScanEntryResponse(BaseModel):
    success: bool
    id: str
    marker: str
    content: Optional[str] = None
    error: Optional[str] = None


class ScanResponse(BaseModel):
    success: bool = True
    count: int
    documents: List[ScanEntryResponse]


class ErrorResponse(BaseModel):
    """Конверт ошибки"""
    success: bool = False
    error: str
    exception_type: Optional[str] = Field(None, serialization_alias="exceptionType")

    model_config = ConfigDict(populate_by_name=True)


class StorageStatus(BaseModel):
    connected: bool


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    error: Optional[str] = None
    storage: Optional[StorageStatus] = None


class ServiceDescriptor(BaseModel):
    service: str
    version: str
    endpoints: List[str]
