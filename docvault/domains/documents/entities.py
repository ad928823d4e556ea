from dataclasses import dataclass, field
from typing import List, Optional, Union

from docvault.domains.documents.marker import VersionMarker


@dataclass(frozen=True)
class Revision:
    """Ревизия документа: JSON-текст значения (None для надгробия) и маркер"""
    key: str
    marker: VersionMarker
    content: Optional[str] = None

    @property
    def is_tombstone(self) -> bool:
        return self.content is None


# Результаты обращения к движку хранения
@dataclass(frozen=True)
class Found:
    revision: Revision


@dataclass(frozen=True)
class Missing:
    key: str


@dataclass(frozen=True)
class EngineFault:
    message: str
    kind: str


LookupResult = Union[Found, Missing, EngineFault]


@dataclass(frozen=True)
class DocumentView:
    """Документ в том виде, в котором его отдает фасад"""
    key: str
    marker: VersionMarker
    content: Optional[str] = None


@dataclass(frozen=True)
class ScanEntry:
    """Результат обработки одного документа при сканировании"""
    key: str
    marker: VersionMarker
    content: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class ScanSummary:
    count: int = 0
    entries: List[ScanEntry] = field(default_factory=list)
