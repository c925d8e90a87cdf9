"""
ISK Import Data Models

Pure definitions -- no side effects, no imports of external services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class FileState(Enum):
    """Lifecycle states for one uploaded screenshot."""
    UPLOADED = 'UPLOADED'
    CROPPED = 'CROPPED'
    EXPORTED = 'EXPORTED'
    EXTRACT_FAILED = 'EXTRACT_FAILED'
    EXTRACTED = 'EXTRACTED'
    QUARANTINED = 'QUARANTINED'
    RECORDED = 'RECORDED'
    RENAMED = 'RENAMED'


class OutcomeStatus(Enum):
    """How a file ended up after a sweep."""
    PROCESSED = 'PROCESSED'
    QUARANTINED = 'QUARANTINED'
    ERRORED = 'ERRORED'


@dataclass(frozen=True)
class ImportContext:
    """Drive folder and spreadsheet IDs, resolved once at startup."""
    root_folder_id: str
    upload_folder_id: str
    processed_folder_id: str
    failed_folder_id: str
    report_folder_id: str
    sheet_id: str


@dataclass
class SourceFile:
    """A screenshot uploaded by a user into the UploadHere folder."""
    file_id: str
    name: str
    mime_type: str = ''
    parent_id: str = ''

    @classmethod
    def from_api(cls, item: Dict, parent_id: str = '') -> 'SourceFile':
        parents = item.get('parents') or []
        return cls(
            file_id=item['id'],
            name=item.get('name', ''),
            mime_type=item.get('mimeType', ''),
            parent_id=parents[0] if parents else parent_id,
        )


@dataclass
class DerivedDocument:
    """The Google Doc created from a cropped screenshot (the OCR result)."""
    file_id: str
    name: str
    parent_id: str = ''
    link: str = ''

    @classmethod
    def from_api(cls, item: Dict, parent_id: str = '') -> 'DerivedDocument':
        parents = item.get('parents') or []
        file_id = item['id']
        link = item.get('webViewLink') or f"https://docs.google.com/document/d/{file_id}/edit"
        return cls(
            file_id=file_id,
            name=item.get('name', ''),
            parent_id=parents[0] if parents else parent_id,
            link=link,
        )


@dataclass(frozen=True)
class ExtractedRecord:
    """Fields pulled out of the OCR text of one donation screenshot."""
    date: str
    member: str
    quantity: str


@dataclass
class AppendResult:
    """What came back from appending one report row."""
    checksum: str
    updated_range: str = ''
    row_id: Optional[int] = None
    parse_error: str = ''


@dataclass
class FileOutcome:
    """Result of processing a single uploaded file."""
    source_id: str
    source_name: str
    status: OutcomeStatus
    state: FileState
    record: Optional[ExtractedRecord] = None
    row_id: Optional[int] = None
    checksum: str = ''
    final_name: str = ''
    location: Optional[str] = None
    error: str = ''

    @property
    def renamed(self) -> bool:
        return self.state == FileState.RENAMED

    def to_dict(self) -> Dict:
        return {
            'source_id': self.source_id,
            'source_name': self.source_name,
            'status': self.status.value,
            'state': self.state.value,
            'date': self.record.date if self.record else None,
            'member': self.record.member if self.record else None,
            'quantity': self.record.quantity if self.record else None,
            'row_id': self.row_id,
            'checksum': self.checksum or None,
            'final_name': self.final_name or None,
            'location': self.location,
            'error': self.error or None,
        }


@dataclass
class RunSummary:
    """Aggregated outcome of one sweep of the UploadHere folder."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    outcomes: List[FileOutcome] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def processed(self) -> int:
        return self._count(OutcomeStatus.PROCESSED)

    @property
    def quarantined(self) -> int:
        return self._count(OutcomeStatus.QUARANTINED)

    @property
    def errored(self) -> int:
        return self._count(OutcomeStatus.ERRORED)

    @property
    def unrenamed(self) -> int:
        """Recorded in the sheet, but the row id could not be recovered."""
        return sum(
            1 for o in self.outcomes
            if o.status == OutcomeStatus.PROCESSED and not o.renamed
        )

    def to_dict(self) -> Dict:
        return {
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
            'total': self.total,
            'processed': self.processed,
            'quarantined': self.quarantined,
            'errored': self.errored,
            'unrenamed': self.unrenamed,
            'files': [o.to_dict() for o in self.outcomes],
        }
