"""Record models for migrated API definitions."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime


class RecordStatus(str, Enum):
    """Status of an API record during migration."""
    EXTRACTED = "extracted"
    SKIPPED = "skipped"
    FAILED = "failed"
    MIGRATED = "migrated"

    @property
    def is_terminal(self) -> bool:
        return self != RecordStatus.EXTRACTED


@dataclass
class ApiRecord:
    """An API definition extracted from one export archive."""
    name: str
    listen_path: str
    target_url: str
    raw_document: str
    version: str = ""
    source_file: Optional[str] = None
    extracted_at: datetime = field(default_factory=datetime.utcnow)
    status: RecordStatus = RecordStatus.EXTRACTED
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def label(self) -> str:
        """Human readable name used in log lines."""
        if self.version:
            return f"{self.name} ({self.version})"
        return self.name


@dataclass
class RecordResult:
    """Outcome of processing one archive."""
    source_file: str
    status: RecordStatus
    name: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    processed_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "source_file": self.source_file,
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "warnings": self.warnings,
            "processed_at": self.processed_at.isoformat(),
        }

    @property
    def success(self) -> bool:
        return self.status == RecordStatus.MIGRATED
