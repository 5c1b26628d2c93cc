"""Base extractor interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional
from datetime import datetime
import logging

from ..exceptions import RecordError
from ..models.record import ApiRecord

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Result of extracting one source file."""
    source_file: str
    record: Optional[ApiRecord] = None
    error: Optional[str] = None
    extracted_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def success(self) -> bool:
        """Check if extraction was successful."""
        return self.record is not None and self.error is None


class BaseExtractor(ABC):
    """
    Base class for API definition extractors.

    Extractors turn the files produced by a source platform export into
    ApiRecord objects, one per file.
    """

    def __init__(self, source_dir: Path):
        """
        Initialize the extractor.

        Args:
            source_dir: Directory holding the exported files
        """
        self.source_dir = Path(source_dir)
        self._errors: List[Dict[str, Any]] = []

    @abstractmethod
    def list_sources(self) -> List[Path]:
        """
        List the files to extract, in processing order.

        Returns:
            List of file paths
        """
        pass

    @abstractmethod
    def extract_record(self, path: Path) -> ApiRecord:
        """
        Extract the API record held in one file.

        Args:
            path: File to read

        Returns:
            The extracted ApiRecord

        Raises:
            RecordError: If the file cannot be turned into a record
        """
        pass

    def stream(self) -> Iterator[ExtractionResult]:
        """
        Extract every source file in turn.

        A file that fails to extract yields a result carrying the error;
        iteration always continues with the next file.

        Yields:
            One ExtractionResult per source file
        """
        for path in self.list_sources():
            try:
                record = self.extract_record(path)
            except RecordError as e:
                self.add_error(str(e), source_file=path.name)
                yield ExtractionResult(source_file=path.name, error=str(e))
                continue
            yield ExtractionResult(source_file=path.name, record=record)

    def add_error(self, message: str, source_file: Optional[str] = None) -> None:
        """Add an error to the extraction."""
        self._errors.append({
            "message": message,
            "source_file": source_file,
            "timestamp": datetime.utcnow().isoformat(),
        })
        logger.error(f"Extraction error: {message}")

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self._errors.copy()

    def reset(self) -> None:
        """Reset the extractor state."""
        self._errors = []
