"""Base loader interface for destination platforms."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from ..models.record import ApiRecord

logger = logging.getLogger(__name__)


@dataclass
class ExistingApi:
    """An API already registered on the destination."""
    name: Optional[str]
    listen_path: Optional[str]
    target_url: Optional[str]
    id: Optional[str] = None


@dataclass
class LoadResult:
    """Result of importing one record."""
    record_name: str
    success: bool = False
    message: Optional[str] = None
    target_id: Optional[str] = None
    response_data: Optional[Dict[str, Any]] = None
    loaded_at: datetime = field(default_factory=datetime.utcnow)


class BaseLoader(ABC):
    """
    Base class for destination loaders.

    Loaders list the APIs a destination already has and import new
    ones, one record per call. Nothing is batched or rolled back.
    """

    def __init__(
        self,
        target_service: str,
        api_key: Optional[str] = None,
        dry_run: bool = False,
    ):
        """
        Initialize the loader.

        Args:
            target_service: Name of the destination platform
            api_key: Credential sent with every request
            dry_run: If True, simulate imports without making changes
        """
        self.target_service = target_service
        self.api_key = api_key
        self.dry_run = dry_run

    @abstractmethod
    def load_record(self, record: ApiRecord) -> LoadResult:
        """
        Import a single record into the destination.

        Args:
            record: Extracted API record

        Returns:
            LoadResult indicating success/failure
        """
        pass

    @abstractmethod
    def list_existing(self) -> List[ExistingApi]:
        """
        List every API registered on the destination.

        Returns:
            All existing APIs, in a single page
        """
        pass

    def validate_connection(self) -> bool:
        """Validate the connection to the destination."""
        return True
