"""Loader for the Tyk Dashboard management API."""

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .base import BaseLoader, ExistingApi, LoadResult
from .tyk_models import TykApiListResponse, TykStatusResponse
from ..exceptions import DestinationError
from ..models.record import ApiRecord

logger = logging.getLogger(__name__)


class TykLoader(BaseLoader):
    """
    Imports OpenAPI documents through the Tyk Dashboard API.

    Endpoints:
    - GET  /api/apis              connectivity check and listing
    - POST /api/apis/oas/import   one import per API
    """

    LIST_ENDPOINT = "/api/apis"
    IMPORT_ENDPOINT = "/api/apis/oas/import"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        dry_run: bool = False,
        verify_ssl: bool = False,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Tyk loader.

        Args:
            base_url: Tyk Dashboard URL
            api_key: Dashboard API token, sent as the Authorization header
            dry_run: If True, skip the import call
            verify_ssl: Verify the Dashboard TLS certificate
            timeout: Seconds to wait for each request (None waits forever)
            session: Custom requests session
        """
        super().__init__("tyk", api_key, dry_run)
        self.base_url = base_url.rstrip("/")
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()
        # Tyk expects the raw token, without a "Bearer" scheme
        session.headers["Authorization"] = self.api_key or ""
        session.verify = self.verify_ssl
        return session

    def validate_connection(self) -> bool:
        """Check that the Dashboard is reachable and accepts the token."""
        try:
            response = self._session.get(
                f"{self.base_url}{self.LIST_ENDPOINT}",
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Tyk connection validation failed: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Tyk Dashboard returned HTTP {response.status_code}")
            return False
        return True

    def list_existing(self) -> List[ExistingApi]:
        """Fetch every API definition in one page (p=-1)."""
        try:
            response = self._session.get(
                f"{self.base_url}{self.LIST_ENDPOINT}",
                params={"p": -1},
                timeout=self.timeout,
            )
            response.raise_for_status()
            listing = TykApiListResponse.model_validate(response.json())
        except (requests.RequestException, ValueError, ValidationError) as e:
            raise DestinationError(f"Could not list Tyk APIs: {e}")

        return [
            ExistingApi(
                name=definition.name,
                listen_path=definition.proxy.listen_path,
                target_url=definition.proxy.target_url,
                id=definition.api_id,
            )
            for definition in listing.definitions()
        ]

    def load_record(self, record: ApiRecord) -> LoadResult:
        """Import a single API definition."""
        if self.dry_run:
            return LoadResult(
                record_name=record.name,
                success=True,
                message="dry run, import skipped",
            )

        try:
            response = self._session.post(
                f"{self.base_url}{self.IMPORT_ENDPOINT}",
                params={
                    "listenPath": record.listen_path,
                    "upstreamURL": record.target_url,
                },
                data=record.raw_document.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return LoadResult(record_name=record.name, success=False, message=str(e))

        response_data = self._parse_json(response)
        if response_data is None:
            return LoadResult(
                record_name=record.name,
                success=False,
                message=f"HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            status = TykStatusResponse.model_validate(response_data)
        except ValidationError as e:
            return LoadResult(
                record_name=record.name,
                success=False,
                message=f"Unexpected response: {e}",
                response_data=response_data,
            )

        return LoadResult(
            record_name=record.name,
            success=status.ok,
            message=status.message,
            target_id=str(status.meta) if status.ok and status.meta else None,
            response_data=response_data,
        )

    @staticmethod
    def _parse_json(response: requests.Response) -> Optional[Dict[str, Any]]:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
