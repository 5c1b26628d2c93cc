"""Extractor for WSO2 apictl API export archives."""

import json
import logging
import zipfile
import zlib
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import BaseExtractor
from ..exceptions import ArchiveError
from ..models.record import ApiRecord

logger = logging.getLogger(__name__)

DEFINITION_PATH = "Definitions/swagger.json"


def archive_prefix(file_name: str) -> str:
    """
    Derive the top-level directory of an export archive from its file name.

    apictl names archives ``<provider>_<api>_<version>.zip`` and stores
    their content under ``<provider>-<api>/``: the first underscore
    becomes a dash and everything from the next underscore is dropped.
    """
    prefix = file_name.replace("_", "-", 1)
    if "_" in prefix:
        return prefix.split("_", 1)[0]
    if prefix.lower().endswith(".zip"):
        return prefix[:-4]
    return prefix


class WSO2ArchiveExtractor(BaseExtractor):
    """
    Reads the OpenAPI/Swagger document embedded in each export archive.

    Required fields:
    - info.title
    - x-wso2-basePath
    - x-wso2-production-endpoints.urls[0]
    """

    def __init__(self, source_dir: Path, definition_path: str = DEFINITION_PATH):
        """
        Initialize the archive extractor.

        Args:
            source_dir: apictl export directory
            definition_path: Location of the description document below
                the archive prefix
        """
        super().__init__(source_dir)
        self.definition_path = definition_path

    def list_sources(self) -> List[Path]:
        """All zip archives in the export directory, sorted by name."""
        if not self.source_dir.is_dir():
            return []
        return sorted(p for p in self.source_dir.glob("*.zip") if p.is_file())

    def extract_record(self, path: Path) -> ApiRecord:
        """Open one archive and parse its description document."""
        raw = self.read_definition(path)

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ArchiveError(f"{path.name}: invalid JSON in {self.definition_path}: {e}")
        except RecursionError:
            raise ArchiveError(f"{path.name}: {self.definition_path} is nested too deeply")

        if not isinstance(document, dict):
            raise ArchiveError(f"{path.name}: {self.definition_path} is not a JSON object")

        record = ApiRecord(
            name=self._require(path, "info.title", self._get(document, "info", "title")),
            listen_path=self._require(path, "x-wso2-basePath", document.get("x-wso2-basePath")),
            target_url=self._require(
                path,
                "x-wso2-production-endpoints.urls[0]",
                self._first_production_url(document),
            ),
            version=str(self._get(document, "info", "version") or ""),
            raw_document=raw,
            source_file=path.name,
        )
        logger.debug(f"Extracted {record.label} from {path.name}")
        return record

    def read_definition(self, path: Path) -> str:
        """Return the description document of an archive as text."""
        member = f"{archive_prefix(path.name)}/{self.definition_path}"
        try:
            with zipfile.ZipFile(path) as archive:
                with archive.open(member) as f:
                    data = f.read()
        except KeyError:
            raise ArchiveError(f"{path.name}: {member} not found in archive")
        # zipfile surfaces corrupt, encrypted, truncated and unsupported members
        # through several unrelated exception types
        except (zipfile.BadZipFile, zlib.error, OSError, EOFError,
                RuntimeError, NotImplementedError) as e:
            raise ArchiveError(f"{path.name}: could not read archive: {e}")

        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ArchiveError(f"{path.name}: {member} is not UTF-8: {e}")

    @staticmethod
    def _get(document: Dict[str, Any], *keys: str) -> Any:
        value: Any = document
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value

    @staticmethod
    def _first_production_url(document: Dict[str, Any]) -> Optional[Any]:
        endpoints = document.get("x-wso2-production-endpoints")
        if not isinstance(endpoints, dict):
            return None
        urls = endpoints.get("urls")
        if not isinstance(urls, list) or not urls:
            return None
        return urls[0]

    @staticmethod
    def _require(path: Path, field_name: str, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ArchiveError(f"{path.name}: missing required field {field_name}")
        return value
