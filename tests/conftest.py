import json
import subprocess
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from apimigrate.loaders.base import BaseLoader, ExistingApi, LoadResult
from apimigrate.models.record import ApiRecord


def swagger_document(
    title: str = "Orders",
    base_path: str = "/orders",
    url: str = "http://orders.internal:8080",
    version: str = "1.0.0",
) -> Dict[str, Any]:
    return {
        "swagger": "2.0",
        "info": {"title": title, "version": version},
        "paths": {"/": {"get": {"responses": {"200": {"description": "ok"}}}}},
        "x-wso2-basePath": base_path,
        "x-wso2-production-endpoints": {"urls": [url], "type": "http"},
    }


def write_archive(directory: Path, file_name: str, document: Any = None, member: Optional[str] = None,
                  compression: int = zipfile.ZIP_STORED) -> Path:
    """Write an apictl-style export archive and return its path."""
    path = directory / file_name
    if member is None:
        prefix = file_name.replace("_", "-", 1).split("_", 1)[0]
        member = f"{prefix}/Definitions/swagger.json"
    content = document if isinstance(document, str) else json.dumps(document or swagger_document())
    with zipfile.ZipFile(path, "w", compression=compression) as archive:
        archive.writestr(member, content)
    return path


def corrupt_member_data(path: Path) -> None:
    """Overwrite the compressed bytes of the single member in an archive."""
    data = bytearray(path.read_bytes())
    central = data.index(b"PK\x01\x02")
    compressed_size = int.from_bytes(data[central + 20:central + 24], "little")
    start = 30 + int.from_bytes(data[26:28], "little") + int.from_bytes(data[28:30], "little")
    # 0xff starts a deflate block with the reserved block type
    data[start:start + compressed_size] = b"\xff" * compressed_size
    path.write_bytes(bytes(data))


def patch_member_header(path: Path, flag_bits: int = 0, compress_type: Optional[int] = None) -> None:
    """Rewrite the flags and compression method of the single member in an archive."""
    data = bytearray(path.read_bytes())
    central = data.index(b"PK\x01\x02")
    for flags_at in (6, central + 8):
        flags = int.from_bytes(data[flags_at:flags_at + 2], "little") | flag_bits
        data[flags_at:flags_at + 2] = flags.to_bytes(2, "little")
        if compress_type is not None:
            data[flags_at + 2:flags_at + 4] = compress_type.to_bytes(2, "little")
    path.write_bytes(bytes(data))


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self):
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    """Stands in for requests.Session and records every call."""

    def __init__(self, get_responses=None, post_responses=None):
        self.headers: Dict[str, str] = {}
        self.verify = True
        self.get_responses = list(get_responses or [])
        self.post_responses = list(post_responses or [])
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, **kwargs):
        self.calls.append({"method": "GET", "url": url, **kwargs})
        response = self.get_responses.pop(0) if len(self.get_responses) > 1 else self.get_responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        self.calls.append({"method": "POST", "url": url, **kwargs})
        response = self.post_responses.pop(0) if len(self.post_responses) > 1 else self.post_responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakeRunner:
    """Stands in for subprocess.run when driving apictl."""

    def __init__(self, outputs: Optional[Dict[str, str]] = None, failures: Optional[Dict[str, int]] = None,
                 on_export=None):
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.on_export = on_export
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, command, input=None, capture_output=False, text=False, check=False):
        self.calls.append({"command": list(command), "input": input})
        subcommand = " ".join(command[1:3])
        if subcommand in self.failures:
            return subprocess.CompletedProcess(command, self.failures[subcommand], "", "boom")
        if subcommand == "export apis" and self.on_export:
            self.on_export()
        return subprocess.CompletedProcess(command, 0, self.outputs.get(subcommand, ""), "")

    def commands(self) -> List[List[str]]:
        return [call["command"] for call in self.calls]


class InMemoryLoader(BaseLoader):
    """Destination that keeps imported APIs in a list."""

    def __init__(self, existing=None, reject=None, connected=True, dry_run=False):
        super().__init__("memory", dry_run=dry_run)
        self.existing: List[ExistingApi] = list(existing or [])
        self.reject = reject or {}
        self.connected = connected
        self.imported: List[ApiRecord] = []

    def list_existing(self):
        return list(self.existing)

    def load_record(self, record):
        if record.name in self.reject:
            return LoadResult(record_name=record.name, success=False, message=self.reject[record.name])
        if self.dry_run:
            return LoadResult(record_name=record.name, success=True, message="dry run, import skipped")
        self.imported.append(record)
        self.existing.append(ExistingApi(record.name, record.listen_path, record.target_url))
        return LoadResult(record_name=record.name, success=True, message="API created")

    def validate_connection(self):
        return self.connected


@pytest.fixture
def export_dir(tmp_path):
    path = tmp_path / "apis"
    path.mkdir()
    return path
