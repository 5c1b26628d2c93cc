"""Migration configuration and run report models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import uuid

from .record import RecordResult, RecordStatus

DEFAULT_ENV_NAME = "wso2-to-tyk-migration"
DEFAULT_MINIMUM_APICTL_VERSION = "4.4.0"


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _timeout(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"timeout must be a number of seconds, got {value!r}")
    if value <= 0:
        raise ValueError(f"timeout must be positive, got {value!r}")
    return float(value)


class MatchPolicy(str, Enum):
    """Fields that must all be equal for an existing Tyk API to count as a duplicate."""
    NAME_AND_PATH = "name_and_path"
    NAME_PATH_AND_TARGET = "name_path_and_target"

    @property
    def includes_target(self) -> bool:
        return self == MatchPolicy.NAME_PATH_AND_TARGET


@dataclass
class MigrationConfig:
    """Configuration for a migration."""
    wso2_host: str = ""
    wso2_username: str = ""
    wso2_password: str = ""
    tyk_host: str = ""
    tyk_token: str = ""

    # Source tool
    env_name: str = DEFAULT_ENV_NAME
    export_dir: Optional[str] = None  # Defaults to the apictl export location
    apictl_binary: str = "apictl"
    minimum_apictl_version: str = DEFAULT_MINIMUM_APICTL_VERSION

    # Execution options
    match_policy: MatchPolicy = MatchPolicy.NAME_AND_PATH
    dry_run: bool = False
    assume_yes: bool = False
    verify_ssl: bool = False
    timeout: Optional[float] = None

    # Output
    report_dir: Optional[str] = None

    REQUIRED_FIELDS = ("wso2_host", "wso2_username", "wso2_password", "tyk_host", "tyk_token")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (secrets excluded)."""
        return {
            "wso2_host": self.wso2_host,
            "wso2_username": self.wso2_username,
            "tyk_host": self.tyk_host,
            "env_name": self.env_name,
            "export_dir": self.export_dir,
            "apictl_binary": self.apictl_binary,
            "minimum_apictl_version": self.minimum_apictl_version,
            "match_policy": self.match_policy.value,
            "dry_run": self.dry_run,
            "assume_yes": self.assume_yes,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "report_dir": self.report_dir,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """
        Create from dictionary representation.

        Raises:
            ValueError: If a flag, the timeout or the match policy has the wrong type or value
        """
        return cls(
            wso2_host=data.get("wso2_host", ""),
            wso2_username=data.get("wso2_username", ""),
            wso2_password=data.get("wso2_password", ""),
            tyk_host=data.get("tyk_host", ""),
            tyk_token=data.get("tyk_token", ""),
            env_name=data.get("env_name", DEFAULT_ENV_NAME),
            export_dir=data.get("export_dir"),
            apictl_binary=data.get("apictl_binary", "apictl"),
            minimum_apictl_version=data.get("minimum_apictl_version", DEFAULT_MINIMUM_APICTL_VERSION),
            match_policy=MatchPolicy(data.get("match_policy", MatchPolicy.NAME_AND_PATH.value)),
            dry_run=_flag(data, "dry_run"),
            assume_yes=_flag(data, "assume_yes"),
            verify_ssl=_flag(data, "verify_ssl"),
            timeout=_timeout(data.get("timeout")),
            report_dir=data.get("report_dir"),
        )

    def missing_fields(self) -> List[str]:
        """Names of required connection settings that are empty."""
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]


@dataclass
class MigrationReport:
    """Counters and per-record results of one migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    dry_run: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    migrated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    results: List[RecordResult] = field(default_factory=list)

    def record(self, result: RecordResult) -> RecordResult:
        """Count a record that reached a terminal state."""
        if not result.status.is_terminal:
            raise ValueError(f"Record is not in a terminal state: {result.status.value}")

        if result.status == RecordStatus.MIGRATED:
            self.migrated_count += 1
        elif result.status == RecordStatus.SKIPPED:
            self.skipped_count += 1
        else:
            self.failed_count += 1
        self.results.append(result)
        return result

    @property
    def total_processed(self) -> int:
        return self.migrated_count + self.skipped_count + self.failed_count

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def summary(self) -> str:
        """One-line summary printed at the end of a run."""
        line = (
            f"Migration complete - {self.migrated_count} APIs migrated, "
            f"{self.skipped_count} skipped, {self.failed_count} failed"
        )
        if self.dry_run:
            line += " (dry run)"
        return line

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "migrated_count": self.migrated_count,
            "skipped_count": self.skipped_count,
            "failed_count": self.failed_count,
            "total_processed": self.total_processed,
            "results": [r.to_dict() for r in self.results],
        }
