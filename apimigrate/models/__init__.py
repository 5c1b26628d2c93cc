"""Data models for the migration application."""

from .record import (
    ApiRecord,
    RecordResult,
    RecordStatus,
)
from .migration import (
    MatchPolicy,
    MigrationConfig,
    MigrationReport,
)

__all__ = [
    "ApiRecord",
    "RecordResult",
    "RecordStatus",
    "MatchPolicy",
    "MigrationConfig",
    "MigrationReport",
]
