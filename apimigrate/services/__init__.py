"""Services used during a migration run."""

from .duplicate_checker import DuplicateChecker
from .validator import RecordValidator

__all__ = [
    "DuplicateChecker",
    "RecordValidator",
]
