"""Non-fatal checks on extracted API records."""

import logging
import re
from typing import Callable, Dict, List

from ..models.record import ApiRecord

logger = logging.getLogger(__name__)

LOCALHOST_PATTERN = re.compile(r"localhost", re.IGNORECASE)


class RecordValidator:
    """
    Collects warnings for records that can still be migrated.

    Supports:
    - Upstream URLs pointing at localhost
    - Custom checks registered by name
    """

    def __init__(self):
        """Initialize the validator."""
        self._custom_checks: Dict[str, Callable[[ApiRecord], List[str]]] = {}

    def register_check(self, name: str, func: Callable[[ApiRecord], List[str]]) -> None:
        """Register a custom check returning warning messages."""
        self._custom_checks[name] = func

    def validate_record(self, record: ApiRecord) -> List[str]:
        """
        Run every check and attach the warnings to the record.

        Args:
            record: The extracted record

        Returns:
            Warnings added by this call
        """
        warnings = self._check_localhost(record)

        for name, func in self._custom_checks.items():
            try:
                warnings.extend(func(record))
            except Exception as e:
                warnings.append(f"Check '{name}' failed: {e}")

        for warning in warnings:
            record.add_warning(warning)
            logger.warning(f"{record.name}: {warning}")

        return warnings

    def _check_localhost(self, record: ApiRecord) -> List[str]:
        if LOCALHOST_PATTERN.search(record.target_url):
            return [
                f"Upstream URL {record.target_url} points to localhost; "
                "update it in Tyk after migration"
            ]
        return []
