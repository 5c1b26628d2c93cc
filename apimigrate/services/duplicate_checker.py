"""Duplicate detection against the destination's existing APIs."""

import logging
from typing import Iterable, Optional

from ..loaders.base import BaseLoader, ExistingApi
from ..models.migration import MatchPolicy

logger = logging.getLogger(__name__)


def matches(
    existing: ExistingApi,
    name: str,
    listen_path: str,
    target_url: Optional[str] = None
) -> bool:
    """Exact string comparison; ``target_url`` is only compared when given."""
    if existing.name != name or existing.listen_path != listen_path:
        return False
    if target_url is not None and existing.target_url != target_url:
        return False
    return True


def find_match(
    existing_apis: Iterable[ExistingApi],
    name: str,
    listen_path: str,
    target_url: Optional[str] = None
) -> Optional[ExistingApi]:
    for existing in existing_apis:
        if matches(existing, name, listen_path, target_url):
            return existing
    return None


class DuplicateChecker:
    """
    Decides whether an API is already present on the destination.

    The listing is fetched on every check so APIs imported earlier in
    the same run are seen too.
    """

    def __init__(self, loader: BaseLoader, policy: MatchPolicy = MatchPolicy.NAME_AND_PATH):
        """
        Initialize the checker.

        Args:
            loader: Loader used to list existing APIs
            policy: Fields that make up the duplicate key
        """
        self.loader = loader
        self.policy = policy

    def is_duplicate(
        self,
        name: str,
        listen_path: str,
        target_url: Optional[str] = None
    ) -> bool:
        """
        Check for an existing API with the same key.

        Args:
            name: API name
            listen_path: Listen path on the gateway
            target_url: Upstream URL, compared only when the policy includes it

        Returns:
            True if an existing API matches every compared field

        Raises:
            DestinationError: If the listing cannot be fetched
        """
        compared_target = target_url if self.policy.includes_target else None
        match = find_match(self.loader.list_existing(), name, listen_path, compared_target)
        if match is not None:
            logger.debug(f"Found existing API {match.id or match.name} for {name} at {listen_path}")
            return True
        return False
