"""Loaders for destination platforms."""

from .base import BaseLoader, ExistingApi, LoadResult
from .tyk_loader import TykLoader

__all__ = [
    "BaseLoader",
    "ExistingApi",
    "LoadResult",
    "TykLoader",
]
