"""Extractors for source platform exports."""

from .base import BaseExtractor, ExtractionResult
from .archive_extractor import WSO2ArchiveExtractor, archive_prefix

__all__ = [
    "BaseExtractor",
    "ExtractionResult",
    "WSO2ArchiveExtractor",
    "archive_prefix",
]
