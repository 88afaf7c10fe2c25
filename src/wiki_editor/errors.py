"""Exception hierarchy shared by the wiki editor modules."""

from __future__ import annotations

from pathlib import Path


class WikiEditorError(Exception):
    """Base exception for all wiki editor errors."""


class DuplicatePageError(WikiEditorError):
    """Raised when a store is built from pages that share an id."""

    def __init__(self, page_id: str) -> None:
        super().__init__(f"Duplicate page id {page_id!r}")
        self.page_id = page_id


class SnapshotError(WikiEditorError):
    """Raised when page records cannot be turned into pages."""


class ImageReadError(WikiEditorError):
    """Raised when a selected image file cannot be read into a data URI."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read image {path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(WikiEditorError):
    """Raised when a configuration source exists but cannot be used."""
