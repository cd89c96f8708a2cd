"""Exceptions raised by photo-archiver."""

from __future__ import annotations

from typing import Optional

from photo_archiver.models import UnresolvedReason


class ArchiverError(Exception):
    """Base exception for photo-archiver."""


class ConfigError(ArchiverError):
    """Raised when the invocation cannot be turned into a usable config."""


class TargetTreeUnwritable(ArchiverError):
    """Raised when the output root cannot be created or written. Fatal."""


class ClassificationError(ArchiverError):
    """A per-file failure. Becomes an Unresolved action, never aborts a run."""

    reason: UnresolvedReason = UnresolvedReason.IO_FAILURE


class MetadataUnavailable(ClassificationError):
    reason = UnresolvedReason.METADATA_UNAVAILABLE


class ExtensionExcluded(ClassificationError):
    reason = UnresolvedReason.EXTENSION_EXCLUDED


class IoFailure(ClassificationError):
    """Read, hash, move or delete failed for one file."""

    reason = UnresolvedReason.IO_FAILURE

    def __init__(self, message: str, cause: Optional[OSError] = None) -> None:
        super().__init__(message)
        self.cause = cause
