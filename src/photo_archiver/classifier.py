"""Derive the (timestamp, tag) pair of a source file."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import FrozenSet, Optional

from photo_archiver.errors import ExtensionExcluded, MetadataUnavailable
from photo_archiver.models import SourceFile


def infer_tag(input_root: Path, path: Path) -> Optional[str]:
    """Name of the first directory under input_root that contains path.

    Files directly in the root have no tag. Deeper nesting does not change
    the tag: ``root/Trip/day1/a.jpg`` and ``root/Trip/a.jpg`` are both "Trip".
    """
    try:
        parts = path.relative_to(input_root).parts
    except ValueError:
        return None
    if len(parts) < 2:
        return None
    return parts[0]


class PathClassifier:
    def __init__(
        self, input_root: Path, extensions: Optional[FrozenSet[str]] = None,
    ) -> None:
        self.input_root = input_root
        self.extensions = extensions

    def accepts(self, path: Path) -> bool:
        """True if path carries a treated media extension."""
        ext = path.suffix.lower()
        if not ext:
            return False
        return self.extensions is None or ext in self.extensions

    def classify(
        self, source: SourceFile, timestamp: Optional[datetime],
    ) -> tuple[datetime, Optional[str]]:
        if not self.accepts(source.path):
            raise ExtensionExcluded(
                f"extension {source.extension or '(none)'!r} is not in the allow-list"
            )
        if timestamp is None:
            raise MetadataUnavailable("no date found in metadata")
        return timestamp, infer_tag(self.input_root, source.path)
