"""Configuration constants and runtime config dataclass."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

DEFAULT_EXTENSIONS: FrozenSet[str] = frozenset({
    ".jpg", ".jpeg", ".png", ".heic", ".gif", ".tif", ".tiff",
    ".mp4", ".mov", ".m4v", ".avi", ".mkv", ".3gp", ".mpo",
})

SKIP_FILENAMES: FrozenSet[str] = frozenset({
    "desktop.ini", "thumbs.db", ".ds_store",
    ".picasa.ini", "zbthumbnail.info",
})

SKIP_DIRNAMES: FrozenSet[str] = frozenset({
    ".picasaoriginals",
})

# First non-empty field wins
EXIF_DATE_FIELDS: list[str] = [
    "DateTimeOriginal",
    "CreateDate",
    "MediaCreateDate",
    "TrackCreateDate",
    "ModifyDate",
]

EXIFTOOL_TIMEOUT: int = 300  # seconds
DEFAULT_BATCH_SIZE: int = 500

HASH_CHUNK_SIZE: int = 1024 * 1024  # 1 MiB

# Disambiguation token: hex prefix of the source digest
TOKEN_INITIAL_LEN: int = 8
TOKEN_MAX_LEN: int = 20
TOKEN_INCREMENT: int = 4


class LogMode(enum.Enum):
    """How much of the per-file decision log reaches the console."""

    ALL = "all"
    CONFLICTS = "conflicts"
    ERRORS = "errors"

    @property
    def console_level(self) -> int:
        return {
            LogMode.ALL: logging.INFO,
            LogMode.CONFLICTS: logging.WARNING,
            LogMode.ERRORS: logging.ERROR,
        }[self]


def normalize_extensions(exts: Iterable[str]) -> FrozenSet[str]:
    """Lower-case and give each extension exactly one leading dot ("JPG" -> ".jpg")."""
    normalized = set()
    for ext in exts:
        ext = ext.strip().lstrip(".").lower()
        if ext:
            normalized.add(f".{ext}")
    return frozenset(normalized)


@dataclass(frozen=True)
class ArchiverConfig:
    """Immutable runtime configuration assembled from CLI args."""

    input: Path
    output: Path
    dry_run: bool = False
    # None disables the allow-list: every extension is treated as media
    extensions: Optional[FrozenSet[str]] = DEFAULT_EXTENSIONS
    log_mode: LogMode = LogMode.CONFLICTS
    verbose: bool = False
    log_dir: Path = Path(".")
    exiftool_batch_size: int = DEFAULT_BATCH_SIZE
    timezone: Optional[str] = None  # IANA name, e.g. "Europe/Paris"
    mtime_fallback: bool = False
    write_manifest: bool = True
