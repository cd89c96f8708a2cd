"""Capture timestamps via exiftool subprocess (batch mode)."""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from photo_archiver.config import DEFAULT_BATCH_SIZE, EXIF_DATE_FIELDS, EXIFTOOL_TIMEOUT

logger = logging.getLogger(__name__)

EXIFTOOL_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def exiftool_available() -> bool:
    """True if an exiftool binary on PATH answers `exiftool -ver`."""
    if shutil.which("exiftool") is None:
        return False
    try:
        subprocess.run(["exiftool", "-ver"], capture_output=True, check=True)
    except (subprocess.CalledProcessError, OSError):
        return False
    return True


def parse_timestamp(date_str: Optional[str]) -> Optional[datetime]:
    """Parse 'YYYY:MM:DD HH:MM:SS' into a naive datetime, or None.

    Zero dates and years outside 1900-2100 are camera defaults, not dates.
    """
    if not date_str:
        return None
    try:
        ts = datetime.strptime(date_str.strip()[:19], EXIFTOOL_DATE_FORMAT)
    except ValueError:
        return None
    if not 1900 <= ts.year <= 2100:
        return None
    return ts


def mtime_timestamp(path: Path, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Modification time, aware in tz when given, else naive host local time."""
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz)
    except (OSError, OverflowError, ValueError):
        return None


class MetadataExtractor:
    """Resolves one capture timestamp per file.

    Never raises for a file it cannot read: the file simply maps to None.

    With ``timezone`` set, exiftool renders UTC video dates in that zone and
    modification times are read in it, so the host TZ plays no part.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        mtime_fallback: bool = False,
        timezone: Optional[str] = None,
    ) -> None:
        self.batch_size = batch_size
        self.mtime_fallback = mtime_fallback
        self.timezone = timezone
        self.tz = ZoneInfo(timezone) if timezone else None

    def timestamps(self, paths: Sequence[Path]) -> dict[Path, Optional[datetime]]:
        if not paths:
            return {}

        date_map = self._batch_extract_dates(list(paths))

        result: dict[Path, Optional[datetime]] = {}
        fallbacks = 0
        for path in paths:
            ts = parse_timestamp(date_map.get(str(path)))
            if ts is None and self.mtime_fallback:
                ts = mtime_timestamp(path, self.tz)
                if ts is not None:
                    fallbacks += 1
                    logger.debug(f"No metadata date for {path}, using mtime {ts}")
            result[path] = ts

        if fallbacks:
            logger.warning(f"{fallbacks} file(s) dated from their modification time")
        return result

    def _batch_extract_dates(
        self, file_paths: list[Path],
    ) -> dict[str, Optional[str]]:
        """Call exiftool in batches, return {path_str: date_str_or_None}."""
        result: dict[str, Optional[str]] = {}
        env = {**os.environ, "TZ": self.timezone} if self.timezone else None

        for i in range(0, len(file_paths), self.batch_size):
            batch = file_paths[i : i + self.batch_size]
            try:
                cmd = [
                    "exiftool",
                    "-json",
                    "-api", "QuickTimeUTC=1",
                    *[f"-{field}" for field in EXIF_DATE_FIELDS],
                    "-d", EXIFTOOL_DATE_FORMAT,
                    *[str(p) for p in batch],
                ]
                proc = subprocess.run(
                    cmd,
                    capture_output=True,
                    encoding="utf-8",
                    errors="surrogateescape",
                    timeout=EXIFTOOL_TIMEOUT,
                    env=env,
                )
                if proc.returncode != 0 and not proc.stdout:
                    logger.warning(
                        f"exiftool batch {i // self.batch_size} failed: "
                        f"{proc.stderr[:200]}"
                    )
                    continue

                data = json.loads(proc.stdout)
                for item in data:
                    file_path = item.get("SourceFile", "")
                    date_str = None
                    for field in EXIF_DATE_FIELDS:
                        val = item.get(field)
                        if isinstance(val, str) and parse_timestamp(val) is not None:
                            date_str = val
                            break
                    result[file_path] = date_str

            except subprocess.TimeoutExpired:
                logger.warning(f"exiftool batch {i // self.batch_size} timed out")
            except json.JSONDecodeError as e:
                logger.warning(f"exiftool JSON parse error: {e}")
            except ValueError as e:
                logger.warning(f"exiftool output unreadable: {e}")
            except OSError as e:
                logger.warning(f"exiftool could not be run: {e}")

        return result
