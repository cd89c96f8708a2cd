"""Recursive discovery of the files below the input root."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from photo_archiver.config import SKIP_DIRNAMES, SKIP_FILENAMES
from photo_archiver.models import SourceFile

logger = logging.getLogger(__name__)


class Scanner:
    def __init__(self, input_root: Path) -> None:
        self.input_root = input_root

    def scan(self) -> list[SourceFile]:
        """Walk the input directory.

        Every regular file is returned, whatever its extension, so that the
        engine can report excluded ones. Order is by relative path, which
        keeps runs over the same tree reproducible.
        """
        files: list[SourceFile] = []

        for root, dirs, filenames in os.walk(self.input_root):
            dirs[:] = [d for d in dirs if d.lower() not in SKIP_DIRNAMES]

            root_path = Path(root)
            for filename in filenames:
                if filename.lower() in SKIP_FILENAMES:
                    continue

                file_path = root_path / filename
                if file_path.is_symlink() or not file_path.is_file():
                    logger.debug(f"Not a regular file, ignored: {file_path}")
                    continue

                files.append(SourceFile.from_path(file_path, self.input_root))

        files.sort(key=lambda f: f.relative.as_posix())
        return files
