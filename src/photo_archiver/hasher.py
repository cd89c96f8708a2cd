"""Streaming content digests, computed only when two files want one name."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from photo_archiver.config import HASH_CHUNK_SIZE
from photo_archiver.errors import IoFailure

logger = logging.getLogger(__name__)


def blake2b_file(path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute the BLAKE2b hex digest of a file, reading in chunks."""
    h = hashlib.blake2b()
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            h.update(chunk)
    return h.hexdigest()


def digest_token(digest: str, length: int) -> str:
    """Upper-case hex prefix of a digest, used as a filename suffix."""
    return digest[:length].upper()


class ContentHasher:
    """Digests files on demand and remembers them for the rest of the run."""

    def __init__(self, chunk_size: int = HASH_CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size
        self._cache: dict[Path, str] = {}

    def digest(self, path: Path) -> str:
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        try:
            digest = blake2b_file(path, self.chunk_size)
        except OSError as e:
            raise IoFailure(f"cannot hash {path}: {e}", cause=e) from e
        logger.debug(f"blake2b {digest[:16]} {path}")
        self._cache[path] = digest
        return digest

    def moved(self, src: Path, dest: Path) -> None:
        """Carry a cached digest along when a file is moved."""
        digest = self._cache.pop(src, None)
        if digest is not None:
            self._cache[dest] = digest
