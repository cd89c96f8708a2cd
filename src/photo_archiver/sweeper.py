"""Remove tag directories that no longer hold any media."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import AbstractSet, Iterable

from photo_archiver.classifier import PathClassifier

logger = logging.getLogger(__name__)


class CleanupSweeper:
    """Bottom-up removal of media-free tag subtrees. Never deletes a file.

    ``departed`` lists files the run moved or deleted; they are treated as
    gone even if still on disk (dry-run). ``arrived`` lists targets the run
    filled; their directories count as holding media even if the files do
    not exist yet (dry-run). A real run and a dry-run thus report the same
    directories.
    """

    def __init__(self, classifier: PathClassifier, dry_run: bool = False) -> None:
        self.classifier = classifier
        self.dry_run = dry_run

    def sweep(
        self,
        roots: Iterable[Path],
        departed: AbstractSet[Path] = frozenset(),
        arrived: AbstractSet[Path] = frozenset(),
    ) -> list[Path]:
        """Return the directories removed (or, in dry-run, that would be)."""
        incoming: set[Path] = set()
        for target in arrived:
            incoming.update(target.parents)

        removed: list[Path] = []
        for root in sorted(set(roots)):
            if not root.is_dir() or root.is_symlink():
                continue
            removed.extend(self._sweep_root(root, departed, incoming))
        return removed

    def _sweep_root(
        self,
        root: Path,
        departed: AbstractSet[Path],
        incoming: AbstractSet[Path],
    ) -> list[Path]:
        # Fold children into parents: os.walk(topdown=False) yields leaves first
        has_media: dict[Path, bool] = {}
        empty: dict[Path, bool] = {}
        order: list[Path] = []

        for dirpath, dirnames, filenames in os.walk(root, topdown=False):
            d = Path(dirpath)
            remaining = [d / f for f in filenames if d / f not in departed]
            children = [d / name for name in dirnames]
            # Symlinked or unreadable subdirectories have no entry: keep them
            has_media[d] = (
                d in incoming
                or any(self.classifier.accepts(p) for p in remaining)
                or any(has_media.get(c, False) for c in children)
            )
            empty[d] = (
                d not in incoming
                and not remaining
                and all(empty.get(c, False) for c in children)
            )
            order.append(d)

        if has_media.get(root, True):
            logger.debug(f"Keeping {root}: media left")
            return []

        prefix = "[DRY-RUN] " if self.dry_run else ""
        removed: list[Path] = []
        blocked: set[Path] = set()  # ancestors of a directory that stayed
        for d in order:
            if not empty[d] or d in blocked:
                continue
            if not self.dry_run:
                try:
                    d.rmdir()
                except OSError as e:
                    logger.warning(f"Cannot remove {d}: {e}")
                    blocked.update(d.parents)
                    continue
            logger.info(f"{prefix}PRUNE: {d}")
            removed.append(d)

        return removed
