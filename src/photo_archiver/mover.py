"""Apply planned actions to the filesystem, with dry-run support."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from photo_archiver.errors import IoFailure
from photo_archiver.models import ActionKind, PlannedAction, UnresolvedReason

logger = logging.getLogger(__name__)


class Mover:
    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def apply(self, action: PlannedAction) -> None:
        """Perform the filesystem side of one action.

        Raises IoFailure if the move or delete fails; the source is then
        left where it was.
        """
        if self.dry_run:
            return

        try:
            if action.writes_target:
                self._move(action.source.path, action.target)
            elif action.kind is ActionKind.SKIP_DUPLICATE:
                action.source.path.unlink()
        except OSError as e:
            raise IoFailure(
                f"{action.kind.value} failed for {action.source.path}: {e}", cause=e,
            ) from e

    def _move(self, src: Path, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        if dest.exists():
            # Never overwrite, even if something appeared since planning
            raise FileExistsError(f"destination appeared during the run: {dest}")
        shutil.move(str(src), str(dest))

    def report(self, action: PlannedAction) -> None:
        """Log the decision at a level matching its --log category."""
        prefix = "[DRY-RUN] " if self.dry_run else ""
        src = action.source.path

        if action.kind is ActionKind.MOVE:
            logger.info(f"{prefix}MOVE: {src} -> {action.target}")
        elif action.kind is ActionKind.RENAME_WITH_SUFFIX:
            logger.warning(
                f"{prefix}RENAME: {src} -> {action.target} ({action.detail})"
            )
        elif action.kind is ActionKind.SKIP_DUPLICATE:
            logger.warning(
                f"{prefix}SKIP-DUP: delete {src}, same content as {action.target}"
            )
        elif action.reason in (
            UnresolvedReason.EXTENSION_EXCLUDED, UnresolvedReason.ALREADY_ARCHIVED,
        ):
            logger.info(f"LEFT: {src} ({action.detail})")
        else:
            reason = action.reason.value if action.reason else "unresolved"
            logger.error(f"UNRESOLVED [{reason}]: {src} ({action.detail})")
