"""Conflict resolution: decide what happens when a canonical name is taken."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from photo_archiver.config import TOKEN_INCREMENT, TOKEN_INITIAL_LEN, TOKEN_MAX_LEN
from photo_archiver.errors import IoFailure
from photo_archiver.hasher import ContentHasher, digest_token
from photo_archiver.models import (
    PlannedAction,
    SourceFile,
    TargetDescriptor,
    UnresolvedReason,
)

logger = logging.getLogger(__name__)


def _same_path(a: Path, b: Path) -> bool:
    # Path identity, not inode identity: hardlinked copies are distinct files
    return a.resolve() == b.resolve()


class TargetClaims:
    """Destinations handed out during one run.

    Maps each claimed target to the path that currently holds its content:
    the source while the move is pending (always, in dry-run), the target
    itself once the move is done.
    """

    def __init__(self) -> None:
        self._claims: dict[Path, Path] = {}

    def __contains__(self, target: Path) -> bool:
        return target in self._claims

    def __len__(self) -> int:
        return len(self._claims)

    def claim(self, target: Path, content: Path) -> None:
        if target in self._claims:
            raise ValueError(f"{target} is already claimed")
        self._claims[target] = content

    def settle(self, target: Path) -> None:
        self._claims[target] = target

    def release(self, target: Path) -> None:
        self._claims.pop(target, None)

    def occupant(self, target: Path) -> Optional[Path]:
        """Path whose content sits (or will sit) at target, or None if free."""
        claimed = self._claims.get(target)
        if claimed is not None:
            return claimed
        if target.exists():
            return target
        return None


class ConflictResolver:
    """Picks Move, SkipDuplicate, RenameWithSuffix or Unresolved for a file.

    Rules:
      - Free name:                         MOVE to the canonical name
      - Taken, same content:               SKIP_DUPLICATE (delete the source)
      - Taken, different content:          RENAME_WITH_SUFFIX, suffix is the
                                           upper-case hex prefix of the source
                                           digest (8, 12, 16, then 20 chars)
      - Suffixed name taken by same data:  SKIP_DUPLICATE against that file
      - Still taken at 20 chars:           UNRESOLVED
    """

    def __init__(
        self, hasher: ContentHasher, claims: Optional[TargetClaims] = None,
    ) -> None:
        self.hasher = hasher
        self.claims = claims if claims is not None else TargetClaims()

    def resolve(
        self,
        source: SourceFile,
        descriptor: TargetDescriptor,
        target_dir: Path,
        canonical_name: str,
    ) -> PlannedAction:
        candidate = target_dir / f"{canonical_name}{source.extension}"
        occupant = self.claims.occupant(candidate)
        if occupant is None:
            self.claims.claim(candidate, source.path)
            return PlannedAction.move(source, candidate, descriptor)

        logger.debug(f"Name taken: {candidate} (content at {occupant})")
        if _same_path(occupant, source.path):
            return PlannedAction.unresolved(
                source, UnresolvedReason.ALREADY_ARCHIVED,
                "already stored under its canonical name", descriptor,
            )
        try:
            src_digest = self.hasher.digest(source.path)
            if self.hasher.digest(occupant) == src_digest:
                return PlannedAction.skip_duplicate(source, candidate, descriptor)

            length = TOKEN_INITIAL_LEN
            while length <= TOKEN_MAX_LEN:
                token = digest_token(src_digest, length)
                alt = target_dir / f"{canonical_name} {token}{source.extension}"
                alt_occupant = self.claims.occupant(alt)
                if alt_occupant is None:
                    self.claims.claim(alt, source.path)
                    return PlannedAction.rename_with_suffix(
                        source, alt, descriptor, taken=candidate,
                    )
                if _same_path(alt_occupant, source.path):
                    return PlannedAction.unresolved(
                        source, UnresolvedReason.ALREADY_ARCHIVED,
                        "already stored under its suffixed name", descriptor,
                    )
                if self.hasher.digest(alt_occupant) == src_digest:
                    # An earlier run already stored this file under its token
                    return PlannedAction.skip_duplicate(source, alt, descriptor)
                length += TOKEN_INCREMENT
        except IoFailure as e:
            return PlannedAction.unresolved(
                source, UnresolvedReason.IO_FAILURE, str(e), descriptor,
            )

        return PlannedAction.unresolved(
            source,
            UnresolvedReason.PERSISTENT_COLLISION,
            f"{candidate.name} and its suffixed variants up to "
            f"{TOKEN_MAX_LEN} chars hold different content",
            descriptor,
        )
