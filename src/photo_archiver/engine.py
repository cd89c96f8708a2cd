"""Per-file classification: classify -> name -> claim/resolve -> apply."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from photo_archiver.classifier import PathClassifier, infer_tag
from photo_archiver.config import ArchiverConfig
from photo_archiver.errors import ClassificationError, IoFailure
from photo_archiver.hasher import ContentHasher
from photo_archiver.models import PlannedAction, SourceFile
from photo_archiver.mover import Mover
from photo_archiver.naming import NameBuilder
from photo_archiver.resolver import ConflictResolver, TargetClaims

logger = logging.getLogger(__name__)


class ClassificationEngine:
    """Turns each source file into exactly one PlannedAction.

    Files are handled one at a time, in the order given: the existence check,
    the claim and the filesystem mutation for a file all happen before the
    next file is looked at. One engine serves one run; its claims, digest
    cache and cleanup bookkeeping are discarded with it.
    """

    def __init__(
        self,
        config: ArchiverConfig,
        hasher: Optional[ContentHasher] = None,
        mover: Optional[Mover] = None,
    ) -> None:
        self.config = config
        self.classifier = PathClassifier(config.input, config.extensions)
        tz = ZoneInfo(config.timezone) if config.timezone else None
        self.names = NameBuilder(config.output, tz)
        self.hasher = hasher or ContentHasher()
        self.claims = TargetClaims()
        self.resolver = ConflictResolver(self.hasher, self.claims)
        self.mover = mover or Mover(dry_run=config.dry_run)

        # Tag directories to sweep once every file is done
        self.cleanup_candidates: set[Path] = set()
        # Sources this run moves away or deletes, and the targets it fills
        self.departed: set[Path] = set()
        self.arrived: set[Path] = set()

    def plan(self, source: SourceFile, timestamp: Optional[datetime]) -> PlannedAction:
        """Decide what to do with source. Claims the target, touches no file."""
        tag = infer_tag(self.config.input, source.path)
        if tag is not None:
            self.cleanup_candidates.add(self.config.input / tag)

        try:
            ts, tag = self.classifier.classify(source, timestamp)
        except ClassificationError as e:
            return PlannedAction.unresolved(source, e.reason, str(e))

        descriptor, target_dir, _ = self.names.build(ts, tag, source.extension)
        if descriptor.tag is not None:
            self.cleanup_candidates.add(target_dir)

        return self.resolver.resolve(
            source, descriptor, target_dir, self.names.canonical_name(ts),
        )

    def process_one(
        self, source: SourceFile, timestamp: Optional[datetime],
    ) -> PlannedAction:
        """Plan one file and, outside dry-run, apply the decision."""
        action = self.plan(source, timestamp)

        try:
            self.mover.apply(action)
        except IoFailure as e:
            if action.writes_target:
                self.claims.release(action.target)
            action = PlannedAction.unresolved(
                source, e.reason, str(e), action.descriptor,
            )
        else:
            if action.writes_target:
                self.arrived.add(action.target)
                if not self.config.dry_run:
                    self.claims.settle(action.target)
                    self.hasher.moved(source.path, action.target)
            if action.removes_source:
                self.departed.add(source.path)

        self.mover.report(action)
        return action

    def process(
        self,
        sources: Iterable[SourceFile],
        timestamps: Mapping[Path, Optional[datetime]],
    ) -> list[PlannedAction]:
        return [self.process_one(s, timestamps.get(s.path)) for s in sources]
