"""Core data types used throughout the photo-archiver engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


class ActionKind(enum.Enum):
    """What the engine decided for one source file."""

    MOVE = "move"  # Target free, move the source there
    SKIP_DUPLICATE = "skip_duplicate"  # Same content already archived, delete source
    RENAME_WITH_SUFFIX = "rename_with_suffix"  # Name taken by other content
    UNRESOLVED = "unresolved"  # Left in place, reported


class UnresolvedReason(enum.Enum):
    METADATA_UNAVAILABLE = "metadata_unavailable"
    EXTENSION_EXCLUDED = "extension_excluded"
    IO_FAILURE = "io_failure"
    PERSISTENT_COLLISION = "persistent_collision"
    ALREADY_ARCHIVED = "already_archived"  # source is the file at its own target


@dataclass(frozen=True)
class SourceFile:
    """A file found below the input root."""

    path: Path  # absolute
    extension: str  # lowercased, includes dot, "" when missing
    relative: Path  # relative to the input root

    @classmethod
    def from_path(cls, path: Path, input_root: Path) -> SourceFile:
        return cls(
            path=path,
            extension=path.suffix.lower(),
            relative=path.relative_to(input_root),
        )


@dataclass(frozen=True)
class TargetDescriptor:
    """Year, month and tag that select the destination directory."""

    year: int
    month: int
    tag: Optional[str] = None


@dataclass(frozen=True)
class PlannedAction:
    """The single decided outcome for one source file.

    ``target`` is the destination for MOVE and RENAME_WITH_SUFFIX, and the
    already archived copy for SKIP_DUPLICATE.
    """

    kind: ActionKind
    source: SourceFile
    target: Optional[Path] = None
    reason: Optional[UnresolvedReason] = None
    detail: str = ""
    descriptor: Optional[TargetDescriptor] = None

    @classmethod
    def move(
        cls, source: SourceFile, target: Path, descriptor: TargetDescriptor,
    ) -> PlannedAction:
        return cls(ActionKind.MOVE, source, target, descriptor=descriptor)

    @classmethod
    def skip_duplicate(
        cls, source: SourceFile, existing_target: Path, descriptor: TargetDescriptor,
    ) -> PlannedAction:
        return cls(
            ActionKind.SKIP_DUPLICATE, source, existing_target,
            detail=f"same content as {existing_target}",
            descriptor=descriptor,
        )

    @classmethod
    def rename_with_suffix(
        cls, source: SourceFile, target: Path, descriptor: TargetDescriptor,
        taken: Path,
    ) -> PlannedAction:
        return cls(
            ActionKind.RENAME_WITH_SUFFIX, source, target,
            detail=f"{taken.name} holds different content",
            descriptor=descriptor,
        )

    @classmethod
    def unresolved(
        cls, source: SourceFile, reason: UnresolvedReason, detail: str = "",
        descriptor: Optional[TargetDescriptor] = None,
    ) -> PlannedAction:
        return cls(
            ActionKind.UNRESOLVED, source, reason=reason, detail=detail,
            descriptor=descriptor,
        )

    @property
    def writes_target(self) -> bool:
        return self.kind in (ActionKind.MOVE, ActionKind.RENAME_WITH_SUFFIX)

    @property
    def removes_source(self) -> bool:
        return self.kind is not ActionKind.UNRESOLVED

    def to_record(self) -> dict:
        """Decision record for logs and the JSON manifest."""
        return {
            "source": str(self.source.path),
            "action": self.kind.value,
            "target": str(self.target) if self.target is not None else None,
            "reason": self.reason.value if self.reason is not None else None,
            "detail": self.detail,
        }


@dataclass
class RunResult:
    """Summary counters for a completed run."""

    files_scanned: int = 0
    files_moved: int = 0
    files_renamed: int = 0
    duplicates_removed: int = 0
    files_unresolved: int = 0
    errors: int = 0  # unresolved files that need attention
    dirs_removed: int = 0
    dry_run: bool = False
    actions: list[PlannedAction] = field(default_factory=list)
    removed_dirs: list[Path] = field(default_factory=list)
    manifest_path: Optional[Path] = None

    def count(self, action: PlannedAction) -> None:
        self.actions.append(action)
        if action.kind is ActionKind.MOVE:
            self.files_moved += 1
        elif action.kind is ActionKind.RENAME_WITH_SUFFIX:
            self.files_renamed += 1
        elif action.kind is ActionKind.SKIP_DUPLICATE:
            self.duplicates_removed += 1
        else:
            self.files_unresolved += 1
            if action.reason not in (
                UnresolvedReason.EXTENSION_EXCLUDED,
                UnresolvedReason.ALREADY_ARCHIVED,
            ):
                self.errors += 1
