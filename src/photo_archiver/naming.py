"""Canonical archive names: YYYY/MM[ tag]/YYYY-MM-DD HH.MM.SS[ TOKEN].ext"""

from __future__ import annotations

from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional

from photo_archiver.models import TargetDescriptor


class NameBuilder:
    """Pure mapping from a timestamp and tag to a destination path.

    ``tz`` is the process-wide zone. Aware timestamps are converted into it
    before the calendar fields are read; naive timestamps are used as is.
    """

    def __init__(self, output_root: Path, tz: Optional[tzinfo] = None) -> None:
        self.output_root = output_root
        self.tz = tz

    def localize(self, ts: datetime) -> datetime:
        if self.tz is not None and ts.tzinfo is not None:
            return ts.astimezone(self.tz)
        return ts

    def descriptor(self, ts: datetime, tag: Optional[str]) -> TargetDescriptor:
        ts = self.localize(ts)
        if tag is not None:
            tag = tag.strip() or None
        return TargetDescriptor(year=ts.year, month=ts.month, tag=tag)

    def target_dir(self, descriptor: TargetDescriptor) -> Path:
        month = f"{descriptor.month:02d}"
        if descriptor.tag:
            month = f"{month} {descriptor.tag}"
        return self.output_root / f"{descriptor.year:04d}" / month

    def canonical_name(self, ts: datetime) -> str:
        ts = self.localize(ts)
        return (
            f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d} "
            f"{ts.hour:02d}.{ts.minute:02d}.{ts.second:02d}"
        )

    def filename(self, ts: datetime, extension: str, token: Optional[str] = None) -> str:
        name = self.canonical_name(ts)
        if token:
            name = f"{name} {token}"
        return f"{name}{extension}"

    def build(
        self, ts: datetime, tag: Optional[str], extension: str,
    ) -> tuple[TargetDescriptor, Path, str]:
        descriptor = self.descriptor(ts, tag)
        return descriptor, self.target_dir(descriptor), self.filename(ts, extension)
