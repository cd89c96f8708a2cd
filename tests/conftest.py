"""Shared test fixtures."""

from datetime import datetime
from pathlib import Path

import pytest

from photo_archiver.config import ArchiverConfig
from photo_archiver.metadata import MetadataExtractor


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    d = tmp_path / "input"
    d.mkdir()
    return d


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    d = tmp_path / "output"
    d.mkdir()
    return d


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    d = tmp_path / "logs"
    d.mkdir()
    return d


@pytest.fixture
def make_config(input_dir, output_dir, log_dir):
    """Factory fixture for creating ArchiverConfig with overrides."""

    def _make(**overrides):
        defaults = dict(
            input=input_dir,
            output=output_dir,
            dry_run=False,
            log_dir=log_dir,
        )
        defaults.update(overrides)
        return ArchiverConfig(**defaults)

    return _make


class FakeMetadata(MetadataExtractor):
    """Serves timestamps from a {file name: datetime} table instead of exiftool."""

    def __init__(self, dates: dict[str, datetime]) -> None:
        super().__init__()
        self.dates = dates
        self.asked: list[Path] = []

    def timestamps(self, paths):
        self.asked.extend(paths)
        return {p: self.dates.get(p.name) for p in paths}


@pytest.fixture
def fake_metadata():
    return FakeMetadata

