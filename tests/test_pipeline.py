"""Integration tests for the full pipeline."""

import json
import os
import subprocess
from datetime import datetime
from pathlib import Path

import pytest

from photo_archiver.errors import TargetTreeUnwritable
from photo_archiver.pipeline import Pipeline, check_output_root


def _has_exiftool() -> bool:
    try:
        subprocess.run(["exiftool", "-ver"], capture_output=True, check=True)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


requires_exiftool = pytest.mark.skipif(
    not _has_exiftool(), reason="exiftool not installed"
)

JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 100
TS = datetime(2025, 7, 23, 8, 54, 4)


def _write(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def test_pipeline_empty_input(make_config):
    result = Pipeline(make_config(), "test-run").run()

    assert result.files_scanned == 0
    assert result.errors == 0
    assert result.manifest_path is not None


def test_pipeline_sorts_and_prunes(make_config, fake_metadata, input_dir, output_dir):
    _write(input_dir / "IMG_1.jpg", JPEG)
    _write(input_dir / "Mariage XYZ" / "DSC_0101.jpg", JPEG + b"\x01")
    metadata = fake_metadata({
        "IMG_1.jpg": TS,
        "DSC_0101.jpg": datetime(2025, 7, 23, 10, 12, 33),
    })

    result = Pipeline(make_config(), "test-run", metadata=metadata).run()

    assert result.files_moved == 2
    assert (output_dir / "2025" / "07" / "2025-07-23 08.54.04.jpg").exists()
    assert (output_dir / "2025" / "07 Mariage XYZ" / "2025-07-23 10.12.33.jpg").exists()
    assert not (input_dir / "Mariage XYZ").exists()
    assert result.removed_dirs == [input_dir / "Mariage XYZ"]


def test_pipeline_duplicates_only_tag_dir_removed(
    make_config, fake_metadata, input_dir, output_dir,
):
    """A tag folder whose two files were both already archived disappears."""
    tag = input_dir / "Mariage XYZ"
    _write(tag / "a.jpg", b"first")
    _write(tag / "b.jpg", b"second")
    month = output_dir / "2025" / "07 Mariage XYZ"
    _write(month / "2025-07-23 08.54.04.jpg", b"first")
    _write(month / "2025-07-23 08.54.05.jpg", b"second")
    metadata = fake_metadata({"a.jpg": TS, "b.jpg": datetime(2025, 7, 23, 8, 54, 5)})

    result = Pipeline(make_config(), "test-run", metadata=metadata).run()

    assert result.duplicates_removed == 2
    assert not tag.exists()
    assert sorted(p.name for p in month.iterdir()) == [
        "2025-07-23 08.54.04.jpg", "2025-07-23 08.54.05.jpg",
    ]


def test_pipeline_only_probes_accepted_files(make_config, fake_metadata, input_dir):
    _write(input_dir / "a.jpg", JPEG)
    _write(input_dir / "notes.txt", b"hello")
    metadata = fake_metadata({"a.jpg": TS})

    result = Pipeline(make_config(), "test-run", metadata=metadata).run()

    assert metadata.asked == [input_dir / "a.jpg"]
    assert result.files_unresolved == 1
    assert result.errors == 0
    assert (input_dir / "notes.txt").exists()


def test_pipeline_dry_run_matches_real_run(
    make_config, fake_metadata, input_dir, output_dir, log_dir,
):
    _write(output_dir / "2025" / "07" / "2025-07-23 08.54.04.jpg", b"archived")
    _write(input_dir / "a.jpg", b"archived")
    _write(input_dir / "b.jpg", b"new")
    _write(input_dir / "Trip" / "c.jpg", b"trip")
    _write(input_dir / "Trip" / "nodate.jpg", b"?")
    _write(input_dir / "Party" / "d.jpg", b"party")
    dates = {"a.jpg": TS, "b.jpg": TS, "c.jpg": TS, "d.jpg": TS}

    dry = Pipeline(
        make_config(dry_run=True), "dry", metadata=fake_metadata(dates),
    ).run()
    assert (input_dir / "a.jpg").exists()
    assert not (output_dir / "2025" / "07 Trip").exists()

    real = Pipeline(make_config(), "real", metadata=fake_metadata(dates)).run()

    assert dry.actions == real.actions
    assert dry.removed_dirs == [input_dir / "Party"]
    assert dry.removed_dirs == real.removed_dirs
    dry_manifest = json.loads((log_dir / "dry.json").read_text())
    real_manifest = json.loads((log_dir / "real.json").read_text())
    assert dry_manifest["decisions"] == real_manifest["decisions"]
    assert (input_dir / "Trip" / "nodate.jpg").exists()


def test_pipeline_second_run_is_noop(make_config, fake_metadata, input_dir, output_dir):
    _write(input_dir / "a.jpg", b"a")
    dates = {"a.jpg": TS}
    Pipeline(make_config(), "one", metadata=fake_metadata(dates)).run()

    # Same file shows up again: recognised as already archived
    _write(input_dir / "a.jpg", b"a")
    result = Pipeline(make_config(), "two", metadata=fake_metadata(dates)).run()

    assert result.duplicates_removed == 1
    assert [p.name for p in (output_dir / "2025" / "07").iterdir()] == [
        "2025-07-23 08.54.04.jpg",
    ]


def test_pipeline_no_manifest(make_config, log_dir):
    result = Pipeline(make_config(write_manifest=False), "quiet").run()
    assert result.manifest_path is None
    assert not (log_dir / "quiet.json").exists()


def test_unwritable_output_aborts_before_processing(
    make_config, fake_metadata, input_dir, tmp_path,
):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    _write(input_dir / "a.jpg", b"a")
    metadata = fake_metadata({"a.jpg": TS})

    with pytest.raises(TargetTreeUnwritable):
        Pipeline(make_config(output=blocker / "out"), "x", metadata=metadata).run()

    assert metadata.asked == []
    assert (input_dir / "a.jpg").exists()


class TestCheckOutputRoot:
    def test_creates_missing_root(self, tmp_path):
        out = tmp_path / "new" / "archive"
        check_output_root(out, dry_run=False)
        assert out.is_dir()

    def test_dry_run_does_not_create(self, tmp_path):
        out = tmp_path / "new" / "archive"
        check_output_root(out, dry_run=True)
        assert not out.exists()

    def test_file_in_place_of_root(self, tmp_path):
        out = tmp_path / "archive"
        out.write_text("oops")
        with pytest.raises(TargetTreeUnwritable):
            check_output_root(out, dry_run=True)


@requires_exiftool
def test_pipeline_real_exiftool_no_date(make_config, input_dir):
    """A JPEG without EXIF stays in the input, reported as unresolved."""
    _write(input_dir / "photo.jpg", JPEG)

    result = Pipeline(make_config(), "test-run").run()

    assert result.files_unresolved == 1
    assert result.actions[0].reason.value == "metadata_unavailable"
    assert (input_dir / "photo.jpg").exists()


@requires_exiftool
def test_pipeline_real_exiftool_mtime_fallback(make_config, input_dir, output_dir):
    photo = _write(input_dir / "photo.jpg", JPEG)
    stamp = datetime(2019, 3, 4, 5, 6, 7).timestamp()
    os.utime(photo, (stamp, stamp))

    result = Pipeline(make_config(mtime_fallback=True), "test-run").run()

    assert result.files_moved == 1
    assert (output_dir / "2019" / "03" / "2019-03-04 05.06.07.jpg").exists()
