"""Tests for the Scanner module."""

from pathlib import Path

from photo_archiver.scanner import Scanner


def test_scan_finds_files(input_dir):
    (input_dir / "photo.jpg").write_bytes(b"\xff\xd8" + b"\x00" * 100)
    (input_dir / "video.mp4").write_bytes(b"\x00" * 200)

    files = Scanner(input_dir).scan()

    assert [f.path.name for f in files] == ["photo.jpg", "video.mp4"]


def test_scan_records_relative_path_and_extension(input_dir):
    sub = input_dir / "Trip" / "deep"
    sub.mkdir(parents=True)
    (sub / "Nested.JPG").write_bytes(b"\x00" * 10)

    [record] = Scanner(input_dir).scan()

    assert record.relative == Path("Trip/deep/Nested.JPG")
    assert record.extension == ".jpg"
    assert record.path == sub / "Nested.JPG"


def test_scan_order_is_stable(input_dir):
    for rel in ["b/2.jpg", "a/1.jpg", "c.jpg", "a/0.jpg"]:
        p = input_dir / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"x")

    names = [f.relative.as_posix() for f in Scanner(input_dir).scan()]

    assert names == ["a/0.jpg", "a/1.jpg", "b/2.jpg", "c.jpg"]


def test_scan_skips_junk_files(input_dir):
    (input_dir / "Thumbs.db").write_bytes(b"\x00" * 10)
    (input_dir / ".DS_Store").write_bytes(b"\x00" * 10)
    (input_dir / "real.jpg").write_bytes(b"\x00" * 10)

    files = Scanner(input_dir).scan()

    assert [f.path.name for f in files] == ["real.jpg"]


def test_scan_skips_junk_dirs(input_dir):
    junk = input_dir / ".picasaoriginals"
    junk.mkdir()
    (junk / "hidden.jpg").write_bytes(b"\x00" * 10)
    (input_dir / "visible.jpg").write_bytes(b"\x00" * 10)

    files = Scanner(input_dir).scan()

    assert [f.path.name for f in files] == ["visible.jpg"]


def test_scan_keeps_unknown_extensions(input_dir):
    (input_dir / "readme.txt").write_text("hello")
    (input_dir / "real.png").write_bytes(b"\x00" * 10)

    files = Scanner(input_dir).scan()

    assert {f.extension for f in files} == {".txt", ".png"}
