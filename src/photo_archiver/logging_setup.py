"""Logging configuration for photo-archiver."""

import logging
import sys
from datetime import datetime
from pathlib import Path

from photo_archiver.config import LogMode

# Loggers that emit one line per file decision
DECISION_LOGGERS = ("photo_archiver.mover", "photo_archiver.sweeper")


class DecisionFilter(logging.Filter):
    """Drop per-file decision records below the level --log asks for."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name in DECISION_LOGGERS:
            return record.levelno >= self.level
        return True


def setup_logging(
    log_mode: LogMode = LogMode.CONFLICTS,
    verbose: bool = False,
    log_dir: Path = Path("."),
) -> str:
    """Configure the photo_archiver logger with console + timestamped file handler.

    On the console, ``log_mode`` picks which per-file decisions are shown
    (all, conflicts and errors, errors only); ``verbose`` shows everything
    at DEBUG. The file always gets everything. Returns the run_id string
    (e.g. 'photo-archiver_20260216_143022') so the manifest writer can use
    the same timestamp.
    """
    run_id = f"photo-archiver_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

    root = logging.getLogger("photo_archiver")
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not verbose:
        console.addFilter(DecisionFilter(log_mode.console_level))
    console.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)-7s] %(message)s",
        datefmt="%H:%M:%S",
    ))
    root.addHandler(console)

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{run_id}.log"
    fh = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
    ))
    root.addHandler(fh)

    return run_id
