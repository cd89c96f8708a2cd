"""Run orchestrator: scan -> timestamps -> classify/apply -> sweep -> manifest."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from photo_archiver.config import ArchiverConfig
from photo_archiver.engine import ClassificationEngine
from photo_archiver.errors import TargetTreeUnwritable
from photo_archiver.manifest import ManifestWriter
from photo_archiver.metadata import MetadataExtractor
from photo_archiver.models import RunResult
from photo_archiver.scanner import Scanner
from photo_archiver.sweeper import CleanupSweeper

logger = logging.getLogger(__name__)


def check_output_root(output: Path, dry_run: bool) -> None:
    """Make sure the archive root can be written, creating it outside dry-run.

    Raises TargetTreeUnwritable before any file has been touched.
    """
    if output.exists():
        if not output.is_dir():
            raise TargetTreeUnwritable(f"output is not a directory: {output}")
        if not os.access(output, os.W_OK | os.X_OK):
            raise TargetTreeUnwritable(f"output is not writable: {output}")
        return

    if dry_run:
        parent = next(p for p in output.absolute().parents if p.exists())
        if not os.access(parent, os.W_OK | os.X_OK):
            raise TargetTreeUnwritable(f"cannot create output under {parent}")
        return

    try:
        output.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TargetTreeUnwritable(f"cannot create output {output}: {e}") from e


class Pipeline:
    """Orchestrates one full archiving run."""

    def __init__(
        self,
        config: ArchiverConfig,
        run_id: str,
        metadata: Optional[MetadataExtractor] = None,
    ) -> None:
        self.config = config
        self.run_id = run_id
        self.scanner = Scanner(config.input)
        self.metadata = metadata or MetadataExtractor(
            batch_size=config.exiftool_batch_size,
            mtime_fallback=config.mtime_fallback,
            timezone=config.timezone,
        )
        self.engine = ClassificationEngine(config)
        self.sweeper = CleanupSweeper(self.engine.classifier, dry_run=config.dry_run)
        self.manifest = (
            ManifestWriter(run_id, config, config.log_dir)
            if config.write_manifest else None
        )

    def run(self) -> RunResult:
        result = RunResult(dry_run=self.config.dry_run)

        check_output_root(self.config.output, self.config.dry_run)

        # Phase 1: Scan input directory
        logger.info("Phase 1/4: Scanning input directory...")
        sources = self.scanner.scan()
        result.files_scanned = len(sources)
        logger.info(f"  Found {len(sources)} files")

        if not sources:
            logger.info("No files to process.")
            return self._finish(result)

        # Phase 2: Capture timestamps, only for files the engine will accept
        logger.info("Phase 2/4: Extracting dates via exiftool...")
        wanted = [s.path for s in sources if self.engine.classifier.accepts(s.path)]
        timestamps = self.metadata.timestamps(wanted)

        # Phase 3: Decide and apply, file by file
        logger.info("Phase 3/4: Classifying files...")
        for action in self.engine.process(sources, timestamps):
            result.count(action)
            if self.manifest is not None:
                self.manifest.record(action)

        # Phase 4: Remove tag directories left without media
        logger.info("Phase 4/4: Pruning emptied tag directories...")
        result.removed_dirs = self.sweeper.sweep(
            self.engine.cleanup_candidates,
            departed=self.engine.departed,
            arrived=self.engine.arrived,
        )
        result.dirs_removed = len(result.removed_dirs)

        return self._finish(result)

    def _finish(self, result: RunResult) -> RunResult:
        if self.manifest is not None:
            result.manifest_path = self.manifest.finalize(result)
        return result
