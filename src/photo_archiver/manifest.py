"""JSON decision manifest: one record per source file, plus the run summary."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from photo_archiver.config import ArchiverConfig
from photo_archiver.models import PlannedAction, RunResult

logger = logging.getLogger(__name__)


class ManifestWriter:
    """Collects decision records during a run and writes a JSON manifest."""

    def __init__(self, run_id: str, config: ArchiverConfig, log_dir: Path) -> None:
        self.run_id = run_id
        self.config = config
        self.log_dir = log_dir
        self.decisions: list[dict] = []

    def record(self, action: PlannedAction) -> None:
        self.decisions.append(action.to_record())

    def finalize(self, result: RunResult) -> Path:
        """Write the JSON manifest file and return its path."""
        extensions = self.config.extensions
        manifest = {
            "schema_version": "1.0",
            "run_id": self.run_id,
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "config": {
                "input": str(self.config.input),
                "output": str(self.config.output),
                "dry_run": self.config.dry_run,
                "extensions": sorted(extensions) if extensions is not None else None,
                "timezone": self.config.timezone,
                "mtime_fallback": self.config.mtime_fallback,
            },
            "decisions": self.decisions,
            "removed_dirs": [str(d) for d in result.removed_dirs],
            "summary": {
                "files_scanned": result.files_scanned,
                "files_moved": result.files_moved,
                "files_renamed": result.files_renamed,
                "duplicates_removed": result.duplicates_removed,
                "files_unresolved": result.files_unresolved,
                "errors": result.errors,
                "dirs_removed": result.dirs_removed,
            },
        }

        self.log_dir.mkdir(parents=True, exist_ok=True)
        manifest_path = self.log_dir / f"{self.run_id}.json"
        manifest_path.write_text(
            json.dumps(manifest, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

        logger.info(f"Manifest: {manifest_path}")
        return manifest_path
