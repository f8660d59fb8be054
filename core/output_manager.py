"""
Output Manager — Per-run result folders and retention cleanup.

Each seed run gets a folder under the base output directory named
YYYYMMDD_HHMM_{run_name} (e.g., "20261019_1430_Menu_Catalog_Seed"), holding:
  - seed_results.json: timestamps, config, success flag, summary counts, error

Folders older than retention_days are removed by cleanup_old_folders(), which
run.py calls before seeding. retention_days=0 keeps everything.
"""

import json
import re
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

_FOLDER_PATTERN = re.compile(r"^(\d{8})_(\d{4})_.*$")


class OutputManager:
    """Creates the current run's folder and prunes old ones.

    Attributes:
        base_dir: Root output directory.
        run_name: Folder suffix (sanitized to alphanumerics, '-' and '_').
        retention_days: Age in days after which run folders are deleted.
        current_dir: This run's folder, or None until create_run_dir().
    """

    def __init__(self, base_dir: str, run_name: str, retention_days: int = 30):
        self.base_dir = Path(base_dir)
        self.run_name = run_name
        self.retention_days = retention_days
        self.current_dir: Optional[Path] = None
        self._started = datetime.now()

    def create_run_dir(self) -> Path:
        safe_name = re.sub(r"[^A-Za-z0-9_-]", "_", self.run_name)
        self.current_dir = self.base_dir / f"{self._started:%Y%m%d_%H%M}_{safe_name}"
        self.current_dir.mkdir(parents=True, exist_ok=True)
        return self.current_dir

    def write_json(self, filename: str, data: Any) -> Path:
        """Write data as indented JSON into the current run folder.

        Raises:
            RuntimeError: If create_run_dir() has not been called yet.
        """
        if self.current_dir is None:
            raise RuntimeError("Run directory not created. Call create_run_dir() first.")
        path = self.current_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
        return path

    def cleanup_old_folders(self, debug: bool = False) -> int:
        """Delete run folders older than retention_days.

        Returns:
            How many folders were removed.
        """
        if self.retention_days <= 0 or not self.base_dir.is_dir():
            return 0

        cutoff = datetime.now() - timedelta(days=self.retention_days)
        removed = 0
        for folder in self.base_dir.iterdir():
            match = _FOLDER_PATTERN.match(folder.name)
            if not folder.is_dir() or not match:
                continue
            try:
                created = datetime.strptime(f"{match.group(1)}_{match.group(2)}", "%Y%m%d_%H%M")
                if created < cutoff:
                    shutil.rmtree(folder)
                    removed += 1
                    if debug:
                        print(f"  Deleted old output folder: {folder.name}")
            except (ValueError, OSError) as e:
                if debug:
                    print(f"  Warning: Could not process folder {folder.name}: {e}")
        return removed
