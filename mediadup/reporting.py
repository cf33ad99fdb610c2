#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Persistence of the scan report and statistics summary.

``last_scan.json`` holds the ordered group list; ``stats.json`` the
summary counters. A previous report is renamed, never overwritten.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import REPORT_FILENAME, STATS_FILENAME
from .jsonio import dumps
from .models.group import ScanResult
from .utils.path import atomic_write_text, ensure_dir
from .utils.time import file_stamp, utc_now_str

logger = logging.getLogger(__name__)


class ResultSink:
    def __init__(self, state_dir: Union[str, Path]):
        self.state_dir = Path(state_dir)
        self.report_path = self.state_dir / REPORT_FILENAME
        self.stats_path = self.state_dir / STATS_FILENAME

    def _free_name(self, stem: str, stamp: str) -> Path:
        candidate = self.state_dir / f"{stem}_{stamp}.json"
        n = 1
        while candidate.exists():
            candidate = self.state_dir / f"{stem}_{stamp}_{n}.json"
            n += 1
        return candidate

    def rotate(self) -> Optional[Path]:
        """Rename an existing report to ``last_scan_<its mtime>.json``.

        Returns the new name, or None when there was nothing to rotate.
        Raises OSError when the rename fails.
        """
        if not self.report_path.exists():
            return None
        stem = self.report_path.stem
        rotated = self._free_name(stem, file_stamp(self.report_path.stat().st_mtime))
        os.rename(self.report_path, rotated)
        logger.info("Previous report moved to %s", rotated)
        return rotated

    def write(self, result: ScanResult) -> Path:
        """Write report and stats; returns the path the report landed at."""
        ensure_dir(self.state_dir)
        if result.finished_at is None:
            result.finished_at = utc_now_str()

        report_path = self.report_path
        try:
            self.rotate()
        except OSError as e:
            # Keep the old report intact and put the new one beside it
            report_path = self._free_name(self.report_path.stem, file_stamp())
            logger.error("Could not rotate %s (%s); writing report to %s",
                         self.report_path, e, report_path)

        atomic_write_text(report_path, dumps([g.to_record() for g in result.groups]) + "\n")
        atomic_write_text(self.stats_path, dumps(result.stats()) + "\n")
        logger.info("Report written to %s", report_path)
        return report_path

    def load_report(self) -> List[Dict[str, Any]]:
        if not self.report_path.exists():
            return []
        with self.report_path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def load_stats(self) -> Dict[str, Any]:
        if not self.stats_path.exists():
            return {}
        with self.stats_path.open("r", encoding="utf-8") as f:
            return json.load(f)
