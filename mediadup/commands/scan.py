#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
find-duplicates command (thin wrapper).
All scanning logic lives in ``scanning/scanner.py``; this module only
wires up the activity log and renders the result.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .. import jsonio
from ..config import ACTIVITY_LOG_FILENAME
from ..models.group import ScanResult
from ..normalize.registry import Backends
from ..scanning.scanner import DuplicateScanner, ScanOptions
from ..utils.path import ensure_dir, format_size

logger = logging.getLogger(__name__)

ACTIVITY_LOGGER = "mediadup.actions"


@contextmanager
def activity_log(state_dir: Path) -> Iterator[None]:
    """Append action results to ``<state_dir>/activity.log`` for the duration."""
    ensure_dir(state_dir)
    handler = logging.FileHandler(str(Path(state_dir) / ACTIVITY_LOG_FILENAME), encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    handler.setLevel(logging.INFO)
    action_logger = logging.getLogger(ACTIVITY_LOGGER)
    previous_level = action_logger.level
    action_logger.addHandler(handler)
    if action_logger.getEffectiveLevel() > logging.INFO:
        action_logger.setLevel(logging.INFO)
    try:
        yield
    finally:
        action_logger.removeHandler(handler)
        action_logger.setLevel(previous_level)
        handler.close()


def _print_result(result: ScanResult) -> None:
    for group in result.groups:
        print(f"Group {group.hash[:16]} ({group.count} files, {format_size(group.reclaimable_bytes)} reclaimable)")
        print(f"  keep: {group.keep.path}")
        for outcome in group.actions:
            status = "ok" if outcome.ok else "FAILED"
            line = f"  {outcome.disposition} [{status}]: {outcome.path}"
            if outcome.detail:
                line += f" ({outcome.detail})"
            print(line)
    print(f"Files scanned: {result.total_files}")
    print(f"Duplicate groups: {result.duplicate_groups}")
    print(f"Space reclaimable: {format_size(result.space_reclaimable_bytes)}")
    print(f"Skipped: {len(result.skipped)}  Cache hits: {result.cache_hits}")


def cmd_find_duplicates(root: str, options: ScanOptions, as_json: bool = False,
                        backends: Optional[Backends] = None) -> int:
    """Scan ``root`` and apply ``options.action`` to every duplicate.

    Returns 0 once the scan completes, including when some files were
    skipped or some actions failed; those are reported, not fatal.
    """
    scanner = DuplicateScanner(options, backends=backends)
    with activity_log(scanner.state_dir):
        result = scanner.scan(root)

    if as_json:
        return jsonio.success(
            "find-duplicates",
            data={
                "stats": result.stats(),
                "groups": [g.to_record() for g in result.groups],
            },
            meta={
                "root": result.root,
                "action": result.action,
                "report": str(scanner.last_report),
                "skip_log": str(scanner.skip_log.path),
            },
        )
    _print_result(result)
    return 0
