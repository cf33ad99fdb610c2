#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Report command: show the statistics and groups of the last scan.

- Reads ``stats.json`` and ``last_scan.json`` from the state dir.
- With as_json=True, writes one JSON object to stdout.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from .. import jsonio
from ..reporting import ResultSink
from ..utils.path import format_size


def cmd_show_report(state_dir: Path, detailed: bool = False, as_json: bool = False) -> int:
    """Show the last scan's summary.

    Args:
        state_dir: Directory holding the report files.
        detailed: If True, list every group and its members.
        as_json: If True, emit a single JSON object to stdout instead of logs.

    Returns:
        Exit code: 0, or 2 when no scan has been recorded yet.
    """
    logger = logging.getLogger(__name__)
    sink = ResultSink(state_dir)
    stats = sink.load_stats()
    if not stats:
        if as_json:
            return jsonio.error("report", f"no scan recorded in {state_dir}", code=2)
        logger.error("No scan recorded in %s", state_dir)
        return 2

    groups = sink.load_report()
    results: Dict[str, Any] = {"stats": stats}
    if detailed or as_json:
        results["groups"] = groups

    if as_json:
        return jsonio.success("report", data=results, meta={"state_dir": str(state_dir)})

    logger.info("=== Last Scan ===")
    logger.info("Finished: %s", stats.get("finished_at") or "unknown")
    logger.info("Files: %s", f"{stats.get('total', 0):,}")
    logger.info("Duplicate groups: %s", f"{stats.get('duplicate_groups', 0):,}")
    logger.info("Space reclaimable: %s", format_size(stats.get("space_reclaimable_bytes", 0)))
    logger.info("Skipped: %s  Cache hits: %s",
                f"{stats.get('skipped', 0):,}", f"{stats.get('cache_hits', 0):,}")

    if detailed:
        logger.info("=== Groups ===")
        for g in groups:
            logger.info("%s (%d files, %s reclaimable)",
                        g["hash"][:16], g["count"], format_size(g["reclaimable_bytes"]))
            logger.info("  keep: %s", g["keep"])
            for path in g["files"][1:]:
                logger.info("  dup:  %s", path)
    return 0
