#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main scanner integration for the media deduplicator.
Coordinates all phases: discovery, hashing, grouping, actions, report.
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..actions import ActionExecutor
from ..config import (
    ACTION_RELOCATE, ACTION_REPORT_ONLY, DEFAULT_KEEP_POLICY, SKIP_LOG_FILENAME,
    cache_db_path, default_jobs, state_dir, tool_timeout, trash_dir
)
from ..database.init import init_db_if_needed
from ..errors import InvalidScanRoot
from ..grouping import GroupBuilder
from ..models.group import ScanResult
from ..models.media_file import kind_for_path
from ..models.results import Skipped
from ..normalize.registry import Backends, check_backends, default_backends
from ..reporting import ResultSink
from ..utils.path import ensure_dir, format_size
from ..utils.time import utc_now_str
from .discovery import FileDiscovery
from .pool import WorkerPool
from .skiplog import SkipLog

logger = logging.getLogger(__name__)


@dataclass
class ScanOptions:
    action: str = ACTION_REPORT_ONLY
    keep_policy: str = DEFAULT_KEEP_POLICY
    jobs: Optional[int] = None
    cache_db: Optional[Path] = None
    trash_dir: Optional[Path] = None
    state_dir: Optional[Path] = None
    use_cache: bool = True
    executor: str = "process"
    progress: bool = True


class DuplicateScanner:
    """Runs one find-duplicates scan end to end."""

    def __init__(self, options: Optional[ScanOptions] = None,
                 backends: Optional[Backends] = None):
        self.options = options or ScanOptions()
        self.backends = backends if backends is not None else default_backends(tool_timeout())
        self.state_dir = Path(self.options.state_dir) if self.options.state_dir else state_dir()
        self.cache_db = Path(self.options.cache_db) if self.options.cache_db else cache_db_path()
        self.skip_log = SkipLog(self.state_dir / SKIP_LOG_FILENAME)
        self.sink = ResultSink(self.state_dir)

        trash = None
        if self.options.action == ACTION_RELOCATE:
            trash = Path(self.options.trash_dir) if self.options.trash_dir else trash_dir()
        self.executor = ActionExecutor(self.options.action, trash)
        self.last_report: Optional[Path] = None

    @staticmethod
    def validate_root(root) -> str:
        root = os.path.abspath(str(root))
        if not os.path.exists(root):
            raise InvalidScanRoot(root, "does not exist")
        if not os.path.isdir(root):
            raise InvalidScanRoot(root, "not a directory")
        if not os.access(root, os.R_OK | os.X_OK):
            raise InvalidScanRoot(root, "permission denied")
        return root

    def scan(self, root) -> ScanResult:
        """Execute the complete pipeline and persist its report.

        Raises InvalidScanRoot or BackendUnavailable before any file is
        processed; everything after that is isolated per file.
        """
        root = self.validate_root(root)
        opts = self.options
        start_time = time.perf_counter()
        logger.info("Scanning %s (action: %s, keep: %s)", root, opts.action, opts.keep_policy)

        candidates = FileDiscovery().discover_files(root)
        check_backends({kind_for_path(p) for p in candidates}, self.backends)

        ensure_dir(self.state_dir)
        cache_db = None
        if opts.use_cache and init_db_if_needed(self.cache_db):
            cache_db = self.cache_db

        pool = WorkerPool(self.backends, jobs=opts.jobs or default_jobs(), cache_db=cache_db,
                          skip_log=self.skip_log, executor=opts.executor,
                          progress=opts.progress)
        outcomes = pool.run(candidates)

        builder = GroupBuilder(opts.keep_policy)
        builder.add_outcomes(outcomes)
        groups = builder.groups()

        self.executor.apply_all(groups)

        result = ScanResult(
            root=root,
            total_files=len(candidates),
            groups=groups,
            skipped=[o.result for o in outcomes if isinstance(o.result, Skipped)],
            cache_hits=sum(1 for o in outcomes if o.from_cache),
            action=opts.action,
            finished_at=utc_now_str(),
        )
        self.last_report = self.sink.write(result)

        elapsed = time.perf_counter() - start_time
        logger.info("Scan complete in %.1fs: %d files, %d duplicate groups, %s reclaimable, "
                    "%d skipped, %d cache hits", elapsed, result.total_files,
                    result.duplicate_groups, format_size(result.space_reclaimable_bytes),
                    len(result.skipped), result.cache_hits)
        if result.skipped:
            logger.info("Skipped inputs are listed in %s", self.skip_log.path)
        failed = result.failed_actions
        if failed:
            logger.warning("%d duplicate actions failed; see %s", len(failed), self.last_report)
        return result
