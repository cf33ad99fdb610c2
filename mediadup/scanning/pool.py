#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bounded fan-out of per-file tasks.

Process workers are the default. At most ``jobs`` files are in flight at
once, so when a worker process dies (a decoder segfault, an OOM kill) only
those files are affected: each of them is retried alone in a one-worker
pool, the file that kills that pool too is skipped, and the rest of the
scan continues in a fresh pool. Each worker process opens its own cache
connection in the pool initializer. The thread executor runs the same task
function in-process.
"""

import logging
from collections import deque
from concurrent.futures import (
    FIRST_COMPLETED, Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor, wait
)
from concurrent.futures.process import BrokenProcessPool
from pathlib import Path
from typing import Deque, Dict, List, Optional, Sequence

from tqdm import tqdm

from ..config import default_jobs
from ..database.manager import CacheStore
from ..models.results import Skipped, SkipReason
from ..normalize.registry import Backends
from .skiplog import SkipLog
from .worker import FileOutcome, placeholder_media, process_file

logger = logging.getLogger(__name__)

EXECUTORS = ("process", "thread")

# Per-process state installed by _init_worker
_backends: Optional[Backends] = None
_cache: Optional[CacheStore] = None
_skip_log: Optional[SkipLog] = None


def _init_worker(backends: Backends, cache_db: Optional[Path], skip_log: Optional[SkipLog]) -> None:
    global _backends, _cache, _skip_log
    _backends = backends
    _cache = CacheStore(cache_db) if cache_db else None
    _skip_log = skip_log


def _process_in_worker(path: str) -> FileOutcome:
    return process_file(path, _backends or {}, _cache, _skip_log)


class WorkerPool:
    """Run ``process_file`` over many paths with at most ``jobs`` in flight."""

    def __init__(self, backends: Backends, jobs: Optional[int] = None,
                 cache_db: Optional[Path] = None, skip_log: Optional[SkipLog] = None,
                 executor: str = "process", progress: bool = True):
        if executor not in EXECUTORS:
            raise ValueError(f"executor must be one of {EXECUTORS}, got {executor!r}")
        self.backends = backends
        self.jobs = max(1, jobs or default_jobs())
        self.cache_db = Path(cache_db) if cache_db else None
        self.skip_log = skip_log
        self.executor = executor
        self.progress = progress

    def _make_executor(self, workers: Optional[int] = None) -> Executor:
        workers = workers or self.jobs
        if self.executor == "thread":
            return ThreadPoolExecutor(max_workers=workers)
        return ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(self.backends, self.cache_db, self.skip_log),
        )

    def _submit(self, pool: Executor, path: str, cache: Optional[CacheStore]) -> Future:
        if self.executor == "thread":
            return pool.submit(process_file, path, self.backends, cache, self.skip_log)
        return pool.submit(_process_in_worker, path)

    def run(self, paths: Sequence[str]) -> List[FileOutcome]:
        """Process every path; returns outcomes in completion order."""
        if not paths:
            return []
        logger.info("Hashing %d files with %d %s workers", len(paths), self.jobs, self.executor)

        # Thread workers share one store; it hands each thread its own connection
        cache = CacheStore(self.cache_db) if (self.cache_db and self.executor == "thread") else None
        outcomes: List[FileOutcome] = []
        queue: Deque[str] = deque(paths)
        try:
            with tqdm(total=len(paths), desc="Hashing", unit="file",
                      disable=not self.progress) as bar:
                while queue:
                    suspects = self._drain(queue, cache, outcomes, bar)
                    if suspects:
                        logger.warning("A worker process died with %d files in flight; "
                                       "retrying them one at a time", len(suspects))
                    for path in suspects:
                        outcomes.append(self._isolate(path))
                        bar.update(1)
        finally:
            if cache is not None:
                cache.close()
        return outcomes

    def _drain(self, queue: Deque[str], cache: Optional[CacheStore],
               outcomes: List[FileOutcome], bar) -> List[str]:
        """Feed ``queue`` through one executor until it is empty or the pool breaks.

        Returns the paths that were in flight when a worker process died.
        """
        in_flight: Dict[Future, str] = {}
        suspects: List[str] = []
        broken = False
        with self._make_executor() as pool:
            while (queue or in_flight) and not (suspects or broken):
                while queue and len(in_flight) < self.jobs:
                    path = queue.popleft()
                    try:
                        fut = self._submit(pool, path, cache)
                    except BrokenProcessPool:
                        queue.appendleft(path)
                        broken = True
                        break
                    in_flight[fut] = path
                if broken or not in_flight:
                    break
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for fut in done:
                    path = in_flight.pop(fut)
                    try:
                        outcomes.append(self._collect(fut, path))
                        bar.update(1)
                    except BrokenProcessPool:
                        suspects.append(path)
            if suspects or broken:
                # The rest of the in-flight futures resolve once the pool notices
                for fut, path in in_flight.items():
                    try:
                        outcomes.append(self._collect(fut, path))
                        bar.update(1)
                    except BrokenProcessPool:
                        suspects.append(path)
        return suspects

    def _isolate(self, path: str) -> FileOutcome:
        """Run one file alone so a crash can be pinned on it."""
        with self._make_executor(workers=1) as pool:
            fut = self._submit(pool, path, None)
            try:
                return self._collect(fut, path)
            except BrokenProcessPool as e:
                return self._crashed(path, e)

    def _collect(self, fut: Future, path: str) -> FileOutcome:
        try:
            return fut.result()
        except BrokenProcessPool:
            raise
        except Exception as e:
            return self._crashed(path, e)

    def _crashed(self, path: str, error: BaseException) -> FileOutcome:
        logger.error("Worker failed on %s: %s", path, error)
        skipped = Skipped(SkipReason.NORMALIZE_FAILED,
                          f"worker crashed: {type(error).__name__}: {error}")
        media = placeholder_media(path)
        if self.skip_log is not None:
            self.skip_log.record(skipped.reason, media.path, skipped.detail)
        return FileOutcome(media, skipped)
