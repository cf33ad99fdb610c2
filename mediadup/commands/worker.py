#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Single-task entry point: hash one file through the cache and print one
``token|path`` line. The in-process pool calls ``process_file`` directly;
this command exposes the same task to external schedulers.
"""

import logging
from pathlib import Path
from typing import Optional

from ..database.init import init_db_if_needed
from ..database.manager import CacheStore
from ..models.results import format_worker_line
from ..normalize.registry import Backends, default_backends
from ..scanning.skiplog import SkipLog
from ..scanning.worker import process_file
from ..config import tool_timeout

logger = logging.getLogger(__name__)


def cmd_worker(cache_db: str, path: str, backends: Optional[Backends] = None,
               skip_log: Optional[SkipLog] = None) -> int:
    backends = backends if backends is not None else default_backends(tool_timeout())
    db_path = Path(cache_db)
    store = CacheStore(db_path) if init_db_if_needed(db_path) else None
    try:
        outcome = process_file(path, backends, store, skip_log)
    finally:
        if store is not None:
            store.close()
    print(format_worker_line(outcome.result, outcome.media.path), flush=True)
    return 0
