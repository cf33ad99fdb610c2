#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Append-only log of files that could not be hashed.

Line format (tab separated): timestamp, reason, path, optional detail.
Each record is written with a single ``os.write`` on an ``O_APPEND``
descriptor, so lines from concurrent worker processes never interleave.
"""

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from ..models.results import SkipReason
from ..utils.path import ensure_dir
from ..utils.time import log_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkipEntry:
    timestamp: str
    reason: str
    path: str
    detail: Optional[str] = None


def _field(value: str) -> str:
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


class SkipLog:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(self, reason: SkipReason, path: str, detail: Optional[str] = None) -> None:
        fields = [log_timestamp(), reason.value, path]
        if detail:
            fields.append(detail)
        line = "\t".join(_field(f) for f in fields) + "\n"
        data = line.encode("utf-8", errors="surrogateescape")
        try:
            with self._lock:
                ensure_dir(self.path.parent)
                fd = os.open(str(self.path), os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
                try:
                    os.write(fd, data)
                finally:
                    os.close(fd)
        except OSError as e:
            logger.warning("Could not append to skip log %s: %s", self.path, e)

    def entries(self) -> List[SkipEntry]:
        if not self.path.exists():
            return []
        entries = []
        with self.path.open("r", encoding="utf-8", errors="surrogateescape") as f:
            for line in f:
                parts = line.rstrip("\n").split("\t")
                if len(parts) < 3:
                    continue
                detail = parts[3] if len(parts) > 3 else None
                entries.append(SkipEntry(parts[0], parts[1], parts[2], detail))
        return entries

    def __getstate__(self):
        return {"path": self.path}

    def __setstate__(self, state):
        self.__init__(state["path"])
