#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Candidate discovery for a scan root.

Walks the tree without following symlinks and without crossing onto
another filesystem, keeping regular files with a supported extension.
"""

import logging
import os
import stat
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

from ..config import SUPPORTED_EXT
from ..models.media_file import kind_for_path

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryStats:
    total_scanned: int = 0
    permission_errors: int = 0
    media_files_found: int = 0
    by_kind: Dict[str, int] = field(default_factory=dict)


class FileDiscovery:
    """Enumerates candidate media files under one root."""

    def __init__(self, one_filesystem: bool = True):
        self.one_filesystem = one_filesystem
        self.stats = DiscoveryStats()

    def discover_files(self, root: Union[str, Path]) -> List[str]:
        """Sorted absolute paths of supported regular files under ``root``."""
        root = os.path.abspath(str(root))
        self.stats = DiscoveryStats()
        start_time = time.perf_counter()
        logger.info("Discovering media files in %s", root)

        root_dev = os.lstat(root).st_dev
        candidates: List[str] = []

        def on_error(err: OSError) -> None:
            self.stats.permission_errors += 1
            logger.debug("Cannot list %s: %s", err.filename, err.strerror)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=False):
            if self.one_filesystem:
                dirnames[:] = [d for d in dirnames
                               if self._same_device(os.path.join(dirpath, d), root_dev)]
            for name in filenames:
                self.stats.total_scanned += 1
                if not self._is_media_file(name):
                    continue
                full = os.path.join(dirpath, name)
                try:
                    st = os.lstat(full)
                except OSError:
                    self.stats.permission_errors += 1
                    continue
                if not stat.S_ISREG(st.st_mode):
                    continue
                candidates.append(full)

        candidates.sort()
        self.stats.media_files_found = len(candidates)
        self.stats.by_kind = dict(Counter(kind_for_path(p) for p in candidates))
        elapsed = time.perf_counter() - start_time
        self._log_summary(elapsed)
        return candidates

    def _same_device(self, path: str, root_dev: int) -> bool:
        try:
            return os.lstat(path).st_dev == root_dev
        except OSError:
            self.stats.permission_errors += 1
            return False

    @staticmethod
    def _is_media_file(filename: str) -> bool:
        """Check if file is a supported media type."""
        return Path(filename).suffix.lower() in SUPPORTED_EXT

    def _log_summary(self, elapsed: float) -> None:
        s = self.stats
        logger.info("Discovery complete: %d media files (%d entries scanned in %.1fs)",
                    s.media_files_found, s.total_scanned, elapsed)
        if s.by_kind:
            logger.info("  - File types: %s",
                        ", ".join(f"{n} {kind}" for kind, n in sorted(s.by_kind.items())))
        if s.permission_errors:
            logger.warning("  - Permission errors: %d", s.permission_errors)


def discover_media_files(root: Union[str, Path]) -> List[str]:
    """Convenience function for media file discovery."""
    return FileDiscovery().discover_files(root)
