#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Per-file task: input checks, cache lookup, normalize, hash, write-through.

Every failure is isolated to the file: it becomes a ``Skipped`` result and
one skip-log line, never an exception out of the task.
"""

import logging
import os
import stat
from dataclasses import dataclass
from typing import Optional, Tuple

from ..database.manager import CacheStore
from ..errors import NormalizeFailed
from ..hashing import digest_normalized
from ..models.media_file import MediaFile, kind_for_path
from ..models.results import Hashed, HashResult, Skipped, SkipReason
from ..normalize.registry import Backends
from .skiplog import SkipLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileOutcome:
    media: MediaFile
    result: HashResult
    from_cache: bool = False


def placeholder_media(path: str) -> MediaFile:
    """Identity for a file that could not be stat'ed."""
    return MediaFile(path=os.path.abspath(path), size_bytes=0, mtime=0, kind=kind_for_path(path))


def inspect_file(path: str) -> Tuple[MediaFile, Optional[Skipped]]:
    """Stat ``path`` and reject inputs that can never be compared."""
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return placeholder_media(path), Skipped(SkipReason.MISSING)
    except OSError as e:
        return placeholder_media(path), Skipped(SkipReason.UNREADABLE, e.strerror or str(e))

    if not stat.S_ISREG(st.st_mode):
        return placeholder_media(path), Skipped(SkipReason.NOT_REGULAR)

    media = MediaFile.from_stat(path, st)
    if media.kind is None:
        return media, Skipped(SkipReason.UNSUPPORTED, media.extension or "unknown")
    if media.size_bytes == 0:
        return media, Skipped(SkipReason.ZERO_BYTE)
    if not os.access(path, os.R_OK):
        return media, Skipped(SkipReason.UNREADABLE, "permission denied")
    return media, None


def compute_hash(media: MediaFile, backends: Backends) -> HashResult:
    """Normalize and hash one file that already passed ``inspect_file``."""
    backend = backends.get(media.kind) if media.kind else None
    if backend is None:
        return Skipped(SkipReason.UNSUPPORTED, f"no backend for {media.kind or media.extension}")
    try:
        normalized = backend.normalize(media.path)
    except NormalizeFailed as e:
        return Skipped(SkipReason.NORMALIZE_FAILED, e.detail)
    except OSError as e:
        return Skipped(SkipReason.NORMALIZE_FAILED, f"{type(e).__name__}: {e}")
    if not normalized.has_content:
        return Skipped(SkipReason.NO_STREAMS)
    return Hashed(digest_normalized(normalized))


def hash_path(path: str, backends: Backends,
              skip_log: Optional[SkipLog] = None) -> Tuple[MediaFile, HashResult]:
    """Uncached hash of a single file, as used by ``hash`` and ``compare``."""
    media, skipped = inspect_file(path)
    result: HashResult = skipped if skipped else compute_hash(media, backends)
    if isinstance(result, Skipped):
        _log_skip(skip_log, media, result)
    return media, result


def process_file(path: str, backends: Backends, cache: Optional[CacheStore] = None,
                 skip_log: Optional[SkipLog] = None) -> FileOutcome:
    """One scan task."""
    media, skipped = inspect_file(path)
    if skipped:
        _log_skip(skip_log, media, skipped)
        return FileOutcome(media, skipped)

    if cache is not None:
        cached = cache.get(media.path, media.mtime, media.size_bytes)
        if cached:
            logger.debug("Cache hit: %s", media.path)
            return FileOutcome(media, Hashed(cached), from_cache=True)

    result = compute_hash(media, backends)
    if isinstance(result, Skipped):
        _log_skip(skip_log, media, result)
        return FileOutcome(media, result)

    if cache is not None:
        cache.put(media.path, media.mtime, media.size_bytes, result.value)
    return FileOutcome(media, result)


def _log_skip(skip_log: Optional[SkipLog], media: MediaFile, skipped: Skipped) -> None:
    logger.debug("Skipped %s: %s %s", media.path, skipped.reason.value, skipped.detail or "")
    if skip_log is not None:
        skip_log.record(skipped.reason, media.path, skipped.detail)
