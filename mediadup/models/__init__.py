"""Data models for the media deduplicator."""

from .media_file import MediaFile, kind_for_path
from .results import (
    Hashed, Skipped, SkipReason, HashResult, format_worker_line, parse_worker_line
)
from .group import ActionOutcome, DuplicateGroup, ScanResult

__all__ = [
    'MediaFile', 'kind_for_path',
    'Hashed', 'Skipped', 'SkipReason', 'HashResult',
    'format_worker_line', 'parse_worker_line',
    'ActionOutcome', 'DuplicateGroup', 'ScanResult',
]
