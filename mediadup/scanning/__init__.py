"""Scanning and processing modules for the media deduplicator."""

from .discovery import FileDiscovery, discover_media_files
from .skiplog import SkipEntry, SkipLog
from .worker import FileOutcome, compute_hash, hash_path, inspect_file, process_file
from .pool import WorkerPool
from .scanner import DuplicateScanner, ScanOptions

__all__ = [
    'FileDiscovery',
    'discover_media_files',
    'SkipEntry',
    'SkipLog',
    'FileOutcome',
    'compute_hash',
    'hash_path',
    'inspect_file',
    'process_file',
    'WorkerPool',
    'DuplicateScanner',
    'ScanOptions',
]
