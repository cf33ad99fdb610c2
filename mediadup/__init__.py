"""Media deduplicator: find media files identical once metadata is ignored."""

__version__ = "1.0.0"
__author__ = "Media Tool Team"

# Import key classes for convenient top-level access
from .scanning import DuplicateScanner, ScanOptions, WorkerPool, FileDiscovery, SkipLog
from .database import CacheStore
from .grouping import GroupBuilder
from .actions import ActionExecutor
from .reporting import ResultSink
from .normalize import NormalizerBackend, NormalizedMedia, default_backends
from .models import MediaFile, Hashed, Skipped, SkipReason, DuplicateGroup, ScanResult

__all__ = [
    # Core classes
    'DuplicateScanner',
    'ScanOptions',
    'WorkerPool',
    'FileDiscovery',
    'SkipLog',
    'CacheStore',
    'GroupBuilder',
    'ActionExecutor',
    'ResultSink',

    # Normalization
    'NormalizerBackend',
    'NormalizedMedia',
    'default_backends',

    # Data models
    'MediaFile',
    'Hashed',
    'Skipped',
    'SkipReason',
    'DuplicateGroup',
    'ScanResult',

    # Package metadata
    '__version__',
    '__author__'
]
