"""Per-kind normalization backends."""

from .base import NormalizedMedia, NormalizerBackend
from .raster import RasterNormalizer
from .raw import RawNormalizer
from .video import VideoNormalizer
from .registry import Backends, default_backends, backend_for, missing_backends, check_backends

__all__ = [
    'NormalizedMedia',
    'NormalizerBackend',
    'RasterNormalizer',
    'RawNormalizer',
    'VideoNormalizer',
    'Backends',
    'default_backends',
    'backend_for',
    'missing_backends',
    'check_backends',
]
