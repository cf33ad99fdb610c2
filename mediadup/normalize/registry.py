#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Backend selection by media kind.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..config import KIND_RASTER
from ..errors import BackendUnavailable
from ..models.media_file import kind_for_path
from .base import NormalizerBackend
from .raster import RasterNormalizer
from .raw import RawNormalizer
from .video import VideoNormalizer

logger = logging.getLogger(__name__)

Backends = Dict[str, NormalizerBackend]


def default_backends(timeout: Optional[float] = None) -> Backends:
    """One backend per kind, tools resolved from PATH."""
    backends = [
        RasterNormalizer(timeout=timeout),
        RawNormalizer(timeout=timeout),
        VideoNormalizer(timeout=timeout),
    ]
    return {b.kind: b for b in backends}


def backend_for(path: str, backends: Backends) -> Optional[NormalizerBackend]:
    kind = kind_for_path(path)
    if kind is None:
        return None
    return backends.get(kind)


def missing_backends(kinds: Iterable[str], backends: Backends) -> Dict[str, List[str]]:
    """Kinds among ``kinds`` whose backend is absent or lacks its tools."""
    missing: Dict[str, List[str]] = {}
    for kind in sorted(set(kinds)):
        backend = backends.get(kind)
        if backend is None:
            missing[kind] = ["<no backend registered>"]
            continue
        tools = backend.missing_tools()
        if tools:
            missing[kind] = list(tools)
    return missing


def check_backends(kinds: Iterable[str], backends: Backends) -> None:
    """Fail fast when a kind present in the scan has no working backend."""
    wanted = set(kinds)
    for kind, tools in missing_backends(wanted, backends).items():
        raise BackendUnavailable(kind, tools)
    raster = backends.get(KIND_RASTER)
    if isinstance(raster, RasterNormalizer) and not raster.exiftool and KIND_RASTER in wanted:
        logger.warning("exiftool not found; raster files are normalized by Pillow re-encode")
