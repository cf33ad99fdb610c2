#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shared fixtures: Pillow-generated images and a deterministic fake backend.
"""

import os
import threading
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from mediadup.config import KIND_RASTER, RASTER_EXT
from mediadup.errors import NormalizeFailed
from mediadup.normalize.base import NormalizedMedia, NormalizerBackend
from mediadup.normalize.raster import RasterNormalizer
from mediadup.scanning.scanner import ScanOptions


class FakeRasterBackend(NormalizerBackend):
    """Canonical bytes are the file bytes minus ``#`` comment lines.

    Counts calls per path so tests can tell cache hits from recomputes.
    Files containing ``FAIL`` raise NormalizeFailed.
    """

    kind = KIND_RASTER
    extensions = frozenset(RASTER_EXT)

    def __init__(self):
        self.calls: Dict[str, int] = {}
        self._lock = threading.Lock()

    def normalize(self, path: str) -> NormalizedMedia:
        with self._lock:
            self.calls[path] = self.calls.get(path, 0) + 1
        with open(path, "rb") as f:
            data = f.read()
        if b"FAIL" in data:
            raise NormalizeFailed("fake failure", ["fake: refused"])
        lines = [line for line in data.splitlines(True) if not line.startswith(b"#")]
        return NormalizedMedia.single(b"".join(lines))

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def __getstate__(self):
        return {"calls": dict(self.calls)}

    def __setstate__(self, state):
        self.calls = state["calls"]
        self._lock = threading.Lock()


class CrashingBackend(FakeRasterBackend):
    """Kills the worker process outright on files containing ``CRASH``."""

    def normalize(self, path: str) -> NormalizedMedia:
        with open(path, "rb") as f:
            if b"CRASH" in f.read():
                os._exit(1)
        return super().normalize(path)


class MissingToolBackend(NormalizerBackend):
    kind = "video"
    extensions = frozenset({".mp4", ".mov"})
    required_tools = ("definitely-not-installed-tool",)

    def normalize(self, path: str) -> NormalizedMedia:
        raise AssertionError("must not be called")


def write_png(path: Path, color=(255, 0, 0), size=(8, 8), text: Optional[Dict[str, str]] = None) -> Path:
    """Solid-color PNG with optional tEXt metadata chunks."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color)
    info = None
    if text:
        info = PngInfo()
        for k, v in text.items():
            info.add_text(k, v)
    img.save(path, format="PNG", pnginfo=info)
    return path


def write_fake(path: Path, body: bytes, comments: List[bytes] = ()) -> Path:
    """File for FakeRasterBackend: ``#`` comment lines act as metadata."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"".join(b"#" + c + b"\n" for c in comments) + body)
    return path


@pytest.fixture
def fake_backend():
    return FakeRasterBackend()


@pytest.fixture
def fake_backends(fake_backend):
    return {KIND_RASTER: fake_backend}


@pytest.fixture
def pillow_backends():
    """Real raster normalizer limited to the Pillow stages."""
    return {KIND_RASTER: RasterNormalizer(use_exiftool=False, timeout=30)}


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / "state"


@pytest.fixture
def scan_options(tmp_path, state_dir):
    """Thread executor, no progress bar, everything under tmp_path."""
    return ScanOptions(
        jobs=2,
        cache_db=tmp_path / "cache.db",
        state_dir=state_dir,
        trash_dir=tmp_path / "trash",
        executor="thread",
        progress=False,
    )
