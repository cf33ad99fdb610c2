#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Raster photo normalization (png, gif, jpg, jpeg).

Primary: exiftool strips every metadata block and leaves the encoded
pixel data byte-for-byte. When that fails (exiftool missing, or the
file's real format does not match its extension) Pillow sniffs the actual
encoding from the content and re-encodes losslessly to PNG without
metadata. The last resort decodes to raw RGBA pixels.
"""

import io
import shutil
import warnings
from typing import List, Optional

from PIL import Image, ImageSequence

from ..config import KIND_RASTER, RASTER_EXT, tool_timeout
from ..errors import NormalizeFailed
from .base import NormalizedMedia, NormalizerBackend, run_stages, run_tool

# Suppress PIL warnings
warnings.filterwarnings("ignore", category=UserWarning,
                        message=".*Palette images with Transparency expressed in bytes.*")

# Image.info keys that describe pixels rather than metadata
_PIXEL_INFO_KEYS = ("transparency",)


class RasterNormalizer(NormalizerBackend):
    kind = KIND_RASTER
    extensions = frozenset(RASTER_EXT)
    # exiftool is optional; the Pillow stages always work
    required_tools = ()

    def __init__(self, exiftool_path: Optional[str] = None, use_exiftool: bool = True,
                 timeout: Optional[float] = None):
        self.exiftool = (exiftool_path or shutil.which("exiftool")) if use_exiftool else None
        self.timeout = tool_timeout() if timeout is None else timeout

    def normalize(self, path: str) -> NormalizedMedia:
        payload = run_stages(path, [
            ("exiftool", self._strip_with_exiftool),
            ("sniffed-reencode", self._reencode_sniffed),
            ("generic-reencode", self._reencode_generic),
        ])
        return NormalizedMedia.single(payload)

    def _strip_with_exiftool(self, path: str) -> bytes:
        if not self.exiftool:
            raise NormalizeFailed("exiftool not installed")
        data = run_tool([self.exiftool, "-q", "-q", "-all=", "-o", "-", path], self.timeout)
        if not data:
            raise NormalizeFailed("exiftool produced no output")
        return data

    def _reencode_sniffed(self, path: str) -> bytes:
        out = io.BytesIO()
        with Image.open(path) as im:
            for frame in ImageSequence.Iterator(im):
                clean = frame.copy()
                clean.info = {k: v for k, v in frame.info.items() if k in _PIXEL_INFO_KEYS}
                clean.save(out, format="PNG", compress_level=6)
        return out.getvalue()

    def _reencode_generic(self, path: str) -> bytes:
        chunks: List[bytes] = []
        with Image.open(path) as im:
            for frame in ImageSequence.Iterator(im):
                rgba = frame.convert("RGBA")
                chunks.append(f"{rgba.width}x{rgba.height} RGBA\n".encode("ascii"))
                chunks.append(rgba.tobytes())
        return b"".join(chunks)
