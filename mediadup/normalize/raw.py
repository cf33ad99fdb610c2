#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Camera raw normalization (dng): only the unprocessed sensor data counts.
"""

import shutil
from typing import List, Optional

from ..config import KIND_RAW, RAW_EXT, tool_timeout
from ..errors import NormalizeFailed
from .base import NormalizedMedia, NormalizerBackend, run_tool


class RawNormalizer(NormalizerBackend):
    kind = KIND_RAW
    extensions = frozenset(RAW_EXT)
    required_tools = ("dcraw",)

    def __init__(self, dcraw_path: Optional[str] = None, timeout: Optional[float] = None):
        self.dcraw = dcraw_path or shutil.which("dcraw") or "dcraw"
        self.timeout = tool_timeout() if timeout is None else timeout

    def missing_tools(self) -> List[str]:
        return [] if shutil.which(self.dcraw) else ["dcraw"]

    def normalize(self, path: str) -> NormalizedMedia:
        # -D: no demosaic, -4: linear 16-bit, -c: to stdout; previews and tags are ignored
        data = run_tool([self.dcraw, "-4", "-D", "-c", path], self.timeout)
        if not data:
            raise NormalizeFailed("dcraw produced no sensor data", ["dcraw: empty output"])
        return NormalizedMedia.single(data)
