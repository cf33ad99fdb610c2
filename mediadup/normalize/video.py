#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Video/audio container normalization (mp4, mov).

The first video stream and the first audio stream are demuxed
independently with a stream copy (no re-encode) and the raw packet bytes
are kept. Container headers, timestamps and tags are dropped, so a
re-muxed or re-tagged file yields the same streams.
"""

import shutil
from typing import List, Optional

from ..config import KIND_VIDEO, VIDEO_EXT, tool_timeout
from ..errors import NormalizeFailed
from .base import NormalizedMedia, NormalizerBackend, run_tool

# ffmpeg's wording when a -map selector has nothing to select
_NO_MATCH = "matches no streams"


class VideoNormalizer(NormalizerBackend):
    kind = KIND_VIDEO
    extensions = frozenset(VIDEO_EXT)
    required_tools = ("ffmpeg",)

    def __init__(self, ffmpeg_path: Optional[str] = None, timeout: Optional[float] = None):
        self.ffmpeg = ffmpeg_path or shutil.which("ffmpeg") or "ffmpeg"
        self.timeout = tool_timeout() if timeout is None else timeout

    def missing_tools(self) -> List[str]:
        return [] if shutil.which(self.ffmpeg) else ["ffmpeg"]

    def normalize(self, path: str) -> NormalizedMedia:
        diagnostics: List[str] = []
        video = self._extract(path, "v", diagnostics)
        audio = self._extract(path, "a", diagnostics)
        if diagnostics:
            raise NormalizeFailed("stream extraction failed", diagnostics)
        return NormalizedMedia.streams(video, audio)

    def _extract(self, path: str, stream_type: str, diagnostics: List[str]) -> Optional[bytes]:
        """Packet bytes of the first stream of a type, None when there is none."""
        cmd = [
            self.ffmpeg, "-nostdin", "-v", "error", "-i", path,
            "-map", f"0:{stream_type}:0", "-c", "copy",
            "-map_metadata", "-1", "-f", "data", "pipe:1",
        ]
        try:
            return run_tool(cmd, self.timeout)
        except NormalizeFailed as e:
            if _NO_MATCH in e.stderr:
                return None
            diagnostics.append(f"ffmpeg {stream_type}-stream: {e}")
            return None
