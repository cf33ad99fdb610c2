#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Content digests over normalized bytes.
"""

import hashlib
from typing import Optional

from .config import NO_AUDIO_LABEL, NO_VIDEO_LABEL, STREAM_SEPARATOR
from .normalize.base import NormalizedMedia


def digest(data: bytes) -> str:
    """SHA-256 of exactly ``data``, hex encoded."""
    return hashlib.sha256(data).hexdigest()


def digest_streams(video: Optional[bytes], audio: Optional[bytes]) -> str:
    """Composite digest for a container with separable streams.

    An absent stream is labelled rather than hashed, so a file without
    audio never collides with one carrying an empty audio stream.
    """
    hv = digest(video) if video is not None else NO_VIDEO_LABEL
    ha = digest(audio) if audio is not None else NO_AUDIO_LABEL
    return f"{hv}{STREAM_SEPARATOR}{ha}"


def digest_normalized(media: NormalizedMedia) -> str:
    if media.is_streams:
        return digest_streams(media.video, media.audio)
    return digest(media.payload)
