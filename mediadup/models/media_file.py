#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data structures for media files in the media deduplicator.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import EXT_TO_KIND


def kind_for_path(path: Union[str, Path]) -> Optional[str]:
    """Media kind derived from the extension, or None when unsupported."""
    return EXT_TO_KIND.get(Path(path).suffix.lower())


@dataclass(frozen=True)
class MediaFile:
    """Immutable file identity used for caching and grouping."""
    path: str
    size_bytes: int
    mtime: int
    kind: Optional[str]

    @classmethod
    def from_stat(cls, path: Union[str, Path], st: os.stat_result) -> "MediaFile":
        return cls(
            path=os.path.abspath(str(path)),
            size_bytes=int(st.st_size),
            mtime=int(st.st_mtime),
            kind=kind_for_path(path),
        )

    @property
    def extension(self) -> str:
        return Path(self.path).suffix.lower().lstrip(".")
