#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Path utility functions for the media deduplicator.
"""

import os
import tempfile
from pathlib import Path
from typing import Union


def ensure_dir(p: Union[str, Path]) -> None:
    """Ensure directory exists, creating it if necessary."""
    Path(p).mkdir(parents=True, exist_ok=True)


def atomic_write_text(target: Union[str, Path], text: str) -> None:
    """Write ``text`` next to ``target`` and rename it into place."""
    target = Path(target)
    ensure_dir(target.parent)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, target)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def format_size(num_bytes: int) -> str:
    """Human readable IEC size, e.g. ``1.5MiB``."""
    value = float(num_bytes)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if abs(value) < 1024 or unit == "TiB":
            return f"{int(value)}{unit}" if unit == "B" else f"{value:.1f}{unit}"
        value /= 1024
    return f"{num_bytes}B"
