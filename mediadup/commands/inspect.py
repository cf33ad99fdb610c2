#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Single-file commands: hash, compare, compare-pixels.

Exit codes: 0 identical / hashed, 1 differ (compare only),
2 skipped input or processing error.
"""

import logging
import sys
from typing import Optional

from PIL import Image

from .. import jsonio
from ..models.results import Hashed, HashResult, Skipped
from ..normalize.registry import Backends, default_backends
from ..pixels import SizeMismatch, compare_images
from ..scanning.skiplog import SkipLog
from ..scanning.worker import hash_path
from ..config import tool_timeout

logger = logging.getLogger(__name__)


def _skip_message(command: str, path: str, skipped: Skipped, skip_log: Optional[SkipLog]) -> str:
    msg = f"{command} skipped for {path}: {skipped.reason.message}"
    if skipped.detail:
        msg += f" ({skipped.detail})"
    if skip_log is not None:
        msg += f" See {skip_log.path}."
    return msg


def _result_record(path: str, result: HashResult) -> dict:
    if isinstance(result, Hashed):
        return {"path": path, "hash": result.value}
    return {"path": path, "skipped": result.reason.value, "detail": result.detail}


def cmd_hash(path: str, backends: Optional[Backends] = None,
             skip_log: Optional[SkipLog] = None, as_json: bool = False) -> int:
    backends = backends if backends is not None else default_backends(tool_timeout())
    media, result = hash_path(path, backends, skip_log)
    if isinstance(result, Skipped):
        msg = _skip_message("Hash", media.path, result, skip_log)
        if as_json:
            return jsonio.error("hash", msg, debug=_result_record(media.path, result), code=2)
        print(msg, file=sys.stderr)
        return 2
    if as_json:
        return jsonio.success("hash", data=_result_record(media.path, result))
    print(result.value)
    return 0


def cmd_compare(path_a: str, path_b: str, backends: Optional[Backends] = None,
                skip_log: Optional[SkipLog] = None, as_json: bool = False) -> int:
    """Compare two files by normalized hash."""
    backends = backends if backends is not None else default_backends(tool_timeout())
    results = [hash_path(p, backends, skip_log) for p in (path_a, path_b)]

    for media, result in results:
        if isinstance(result, Skipped):
            msg = _skip_message("Compare", media.path, result, skip_log)
            if as_json:
                return jsonio.error("compare", msg, debug=_result_record(media.path, result), code=2)
            print(msg, file=sys.stderr)
            return 2

    (media_a, hash_a), (media_b, hash_b) = results
    identical = hash_a.value == hash_b.value
    if as_json:
        return jsonio.success(
            "compare",
            data={
                "identical": identical,
                "files": [_result_record(media_a.path, hash_a), _result_record(media_b.path, hash_b)],
            },
            code=0 if identical else 1,
        )
    if identical:
        print(f"IDENTICAL (ignoring metadata): {hash_a.value}")
        return 0
    print(f"DIFFER: {hash_a.value} vs {hash_b.value}")
    return 1


def cmd_compare_pixels(path_a: str, path_b: str, as_json: bool = False) -> int:
    """Pixel RMSE between two decoded images (0 = identical)."""
    try:
        comparison = compare_images(path_a, path_b)
    except SizeMismatch as e:
        if as_json:
            return jsonio.error("compare-pixels", str(e), code=2)
        print(f"Cannot compare pixels: {e}", file=sys.stderr)
        return 2
    except (OSError, Image.DecompressionBombError) as e:
        if as_json:
            return jsonio.error("compare-pixels", f"cannot decode image: {e}", code=2)
        print(f"Cannot decode image: {e}", file=sys.stderr)
        return 2

    if as_json:
        return jsonio.success("compare-pixels", data={
            "rmse": comparison.rmse,
            "phash_distance": comparison.phash_distance,
            "width": comparison.size[0],
            "height": comparison.size[1],
        })
    print(f"RMSE = {comparison.rmse:.6f} (0 = identical)")
    if comparison.phash_distance is not None:
        print(f"pHash distance = {comparison.phash_distance}")
    return 0
