#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Time utility functions for the media deduplicator.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now_str() -> str:
    """Return current UTC time in ISO-8601 format with 'Z'."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def log_timestamp() -> str:
    """Local wall-clock time as written to the skip log."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def file_stamp(epoch: Optional[float] = None) -> str:
    """Local ``YYYYmmdd-HHMMSS`` stamp used to suffix rotated reports."""
    moment = datetime.fromtimestamp(epoch) if epoch is not None else datetime.now()
    return moment.strftime("%Y%m%d-%H%M%S")
