"""Utility functions for the media deduplicator."""

from .time import utc_now_str, log_timestamp, file_stamp
from .path import ensure_dir, atomic_write_text, format_size

__all__ = ['utc_now_str', 'log_timestamp', 'file_stamp', 'ensure_dir', 'atomic_write_text', 'format_size']
