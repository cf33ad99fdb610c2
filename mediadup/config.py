#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Global configuration and constants for the media deduplicator.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Set

# Media kinds
KIND_RASTER = "raster"
KIND_RAW = "raw"
KIND_VIDEO = "video"

# File type categories
RASTER_EXT: Set[str] = {".png", ".gif", ".jpg", ".jpeg"}
RAW_EXT: Set[str] = {".dng"}
VIDEO_EXT: Set[str] = {".mp4", ".mov"}
SUPPORTED_EXT: Set[str] = RASTER_EXT | RAW_EXT | VIDEO_EXT

EXT_TO_KIND: Dict[str, str] = {}
EXT_TO_KIND.update({ext: KIND_RASTER for ext in RASTER_EXT})
EXT_TO_KIND.update({ext: KIND_RAW for ext in RAW_EXT})
EXT_TO_KIND.update({ext: KIND_VIDEO for ext in VIDEO_EXT})

# Dispositions
ACTION_REPORT_ONLY = "report-only"
ACTION_HARD_LINK = "hard-link"
ACTION_SYM_LINK = "sym-link"
ACTION_RELOCATE = "relocate"
ACTIONS = (ACTION_REPORT_ONLY, ACTION_HARD_LINK, ACTION_SYM_LINK, ACTION_RELOCATE)
ACTION_ALIASES: Dict[str, str] = {
    "print": ACTION_REPORT_ONLY,
    "none": ACTION_REPORT_ONLY,
    "hardlink": ACTION_HARD_LINK,
    "symlink": ACTION_SYM_LINK,
    "move": ACTION_RELOCATE,
}

# Keep policies
KEEP_POLICIES = ("path", "oldest")
DEFAULT_KEEP_POLICY = "path"

# Composite hash labels for absent streams
NO_VIDEO_LABEL = "NOVIDEO"
NO_AUDIO_LABEL = "NOAUDIO"
STREAM_SEPARATOR = "-"

# Persisted state file names
REPORT_FILENAME = "last_scan.json"
STATS_FILENAME = "stats.json"
SKIP_LOG_FILENAME = "skipped_inputs.log"
ACTIVITY_LOG_FILENAME = "activity.log"
SYMLINK_BACKUP_SUFFIX = ".mediadup.bak"

# Processing defaults
DEFAULT_TOOL_TIMEOUT_SECONDS = 300
DEFAULT_CACHE_BUSY_TIMEOUT_MS = 5000
DEFAULT_CACHE_WRITE_RETRIES = 5
DEFAULT_CACHE_RETRY_BASE_DELAY = 0.05


def default_jobs() -> int:
    """Worker count when --jobs is not given."""
    return os.cpu_count() or 1


def _env_path(name: str, fallback: Path) -> Path:
    value = os.getenv(name)
    return Path(value).expanduser() if value else fallback


def state_dir(override: Optional[str] = None) -> Path:
    """Directory holding the report, statistics and logs."""
    if override:
        return Path(override).expanduser()
    return _env_path("MEDIADUP_STATE_DIR", Path.home() / ".cache" / "mediadup")


def cache_db_path(override: Optional[str] = None) -> Path:
    if override:
        return Path(override).expanduser()
    return _env_path("MEDIADUP_CACHE_DB", Path.home() / ".mediadup_cache.db")


def trash_dir(override: Optional[str] = None) -> Path:
    if override:
        return Path(override).expanduser()
    return _env_path("MEDIADUP_TRASH_DIR", Path.home() / ".Trash" / "mediadup")


def tool_timeout() -> float:
    """Seconds an external normalization tool may run (0 disables)."""
    return float(os.getenv("MEDIADUP_TOOL_TIMEOUT_SECONDS", str(DEFAULT_TOOL_TIMEOUT_SECONDS)))
