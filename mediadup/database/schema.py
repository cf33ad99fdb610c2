#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Database schema definitions for the hash cache.
"""

# One row per path; a row is only trusted while (mtime, size) still match
CACHE_SCHEMA = """
CREATE TABLE IF NOT EXISTS filehash (
    path TEXT PRIMARY KEY,
    mtime INTEGER,
    size INTEGER,
    hash TEXT,
    updated_at INTEGER
);

CREATE INDEX IF NOT EXISTS idx_mtime_size ON filehash(mtime, size);
"""
