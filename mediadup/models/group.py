#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Duplicate groups, action outcomes and the per-scan result.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .media_file import MediaFile
from .results import Skipped


@dataclass
class ActionOutcome:
    """What happened to one duplicate member."""
    path: str
    disposition: str
    ok: bool
    detail: Optional[str] = None
    target: Optional[str] = None  # keep path, or the relocated path

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"path": self.path, "disposition": self.disposition, "ok": self.ok}
        if self.detail:
            record["detail"] = self.detail
        if self.target:
            record["target"] = self.target
        return record


@dataclass
class DuplicateGroup:
    """Files sharing one normalized hash. ``members[0]`` is kept."""
    hash: str
    members: List[MediaFile]
    actions: List[ActionOutcome] = field(default_factory=list)

    @property
    def keep(self) -> MediaFile:
        return self.members[0]

    @property
    def duplicates(self) -> List[MediaFile]:
        return self.members[1:]

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def reclaimable_bytes(self) -> int:
        return sum(m.size_bytes for m in self.duplicates)

    def to_record(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "count": self.count,
            "keep": self.keep.path,
            "files": [m.path for m in self.members],
            "reclaimable_bytes": self.reclaimable_bytes,
            "actions": [a.to_record() for a in self.actions],
        }


@dataclass
class ScanResult:
    root: str
    total_files: int
    groups: List[DuplicateGroup]
    skipped: List[Skipped] = field(default_factory=list)
    cache_hits: int = 0
    action: str = "report-only"
    finished_at: Optional[str] = None

    @property
    def duplicate_groups(self) -> int:
        return len(self.groups)

    @property
    def space_reclaimable_bytes(self) -> int:
        return sum(g.reclaimable_bytes for g in self.groups)

    @property
    def failed_actions(self) -> List[ActionOutcome]:
        return [a for g in self.groups for a in g.actions if not a.ok]

    def stats(self) -> Dict[str, Any]:
        return {
            "total": self.total_files,
            "duplicate_groups": self.duplicate_groups,
            "space_reclaimable_bytes": self.space_reclaimable_bytes,
            "skipped": len(self.skipped),
            "cache_hits": self.cache_hits,
            "finished_at": self.finished_at,
        }
