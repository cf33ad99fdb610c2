#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Dispositions applied to duplicate group members.

The keep member is never touched. Every duplicate gets one
``ActionOutcome``; a failure is logged against that member and the loop
moves on to the next one.

Results are also written to the ``mediadup.actions`` logger, which the
``find-duplicates`` command routes to ``activity.log`` in the state dir.
"""

import logging
import os
import shutil
import stat
import uuid
from pathlib import Path
from typing import List, Optional, Union

from .config import (
    ACTION_HARD_LINK, ACTION_RELOCATE, ACTION_REPORT_ONLY, ACTION_SYM_LINK, ACTIONS,
    SYMLINK_BACKUP_SUFFIX
)
from .models.group import ActionOutcome, DuplicateGroup
from .models.media_file import MediaFile
from .utils.path import ensure_dir

logger = logging.getLogger(__name__)


def _is_regular_file(path: str) -> bool:
    try:
        st = os.lstat(path)
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def _temp_sibling(path: str) -> str:
    directory, name = os.path.split(path)
    return os.path.join(directory, f".{name}.mediadup-{uuid.uuid4().hex[:8]}.tmp")


class ActionExecutor:
    """Apply one disposition to the duplicates of each group."""

    def __init__(self, disposition: str = ACTION_REPORT_ONLY,
                 trash_dir: Optional[Union[str, Path]] = None):
        if disposition not in ACTIONS:
            raise ValueError(f"disposition must be one of {ACTIONS}, got {disposition!r}")
        if disposition == ACTION_RELOCATE and trash_dir is None:
            raise ValueError("relocate needs a trash directory")
        self.disposition = disposition
        self.trash_dir = Path(trash_dir) if trash_dir is not None else None

    def apply_all(self, groups: List[DuplicateGroup]) -> List[ActionOutcome]:
        outcomes: List[ActionOutcome] = []
        for group in groups:
            outcomes.extend(self.apply(group))
        return outcomes

    def apply(self, group: DuplicateGroup) -> List[ActionOutcome]:
        """Process every duplicate of ``group``; outcomes are stored on the group too."""
        outcomes = [self.apply_one(group.keep, dup) for dup in group.duplicates]
        group.actions = outcomes
        return outcomes

    def apply_one(self, keep: MediaFile, dup: MediaFile) -> ActionOutcome:
        if self.disposition == ACTION_REPORT_ONLY:
            return ActionOutcome(dup.path, self.disposition, True, target=keep.path)

        if not _is_regular_file(dup.path):
            return self._failed(dup, "duplicate is no longer a regular file", keep.path)
        if not _is_regular_file(keep.path):
            return self._failed(dup, f"keep file is missing: {keep.path}", keep.path)

        handler = {
            ACTION_HARD_LINK: self._hard_link,
            ACTION_SYM_LINK: self._sym_link,
            ACTION_RELOCATE: self._relocate,
        }[self.disposition]
        try:
            outcome = handler(keep, dup)
        except OSError as e:
            return self._failed(dup, f"{type(e).__name__}: {e}", keep.path)
        if outcome.ok:
            logger.info("%s %s -> %s", self.disposition, dup.path, outcome.target)
        return outcome

    def _failed(self, dup: MediaFile, detail: str, target: Optional[str] = None) -> ActionOutcome:
        logger.error("%s failed for %s: %s", self.disposition, dup.path, detail)
        return ActionOutcome(dup.path, self.disposition, False, detail=detail, target=target)

    def _hard_link(self, keep: MediaFile, dup: MediaFile) -> ActionOutcome:
        if os.path.samefile(keep.path, dup.path):
            return ActionOutcome(dup.path, self.disposition, True, "already linked", keep.path)

        # Link at a temp name first; the rename is atomic so dup.path never disappears
        tmp = _temp_sibling(dup.path)
        os.link(keep.path, tmp)
        try:
            os.replace(tmp, dup.path)
        except OSError:
            try:
                os.unlink(tmp)
            except OSError as cleanup_error:
                logger.warning("Could not remove temporary link %s: %s", tmp, cleanup_error)
            raise
        return ActionOutcome(dup.path, self.disposition, True, target=keep.path)

    def _sym_link(self, keep: MediaFile, dup: MediaFile) -> ActionOutcome:
        backup = dup.path + SYMLINK_BACKUP_SUFFIX
        if os.path.lexists(backup):
            return self._failed(dup, f"backup path already exists: {backup}", keep.path)

        os.rename(dup.path, backup)
        try:
            os.symlink(os.path.abspath(keep.path), dup.path)
        except OSError as e:
            try:
                os.rename(backup, dup.path)
            except OSError as restore_error:
                return self._failed(
                    dup, f"symlink failed ({e}); original left at {backup}: {restore_error}",
                    keep.path,
                )
            return self._failed(dup, f"symlink failed, original restored: {e}", keep.path)

        try:
            os.unlink(backup)
        except OSError as e:
            logger.warning("Symlink created but backup %s could not be removed: %s", backup, e)
            return ActionOutcome(dup.path, self.disposition, True,
                                 f"backup left at {backup}", keep.path)
        return ActionOutcome(dup.path, self.disposition, True, target=keep.path)

    def _relocate(self, keep: MediaFile, dup: MediaFile) -> ActionOutcome:
        ensure_dir(self.trash_dir)
        dest = self.trash_dir / os.path.basename(dup.path)
        if os.path.isdir(dest):
            return self._failed(dup, f"trash already holds a directory named {dest.name}", str(dest))
        if os.path.lexists(dest):
            logger.warning("Overwriting %s in trash with %s", dest, dup.path)
        moved = shutil.move(dup.path, str(dest))
        return ActionOutcome(dup.path, self.disposition, True, target=str(moved))
