import logging
from typing import Callable, Dict, Iterable, List, Tuple

from .config import DEFAULT_KEEP_POLICY, KEEP_POLICIES
from .models.group import DuplicateGroup
from .models.media_file import MediaFile
from .models.results import Hashed, HashResult

logger = logging.getLogger(__name__)


def _by_path(m: MediaFile) -> Tuple:
    return (m.path,)


def _by_oldest(m: MediaFile) -> Tuple:
    return (m.mtime, m.path)


KEEP_KEYS: Dict[str, Callable[[MediaFile], Tuple]] = {
    "path": _by_path,
    "oldest": _by_oldest,
}


def order_members(members: Iterable[MediaFile], keep_policy: str = DEFAULT_KEEP_POLICY) -> List[MediaFile]:
    """Keep first (chosen by policy), remaining members by path."""
    members = sorted(members, key=_by_path)
    if not members:
        return members
    keep = min(members, key=KEEP_KEYS[keep_policy])
    return [keep] + [m for m in members if m is not keep]


class GroupBuilder:
    """hash -> members map for one scan. Single-threaded, fed after the pool drains."""

    def __init__(self, keep_policy: str = DEFAULT_KEEP_POLICY):
        if keep_policy not in KEEP_POLICIES:
            raise ValueError(f"keep policy must be one of {KEEP_POLICIES}, got {keep_policy!r}")
        self.keep_policy = keep_policy
        self._members: Dict[str, List[MediaFile]] = {}
        self._seen: set = set()

    def add(self, result: HashResult, media: MediaFile) -> bool:
        """Record one result; False when it is a skip or a repeat of a seen path."""
        if not isinstance(result, Hashed):
            return False
        if media.path in self._seen:
            logger.debug("Ignoring repeated result for %s", media.path)
            return False
        self._seen.add(media.path)
        self._members.setdefault(result.value, []).append(media)
        return True

    def add_outcomes(self, outcomes: Iterable) -> None:
        """Feed ``FileOutcome``s from the worker pool."""
        for o in outcomes:
            self.add(o.result, o.media)

    @property
    def hashed_count(self) -> int:
        return len(self._seen)

    def groups(self) -> List[DuplicateGroup]:
        """Actionable groups (two or more members), ordered by keep path."""
        groups = [
            DuplicateGroup(h, order_members(members, self.keep_policy))
            for h, members in self._members.items() if len(members) > 1
        ]
        groups.sort(key=lambda g: g.keep.path)
        return groups
