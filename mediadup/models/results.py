#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Per-file hashing outcomes.

A file either hashes (``Hashed``) or is skipped with a reason
(``Skipped``). Skips never reach grouping, so an error can not be
mistaken for a digest further down the pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class SkipReason(str, Enum):
    MISSING = "missing-file"
    NOT_REGULAR = "not-regular-file"
    UNREADABLE = "unreadable-file"
    ZERO_BYTE = "zero-byte-file"
    UNSUPPORTED = "unsupported-extension"
    NORMALIZE_FAILED = "normalize-failed"
    NO_STREAMS = "no-streams"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    SkipReason.MISSING: "File is missing.",
    SkipReason.NOT_REGULAR: "Path is not a regular file (likely a folder).",
    SkipReason.UNREADABLE: "File can not be read.",
    SkipReason.ZERO_BYTE: "File is empty.",
    SkipReason.UNSUPPORTED: "Unsupported media format.",
    SkipReason.NORMALIZE_FAILED: "Normalization failed.",
    SkipReason.NO_STREAMS: "Container has neither a video nor an audio stream.",
}


@dataclass(frozen=True)
class Hashed:
    value: str

    @property
    def token(self) -> str:
        return self.value


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason
    detail: Optional[str] = None

    @property
    def token(self) -> str:
        return f"{SKIPPED_PREFIX}{self.reason.value}"


HashResult = Union[Hashed, Skipped]

SKIPPED_PREFIX = "__SKIPPED__:"


def format_worker_line(result: HashResult, path: str) -> str:
    """Single-line ``token|path`` record emitted by the worker command."""
    return f"{result.token}|{path}"


def parse_worker_line(line: str) -> Tuple[HashResult, str]:
    line = line.rstrip("\n")
    token, sep, path = line.partition("|")
    if not sep:
        raise ValueError(f"Malformed worker line: {line!r}")
    if token.startswith(SKIPPED_PREFIX):
        return Skipped(SkipReason(token[len(SKIPPED_PREFIX):])), path
    return Hashed(token), path
