#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception types for the media deduplicator.
"""

from typing import Iterable, List, Optional


class MediadupError(Exception):
    """Base class for errors the CLI reports with exit code 2."""


class InvalidScanRoot(MediadupError):
    def __init__(self, root: str, reason: str = "not a directory"):
        super().__init__(f"Invalid scan root {root}: {reason}")
        self.root = root
        self.reason = reason


class BackendUnavailable(MediadupError):
    """A normalization backend needed by the scan has no usable tool."""

    def __init__(self, kind: str, missing_tools: Iterable[str]):
        self.kind = kind
        self.missing_tools = list(missing_tools)
        super().__init__(
            f"No usable {kind} normalizer: missing {', '.join(self.missing_tools)}"
        )


class NormalizeFailed(MediadupError):
    """Every normalization strategy for a file failed."""

    def __init__(self, message: str, diagnostics: Optional[List[str]] = None,
                 stderr: str = ""):
        super().__init__(message)
        self.diagnostics: List[str] = list(diagnostics or [])
        # Untruncated tool stderr; the message only carries its tail
        self.stderr = stderr

    @property
    def detail(self) -> str:
        """Diagnostic trail flattened to one line."""
        parts = [str(self)] + self.diagnostics
        return "; ".join(p.replace("\n", " ").replace("\t", " ").strip() for p in parts if p)
