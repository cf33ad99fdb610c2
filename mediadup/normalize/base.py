#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Normalizer backend contract.

A backend turns one media file into the canonical, metadata-free bytes
that get hashed. One backend exists per media kind; the scan selects it
by extension.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from ..errors import NormalizeFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedMedia:
    """Canonical content of one file: a single payload or two streams."""
    payload: Optional[bytes] = None
    video: Optional[bytes] = None
    audio: Optional[bytes] = None
    is_streams: bool = False

    @classmethod
    def single(cls, payload: bytes) -> "NormalizedMedia":
        return cls(payload=payload)

    @classmethod
    def streams(cls, video: Optional[bytes], audio: Optional[bytes]) -> "NormalizedMedia":
        return cls(video=video, audio=audio, is_streams=True)

    @property
    def has_content(self) -> bool:
        if self.is_streams:
            return self.video is not None or self.audio is not None
        return self.payload is not None


class NormalizerBackend(ABC):
    """Unified interface for per-kind normalizers."""

    kind: str = ""
    extensions: FrozenSet[str] = frozenset()
    # External executables that must be on PATH for this backend to work
    required_tools: Tuple[str, ...] = ()

    def missing_tools(self) -> List[str]:
        return [tool for tool in self.required_tools if shutil.which(tool) is None]

    def is_available(self) -> bool:
        return not self.missing_tools()

    def handles(self, extension: str) -> bool:
        return extension.lower() in self.extensions

    @abstractmethod
    def normalize(self, path: str) -> NormalizedMedia:
        """Return canonical bytes for ``path`` or raise NormalizeFailed."""


Stage = Tuple[str, Callable[[str], bytes]]


def run_stages(path: str, stages: Sequence[Stage]) -> bytes:
    """Try each stage in order; the first success wins.

    Every failure message is kept so the final error carries the whole
    trail.
    """
    diagnostics: List[str] = []
    for name, stage in stages:
        try:
            data = stage(path)
        except NormalizeFailed as e:
            diagnostics.append(f"{name}: {e}")
            logger.debug("Stage %s failed for %s: %s", name, path, e)
            continue
        except Exception as e:  # decoders raise OSError, SyntaxError, DecompressionBombError...
            diagnostics.append(f"{name}: {type(e).__name__}: {e}")
            logger.debug("Stage %s failed for %s: %s", name, path, e)
            continue
        if diagnostics:
            logger.debug("Normalized %s via fallback stage %s", path, name)
        return data
    raise NormalizeFailed("all normalization strategies failed", diagnostics)


def run_tool(cmd: Sequence[str], timeout: Optional[float] = None) -> bytes:
    """Run an external tool and return its stdout.

    Raises NormalizeFailed on a missing executable, a timeout or a non-zero
    exit; the message carries the tail of the tool's stderr and the
    exception's ``stderr`` attribute all of it.
    """
    try:
        proc = subprocess.run(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout if timeout and timeout > 0 else None,
            check=False,
        )
    except FileNotFoundError as e:
        raise NormalizeFailed(f"{cmd[0]} not found") from e
    except subprocess.TimeoutExpired as e:
        raise NormalizeFailed(f"{cmd[0]} exceeded {timeout} seconds") from e
    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace")
        raise NormalizeFailed(
            f"{cmd[0]} exited with {proc.returncode}: {_tail(stderr)}",
            stderr=stderr,
        )
    return proc.stdout


def _tail(stderr: str, limit: int = 200) -> str:
    text = stderr.strip()
    return text[-limit:] if text else "no output"
