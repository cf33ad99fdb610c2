#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pixel-level similarity for two decoded images.

Informational only: grouping never uses these numbers.
"""

import math
from dataclasses import dataclass
from typing import Optional

import imagehash
from PIL import Image, ImageChops, ImageStat


@dataclass(frozen=True)
class PixelComparison:
    rmse: float
    phash_distance: Optional[int]
    size: tuple


class SizeMismatch(ValueError):
    def __init__(self, size_a, size_b):
        super().__init__(f"image sizes differ: {size_a[0]}x{size_a[1]} vs {size_b[0]}x{size_b[1]}")
        self.size_a = size_a
        self.size_b = size_b


def _load_rgba(path: str) -> Image.Image:
    with Image.open(path) as im:
        im.load()
        return im.convert("RGBA")


def pixel_rmse(a: Image.Image, b: Image.Image) -> float:
    """Root mean square difference over all RGBA channels, scaled to [0, 1]."""
    if a.size != b.size:
        raise SizeMismatch(a.size, b.size)
    diff = ImageChops.difference(a, b)
    stat = ImageStat.Stat(diff)
    mean_sq = sum(stat.sum2) / (len(stat.sum2) * a.size[0] * a.size[1])
    return math.sqrt(mean_sq) / 255.0


def phash_distance(a: Image.Image, b: Image.Image) -> int:
    return int(imagehash.phash(a) - imagehash.phash(b))


def compare_images(path_a: str, path_b: str) -> PixelComparison:
    """Decode both files and measure how far apart their pixels are.

    Raises SizeMismatch for different dimensions, OSError when either file
    can not be decoded and Image.DecompressionBombError when one is too
    large to decode safely.
    """
    a = _load_rgba(path_a)
    b = _load_rgba(path_b)
    rmse = pixel_rmse(a, b)
    try:
        distance: Optional[int] = phash_distance(a, b)
    except (ValueError, OSError):
        distance = None
    return PixelComparison(rmse=rmse, phash_distance=distance, size=a.size)
