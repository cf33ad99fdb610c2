#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for duplicate-group construction and reclaim accounting.
"""

import random

import pytest

from mediadup.grouping import GroupBuilder, order_members
from mediadup.models import Hashed, MediaFile, ScanResult, Skipped, SkipReason


def _media(path, size=10, mtime=0):
    return MediaFile(path=path, size_bytes=size, mtime=mtime, kind="raster")


class TestGroupBuilder:
    def test_partitions_by_hash(self):
        builder = GroupBuilder()
        builder.add(Hashed("h1"), _media("/a"))
        builder.add(Hashed("h2"), _media("/b"))
        builder.add(Hashed("h1"), _media("/c"))
        builder.add(Hashed("h3"), _media("/d"))
        builder.add(Hashed("h2"), _media("/e"))
        groups = builder.groups()
        assert [(g.hash, [m.path for m in g.members]) for g in groups] == [
            ("h1", ["/a", "/c"]),
            ("h2", ["/b", "/e"]),
        ]

    def test_skips_never_grouped(self):
        builder = GroupBuilder()
        assert builder.add(Skipped(SkipReason.ZERO_BYTE), _media("/z1")) is False
        builder.add(Skipped(SkipReason.ZERO_BYTE), _media("/z2"))
        builder.add(Hashed("h"), _media("/a"))
        assert builder.groups() == []
        assert builder.hashed_count == 1

    def test_repeated_path_ignored(self):
        builder = GroupBuilder()
        builder.add(Hashed("h"), _media("/a"))
        assert builder.add(Hashed("h"), _media("/a")) is False
        assert builder.groups() == []

    def test_keep_independent_of_arrival_order(self):
        items = [(Hashed("h"), _media(p)) for p in ("/x/3", "/x/1", "/x/2")]
        keeps = set()
        for seed in range(5):
            random.Random(seed).shuffle(items)
            builder = GroupBuilder()
            for result, media in items:
                builder.add(result, media)
            [group] = builder.groups()
            keeps.add(group.keep.path)
            assert [m.path for m in group.duplicates] == ["/x/2", "/x/3"]
        assert keeps == {"/x/1"}

    def test_oldest_policy(self):
        builder = GroupBuilder("oldest")
        builder.add(Hashed("h"), _media("/a", mtime=300))
        builder.add(Hashed("h"), _media("/b", mtime=100))
        builder.add(Hashed("h"), _media("/c", mtime=100))
        [group] = builder.groups()
        assert group.keep.path == "/b"
        assert [m.path for m in group.duplicates] == ["/a", "/c"]

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            GroupBuilder("newest")

    def test_order_members_empty(self):
        assert order_members([]) == []


class TestReclaimAccounting:
    def test_group_and_total(self):
        builder = GroupBuilder()
        builder.add(Hashed("h1"), _media("/a", size=100))
        builder.add(Hashed("h1"), _media("/b", size=40))
        builder.add(Hashed("h1"), _media("/c", size=60))
        builder.add(Hashed("h2"), _media("/d", size=7))
        builder.add(Hashed("h2"), _media("/e", size=9))
        g1, g2 = builder.groups()
        assert g1.reclaimable_bytes == 100
        assert g2.reclaimable_bytes == 9
        result = ScanResult(root="/", total_files=5, groups=[g1, g2])
        assert result.space_reclaimable_bytes == 109
        assert result.stats()["duplicate_groups"] == 2

    def test_record_shape(self):
        builder = GroupBuilder()
        builder.add(Hashed("h"), _media("/b", size=5))
        builder.add(Hashed("h"), _media("/a", size=5))
        [group] = builder.groups()
        assert group.to_record() == {
            "hash": "h",
            "count": 2,
            "keep": "/a",
            "files": ["/a", "/b"],
            "reclaimable_bytes": 5,
            "actions": [],
        }
