#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for report and statistics persistence.
"""

import json
import os
from unittest.mock import patch

from mediadup.models import DuplicateGroup, MediaFile, ScanResult
from mediadup.reporting import ResultSink
from mediadup.utils.time import file_stamp


def _result(n_groups=1):
    groups = [
        DuplicateGroup(f"h{i}", [
            MediaFile(f"/k{i}.png", 10, 0, "raster"),
            MediaFile(f"/d{i}.png", 7, 0, "raster"),
        ])
        for i in range(n_groups)
    ]
    return ScanResult(root="/", total_files=2 * n_groups, groups=groups, cache_hits=1,
                      finished_at="2024-01-01T00:00:00Z")


class TestResultSink:
    def test_writes_report_and_stats(self, tmp_path):
        sink = ResultSink(tmp_path / "state")
        path = sink.write(_result(2))
        assert path == sink.report_path
        report = json.loads(sink.report_path.read_text())
        assert [g["hash"] for g in report] == ["h0", "h1"]
        assert report[0]["keep"] == "/k0.png"
        assert report[0]["files"] == ["/k0.png", "/d0.png"]
        assert sink.load_stats() == {
            "total": 4,
            "duplicate_groups": 2,
            "space_reclaimable_bytes": 14,
            "skipped": 0,
            "cache_hits": 1,
            "finished_at": "2024-01-01T00:00:00Z",
        }

    def test_previous_report_renamed_with_its_mtime(self, tmp_path):
        sink = ResultSink(tmp_path)
        sink.write(_result(1))
        old_mtime = 1_600_000_000
        os.utime(sink.report_path, (old_mtime, old_mtime))
        sink.write(_result(2))
        rotated = tmp_path / f"last_scan_{file_stamp(old_mtime)}.json"
        assert rotated.exists()
        assert len(json.loads(rotated.read_text())) == 1
        assert len(sink.load_report()) == 2

    def test_rotation_never_overwrites(self, tmp_path):
        sink = ResultSink(tmp_path)
        stamp = file_stamp(1_600_000_000)
        for n in range(3):
            sink.write(_result(n + 1))
            os.utime(sink.report_path, (1_600_000_000, 1_600_000_000))
        sink.write(_result(4))
        names = sorted(p.name for p in tmp_path.glob("last_scan_*.json"))
        assert names == [f"last_scan_{stamp}.json", f"last_scan_{stamp}_1.json",
                         f"last_scan_{stamp}_2.json"]

    def test_failed_rotation_keeps_old_report(self, tmp_path):
        sink = ResultSink(tmp_path)
        sink.write(_result(1))
        with patch("mediadup.reporting.os.rename", side_effect=OSError(13, "Permission denied")):
            path = sink.write(_result(2))
        assert path != sink.report_path
        assert len(sink.load_report()) == 1
        assert len(json.loads(path.read_text())) == 2

    def test_load_without_scan(self, tmp_path):
        sink = ResultSink(tmp_path / "empty")
        assert sink.load_report() == []
        assert sink.load_stats() == {}
