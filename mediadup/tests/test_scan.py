#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
End-to-end scans over temporary trees (thread executor).
"""

import dataclasses
import os

import pytest

from conftest import CrashingBackend, MissingToolBackend, write_fake, write_png
from mediadup.config import KIND_RASTER
from mediadup.errors import BackendUnavailable, InvalidScanRoot
from mediadup.scanning import DuplicateScanner, FileDiscovery


def _skip_entries(scanner):
    return [(e.reason, e.path) for e in scanner.skip_log.entries()]


class TestDiscovery:
    def test_supported_regular_files_only(self, tmp_path):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"x")
        write_fake(root / "sub" / "b.JPEG", b"x")
        write_fake(root / "notes.txt", b"x")
        (root / "dir.png").mkdir()
        os.symlink(root / "a.png", root / "link.png")
        found = FileDiscovery().discover_files(root)
        assert found == sorted([str(root / "a.png"), str(root / "sub" / "b.JPEG")])

    def test_does_not_follow_directory_symlinks(self, tmp_path):
        outside = tmp_path / "outside"
        write_fake(outside / "x.png", b"x")
        root = tmp_path / "root"
        root.mkdir()
        os.symlink(outside, root / "linked")
        assert FileDiscovery().discover_files(root) == []

    def test_counts_kinds(self, tmp_path):
        write_fake(tmp_path / "a.png", b"x")
        write_fake(tmp_path / "b.dng", b"x")
        discovery = FileDiscovery()
        discovery.discover_files(tmp_path)
        assert discovery.stats.by_kind == {"raster": 1, "raw": 1}


class TestScenarios:
    def test_metadata_variants_grouped(self, tmp_path, scan_options, pillow_backends):
        root = tmp_path / "photos"
        a = write_png(root / "A.png", color=(10, 20, 30), text={"Author": "alice"})
        b = write_png(root / "B.png", color=(10, 20, 30), text={"Author": "bob", "Note": "copy"})
        c = write_png(root / "C.png", color=(200, 0, 0))

        scanner = DuplicateScanner(scan_options, backends=pillow_backends)
        result = scanner.scan(root)

        assert result.total_files == 3
        [group] = result.groups
        assert [m.path for m in group.members] == [str(a), str(b)]
        assert group.keep.path == str(a)
        assert str(c) not in [m.path for g in result.groups for m in g.members]
        assert _skip_entries(scanner) == []
        assert result.space_reclaimable_bytes == b.stat().st_size

    def test_zero_byte_file(self, tmp_path, scan_options, fake_backends):
        root = tmp_path / "root"
        write_fake(root / "x.png", b"content")
        d = root / "D.png"
        d.touch()

        scanner = DuplicateScanner(scan_options, backends=fake_backends)
        result = scanner.scan(root)

        assert result.groups == []
        assert [s.reason.value for s in result.skipped] == ["zero-byte-file"]
        assert _skip_entries(scanner) == [("zero-byte-file", str(d))]

    def test_failures_isolated_per_file(self, tmp_path, scan_options, fake_backends):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"same", [b"x"])
        write_fake(root / "b.png", b"same", [b"y"])
        write_fake(root / "bad.png", b"FAIL")
        result = DuplicateScanner(scan_options, backends=fake_backends).scan(root)
        assert len(result.groups) == 1
        assert [s.reason.value for s in result.skipped] == ["normalize-failed"]


class TestCacheAcrossScans:
    def test_second_scan_hits_cache(self, tmp_path, scan_options, fake_backend, fake_backends):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"same", [b"1"])
        write_fake(root / "b.png", b"same", [b"2"])

        first = DuplicateScanner(scan_options, backends=fake_backends).scan(root)
        calls_after_first = fake_backend.total_calls
        second = DuplicateScanner(scan_options, backends=fake_backends).scan(root)

        assert calls_after_first == 2
        assert fake_backend.total_calls == 2
        assert second.cache_hits == 2
        assert [g.hash for g in second.groups] == [g.hash for g in first.groups]

    def test_touching_a_file_forces_recompute(self, tmp_path, scan_options, fake_backend, fake_backends):
        root = tmp_path / "root"
        a = write_fake(root / "a.png", b"same")
        write_fake(root / "b.png", b"same")
        DuplicateScanner(scan_options, backends=fake_backends).scan(root)

        st = a.stat()
        os.utime(a, (st.st_atime, st.st_mtime + 5))
        result = DuplicateScanner(scan_options, backends=fake_backends).scan(root)
        assert fake_backend.calls[str(a)] == 2
        assert result.cache_hits == 1

    def test_no_cache_option(self, tmp_path, scan_options, fake_backend, fake_backends):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"x")
        options = dataclasses.replace(scan_options, use_cache=False)
        DuplicateScanner(options, backends=fake_backends).scan(root)
        DuplicateScanner(options, backends=fake_backends).scan(root)
        assert fake_backend.total_calls == 2
        assert not scan_options.cache_db.exists()


class TestScanActions:
    def test_report_only_leaves_tree_untouched(self, tmp_path, scan_options, fake_backends):
        root = tmp_path / "root"
        files = [write_fake(root / f"{n}.png", b"same", [n.encode()]) for n in ("a", "b", "c")]
        before = {p: (p.stat().st_ino, p.read_bytes()) for p in files}
        result = DuplicateScanner(scan_options, backends=fake_backends).scan(root)
        assert {p: (p.stat().st_ino, p.read_bytes()) for p in files} == before
        assert [a.ok for a in result.groups[0].actions] == [True, True]

    def test_hard_link_scan(self, tmp_path, scan_options, fake_backends):
        root = tmp_path / "root"
        a = write_fake(root / "a.png", b"same", [b"1"])
        b = write_fake(root / "b.png", b"same", [b"2"])
        options = dataclasses.replace(scan_options, action="hard-link")
        result = DuplicateScanner(options, backends=fake_backends).scan(root)
        assert os.path.samefile(a, b)
        assert result.failed_actions == []

    def test_relocate_scan(self, tmp_path, scan_options, fake_backends):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"same", [b"1"])
        b = write_fake(root / "b.png", b"same", [b"2"])
        options = dataclasses.replace(scan_options, action="relocate")
        DuplicateScanner(options, backends=fake_backends).scan(root)
        assert not b.exists()
        assert (scan_options.trash_dir / "b.png").exists()

    def test_report_written(self, tmp_path, scan_options, fake_backends):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"same")
        write_fake(root / "b.png", b"same")
        scanner = DuplicateScanner(scan_options, backends=fake_backends)
        scanner.scan(root)
        assert scanner.sink.load_stats()["duplicate_groups"] == 1
        assert scanner.sink.load_report()[0]["files"] == [str(root / "a.png"), str(root / "b.png")]


class TestFatalErrors:
    def test_missing_root(self, tmp_path, scan_options, fake_backends):
        with pytest.raises(InvalidScanRoot):
            DuplicateScanner(scan_options, backends=fake_backends).scan(tmp_path / "nope")

    def test_root_is_a_file(self, tmp_path, scan_options, fake_backends):
        f = write_fake(tmp_path / "a.png", b"x")
        with pytest.raises(InvalidScanRoot):
            DuplicateScanner(scan_options, backends=fake_backends).scan(f)

    def test_missing_backend_aborts_before_processing(self, tmp_path, scan_options, fake_backend):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"x")
        write_fake(root / "clip.mp4", b"x")
        backends = {"raster": fake_backend, "video": MissingToolBackend()}
        scanner = DuplicateScanner(scan_options, backends=backends)
        with pytest.raises(BackendUnavailable):
            scanner.scan(root)
        assert fake_backend.total_calls == 0
        assert not scanner.sink.report_path.exists()

    def test_missing_backend_irrelevant_without_that_kind(self, tmp_path, scan_options, fake_backend):
        root = tmp_path / "root"
        write_fake(root / "a.png", b"x")
        backends = {"raster": fake_backend, "video": MissingToolBackend()}
        result = DuplicateScanner(scan_options, backends=backends).scan(root)
        assert result.total_files == 1


class TestProcessExecutor:
    def test_pillow_scan_and_cache_hits(self, tmp_path, scan_options, pillow_backends):
        root = tmp_path / "photos"
        a = write_png(root / "A.png", color=(10, 20, 30), text={"Author": "alice"})
        b = write_png(root / "B.png", color=(10, 20, 30), text={"Author": "bob"})
        write_png(root / "C.png", color=(200, 0, 0))
        options = dataclasses.replace(scan_options, executor="process")

        first = DuplicateScanner(options, backends=pillow_backends).scan(root)
        second = DuplicateScanner(options, backends=pillow_backends).scan(root)

        assert [[m.path for m in g.members] for g in first.groups] == [[str(a), str(b)]]
        assert first.cache_hits == 0
        assert second.cache_hits == 3
        assert [g.hash for g in second.groups] == [g.hash for g in first.groups]

    def test_dead_worker_costs_only_its_file(self, tmp_path, scan_options):
        root = tmp_path / "root"
        for i in range(12):
            write_fake(root / f"{i:02d}.png", f"body{i % 2}".encode(), [str(i).encode()])
        crash = write_fake(root / "05-crash.png", b"CRASH")
        options = dataclasses.replace(scan_options, executor="process", jobs=3)
        scanner = DuplicateScanner(options, backends={KIND_RASTER: CrashingBackend()})

        result = scanner.scan(root)

        assert result.total_files == 13
        assert [s.reason.value for s in result.skipped] == ["normalize-failed"]
        assert "worker crashed" in result.skipped[0].detail
        assert _skip_entries(scanner) == [("normalize-failed", str(crash))]
        assert sorted(len(g.members) for g in result.groups) == [6, 6]
