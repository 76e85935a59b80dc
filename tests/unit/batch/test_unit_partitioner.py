# tests/unit/batch/test_partitioner.py — v1
"""Tests for batch.partitioner — chunking, batch directories, relocation."""

from __future__ import annotations

import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from annobatch.batch.partitioner import (
    BatchPartitioner,
    chunk_files,
    generate_run_id,
    per_batch_size,
)
from annobatch.core.errors import DirectoryCreateFailed, FileRelocationFailed, InvalidConfiguration


def _files(source: Path) -> list[Path]:
    return sorted(p for p in source.iterdir() if p.is_file())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestChunking:
    @pytest.mark.parametrize("count,max_jobs,expected", [
        (25, 5, 5),
        (12, 5, 3),
        (11, 5, 3),
        (26, 5, 6),
        (11, 20, 1),
        (100, 1, 100),
    ])
    def test_per_batch_size(self, count, max_jobs, expected):
        assert per_batch_size(count, max_jobs) == expected

    def test_per_batch_size_rejects_zero_jobs(self):
        with pytest.raises(InvalidConfiguration):
            per_batch_size(10, 0)

    def test_chunk_files_keeps_order(self):
        items = [Path(f"f{i}") for i in range(7)]
        chunks = chunk_files(items, 3)
        assert chunks == [items[0:3], items[3:6], items[6:7]]

    @pytest.mark.parametrize("count", [11, 12, 13, 24, 25, 26, 49, 137])
    @pytest.mark.parametrize("max_jobs", [1, 2, 5, 7, 20])
    def test_plan_bounds(self, tmp_path: Path, count, max_jobs):
        files = [tmp_path / f"f{i:03d}.xml" for i in range(count)]
        chunks = BatchPartitioner(tmp_path, max_jobs).plan(files)
        size = per_batch_size(count, max_jobs)
        assert 1 <= len(chunks) <= max_jobs
        assert all(len(c) <= size for c in chunks)
        flat = [f for c in chunks for f in c]
        assert flat == files

    def test_run_id_unique(self):
        assert generate_run_id() != generate_run_id()


# ---------------------------------------------------------------------------
# partition()
# ---------------------------------------------------------------------------

class TestInlinePartition:
    def test_small_input_is_inline(self, make_annotation_files):
        source = make_annotation_files(3)
        files = _files(source)
        batches = BatchPartitioner(source, max_jobs=5).partition(files)

        assert len(batches) == 1
        assert batches[0].inline is True
        assert batches[0].directory_path == source
        assert batches[0].output_path == source.parent / "scans.out"
        assert list(batches[0].members) == files
        # nothing created, nothing moved
        assert _files(source) == files
        assert [p for p in source.iterdir() if p.is_dir()] == []

    def test_ten_files_still_inline(self, make_annotation_files):
        source = make_annotation_files(10)
        batches = BatchPartitioner(source, max_jobs=2).partition(_files(source))
        assert len(batches) == 1 and batches[0].inline

    def test_threshold_configurable(self, make_annotation_files):
        source = make_annotation_files(4)
        batches = BatchPartitioner(source, max_jobs=2, inline_threshold=2).partition(_files(source))
        assert len(batches) == 2
        assert not batches[0].inline


class TestSplitPartition:
    def test_25_files_5_jobs(self, make_annotation_files):
        source = make_annotation_files(25)
        batches = BatchPartitioner(source, max_jobs=5, run_id="r1").partition(_files(source))
        assert len(batches) == 5
        assert [len(b.members) for b in batches] == [5, 5, 5, 5, 5]

    def test_12_files_5_jobs(self, make_annotation_files):
        source = make_annotation_files(12)
        batches = BatchPartitioner(source, max_jobs=5, run_id="r1").partition(_files(source))
        assert [len(b.members) for b in batches] == [3, 3, 3, 3]

    def test_more_jobs_than_files(self, make_annotation_files):
        source = make_annotation_files(11)
        batches = BatchPartitioner(source, max_jobs=50, run_id="r1").partition(_files(source))
        assert len(batches) == 11
        assert all(len(b.members) == 1 for b in batches)

    def test_directories_named_and_populated(self, make_annotation_files):
        source = make_annotation_files(12)
        batches = BatchPartitioner(source, max_jobs=5, run_id="run42").partition(_files(source))
        for i, batch in enumerate(batches):
            assert batch.directory_path == source / f"ipr_batch_run42_{i}"
            assert batch.directory_path.is_dir()
            assert batch.output_path == source / f"ipr_batch_run42_{i}.out"
            for member in batch.members:
                assert member.parent == batch.directory_path
                assert member.exists()

    def test_members_disjoint_and_complete(self, make_annotation_files):
        source = make_annotation_files(23)
        original = [f.name for f in _files(source)]
        batches = BatchPartitioner(source, max_jobs=4, run_id="r").partition(_files(source))
        names = [m.name for b in batches for m in b.members]
        assert sorted(names) == original
        assert len(names) == len(set(names))

    def test_copy_mode_keeps_sources(self, make_annotation_files):
        source = make_annotation_files(12)
        files = _files(source)
        BatchPartitioner(source, max_jobs=3, run_id="r").partition(files)
        assert all(f.exists() for f in files)

    def test_move_mode_empties_source(self, make_annotation_files):
        source = make_annotation_files(12)
        files = _files(source)
        batches = BatchPartitioner(
            source, max_jobs=3, run_id="r", relocation_mode="move",
        ).partition(files)
        assert not any(f.exists() for f in files)
        assert sum(len(list(b.directory_path.iterdir())) for b in batches) == 12

    def test_repeat_runs_do_not_collide(self, make_annotation_files):
        source = make_annotation_files(12)
        files = _files(source)
        first = BatchPartitioner(source, max_jobs=3).partition(files)
        second = BatchPartitioner(source, max_jobs=3).partition(files)
        first_dirs = {b.directory_path for b in first}
        second_dirs = {b.directory_path for b in second}
        assert first_dirs.isdisjoint(second_dirs)


class TestPartitionFailures:
    def test_existing_directory_fails(self, make_annotation_files):
        source = make_annotation_files(12)
        (source / "ipr_batch_dup_0").mkdir()
        with pytest.raises(DirectoryCreateFailed, match="Unable to create directory"):
            BatchPartitioner(source, max_jobs=5, run_id="dup").partition(_files(source))

    def test_relocation_failure_aborts_without_rollback(self, make_annotation_files):
        source = make_annotation_files(12)
        files = _files(source)
        real_copy = shutil.copy2
        calls = {"n": 0}

        def flaky_copy(src, dst, *args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 5:
                raise PermissionError("denied")
            return real_copy(src, dst, *args, **kwargs)

        with patch("annobatch.batch.partitioner.shutil.copy2", side_effect=flaky_copy):
            with pytest.raises(FileRelocationFailed, match="From: .*seq_004.xml"):
                BatchPartitioner(source, max_jobs=4, run_id="r").partition(files)

        # first chunk stays relocated
        first = source / "ipr_batch_r_0"
        assert sorted(p.name for p in first.iterdir()) == [
            "seq_000.xml", "seq_001.xml", "seq_002.xml",
        ]
