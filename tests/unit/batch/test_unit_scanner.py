# tests/unit/batch/test_scanner.py — v2
"""Tests for batch.scanner — validation and annotation file discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from annobatch.batch.scanner import InputDiscoverer
from annobatch.core.errors import EmptyInput, PathNotFound
from annobatch.core.models import ImportRequest


def _discoverer(path: Path, suffix: str = ".xml") -> InputDiscoverer:
    return InputDiscoverer(ImportRequest(analysis_id=1, source_path=path), suffix=suffix)


class TestInputDiscovererValidate:
    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(PathNotFound, match="does not exist"):
            _discoverer(tmp_path / "nope").validate()

    def test_path_is_a_file(self, tmp_path: Path):
        f = tmp_path / "single.xml"
        f.write_text("<x/>")
        with pytest.raises(PathNotFound, match="not a directory"):
            _discoverer(f).validate()

    def test_valid_directory(self, tmp_path: Path):
        _discoverer(tmp_path).validate()


class TestInputDiscovererDiscover:
    def test_finds_matching_files_sorted(self, make_annotation_files):
        source = make_annotation_files(4)
        (source / "notes.txt").write_text("ignored")
        files = _discoverer(source).discover()
        assert [f.name for f in files] == [
            "seq_000.xml", "seq_001.xml", "seq_002.xml", "seq_003.xml",
        ]

    def test_ignores_subdirectories(self, make_annotation_files):
        source = make_annotation_files(2)
        nested = source / "ipr_batch_old_0"
        nested.mkdir()
        (nested / "old.xml").write_text("<x/>")
        files = _discoverer(source).discover()
        assert len(files) == 2

    def test_empty_directory(self, tmp_path: Path):
        with pytest.raises(EmptyInput, match="Could not find any .xml files"):
            _discoverer(tmp_path).discover()

    def test_no_matching_suffix(self, make_annotation_files):
        source = make_annotation_files(3, suffix=".tsv")
        with pytest.raises(EmptyInput):
            _discoverer(source).discover()

    def test_custom_suffix(self, make_annotation_files):
        source = make_annotation_files(3, suffix=".tsv")
        assert len(_discoverer(source, suffix=".tsv").discover()) == 3

    def test_discover_validates_first(self, tmp_path: Path):
        with pytest.raises(PathNotFound):
            _discoverer(tmp_path / "missing").discover()
