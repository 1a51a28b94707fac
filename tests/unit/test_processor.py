"""Tests for per-target asset processing."""

from __future__ import annotations

import tarfile
from pathlib import Path

import pytest

from releasekit.archive import sha256_file
from releasekit.exceptions import MissingBinaryError
from releasekit.matrix import build_matrix
from releasekit.models.config import ProjectConfig
from releasekit.processor import check_binary, process_entry, process_matrix
from releasekit.target import Tag

TAG = Tag("v1.0.0")


def test_process_matrix_attaches_checksummed_assets(project: ProjectConfig, cargo_output: Path):
    matrix = build_matrix(project.build, TAG, root=cargo_output)
    processed = process_matrix(matrix, workdir=cargo_output)

    assert [e.computed_name for e in processed] == [e.computed_name for e in matrix]
    for entry in processed:
        assert entry.asset is not None
        assert entry.asset.name == entry.computed_name
        assert entry.asset.path == cargo_output / entry.computed_name
        assert entry.asset.checksum == sha256_file(entry.asset.path)
        with tarfile.open(entry.asset.path, "r:gz") as tar:
            assert tar.getnames() == ["tool"]


def test_checksums_differ_per_target(project: ProjectConfig, cargo_output: Path):
    matrix = process_matrix(build_matrix(project.build, TAG, root=cargo_output), workdir=cargo_output)
    assert len({e.asset.checksum for e in matrix}) == len(matrix)


def test_missing_cross_binary_hints_target(project: ProjectConfig, tmp_path: Path):
    entry = build_matrix(project.build, TAG, root=tmp_path)[0]
    with pytest.raises(MissingBinaryError) as exc_info:
        check_binary(entry)
    assert "--target x86_64-unknown-linux-gnu" in str(exc_info.value)
    assert exc_info.value.path == entry.source


def test_missing_single_binary_hints_plain_build(tmp_path: Path):
    project = ProjectConfig.model_validate(
        {"build": {"binary": "tool"}, "release": {"owner": "acme", "repo": "tool"}}
    )
    entry = build_matrix(project.build, TAG, root=tmp_path)[0]
    with pytest.raises(MissingBinaryError, match="cargo build --release` first"):
        process_entry(entry, workdir=tmp_path)
    assert entry.asset is None


def test_processing_stops_at_first_missing(project: ProjectConfig, cargo_output: Path):
    matrix = build_matrix(project.build, TAG, root=cargo_output)
    matrix[1].source.unlink()
    with pytest.raises(MissingBinaryError):
        process_matrix(matrix, workdir=cargo_output)
    assert matrix[0].asset is not None
    assert matrix[2].asset is None
