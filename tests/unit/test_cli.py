"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from releasekit import main
from releasekit.exceptions import NoTagsError
from releasekit.models.assets import Package
from releasekit.pipeline import ReleaseOutcome
from releasekit.resolver import Release
from releasekit.sync import SyncResult
from releasekit.target import Arch, Os, Tag

CONFIG = """
build:
  binary: tool
  arch: [amd64]
  os: [linux]
release:
  owner: acme
  repo: tool
brew:
  name: tool
  install: bin.install "tool"
  repository:
    owner: acme
    name: homebrew-tap
"""

PACKAGE = Package(
    name="tool_v1.0.0_amd64_linux.tar.gz",
    url="https://dl/tool_v1.0.0_amd64_linux.tar.gz",
    checksum="abc",
    os=Os.LINUX,
    arch=Arch.AMD64,
)


@pytest.fixture
def calls(monkeypatch, tmp_path: Path) -> dict[str, list]:
    recorded: dict[str, list] = {"build": [], "release": [], "formula": []}

    async def fake_release_assets(client, project, tag, *, workdir, matrix):
        recorded["release"].append((tag, [e.computed_name for e in matrix]))
        release = Release(id=1, owner="acme", repo="tool", tag=tag, name=tag.name)
        return ReleaseOutcome(release=release, packages=[PACKAGE])

    async def fake_publish_formula(client, brew, packages, tag):
        recorded["formula"].append(packages)
        return SyncResult(branch="main", commit_sha="c1", changed=True)

    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_PAT", raising=False)
    monkeypatch.setattr("releasekit.vcs.current_tag", lambda path: Tag("v1.0.0"))
    monkeypatch.setattr(
        "releasekit.build.build_targets", lambda matrix, root: recorded["build"].append(matrix)
    )
    monkeypatch.setattr("releasekit.pipeline.release_assets", fake_release_assets)
    monkeypatch.setattr("releasekit.pipeline.publish_formula", fake_publish_formula)
    (tmp_path / "releasekit.yaml").write_text(CONFIG)
    return recorded


def _invoke(tmp_path: Path, *args: str):
    return CliRunner().invoke(
        main,
        [
            "--config",
            str(tmp_path / "releasekit.yaml"),
            "--workdir",
            str(tmp_path),
            "--github-token",
            "test-token",
            *args,
        ],
    )


def test_full_run_prints_packages(calls, tmp_path: Path):
    result = _invoke(tmp_path)

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [PACKAGE.to_dict()]
    assert len(calls["build"]) == 1
    assert calls["release"] == [(Tag("v1.0.0"), ["tool_v1.0.0_amd64_linux.tar.gz"])]
    assert calls["formula"] == [[PACKAGE]]


def test_skip_flags(calls, tmp_path: Path):
    result = _invoke(tmp_path, "--skip-build", "--skip-formula")

    assert result.exit_code == 0, result.output
    assert calls["build"] == []
    assert calls["formula"] == []
    assert len(calls["release"]) == 1


def test_release_error_exits_non_zero(calls, monkeypatch, tmp_path: Path):
    def no_tags(path):
        raise NoTagsError("No tags found")

    monkeypatch.setattr("releasekit.vcs.current_tag", no_tags)

    result = _invoke(tmp_path)

    assert result.exit_code == 1
    assert calls["release"] == []


def test_missing_config_exits_non_zero(calls, tmp_path: Path):
    result = CliRunner().invoke(
        main, ["--config", str(tmp_path / "missing.yaml"), "--github-token", "t"]
    )
    assert result.exit_code == 1


def test_missing_token(calls, tmp_path: Path):
    result = CliRunner().invoke(
        main, ["--config", str(tmp_path / "releasekit.yaml"), "--workdir", str(tmp_path)]
    )
    assert result.exit_code == 1
    assert "GITHUB_TOKEN" in result.output
