"""Shared test fixtures for releasekit."""

from __future__ import annotations

from pathlib import Path

import pytest
import respx

from releasekit.client import GitHubClient
from releasekit.config import GitHubConfig
from releasekit.models.config import ProjectConfig

API = "https://api.github.test"
UPLOADS = "https://uploads.github.test"
TEST_TOKEN = "test-token"


@pytest.fixture
def config() -> GitHubConfig:
    return GitHubConfig(token=TEST_TOKEN, api_url=API, upload_url=UPLOADS)


@pytest.fixture
async def client(config: GitHubConfig) -> GitHubClient:
    gh = GitHubClient(config)
    yield gh
    await gh.close()


@pytest.fixture
def mock_github() -> respx.MockRouter:
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def project() -> ProjectConfig:
    return ProjectConfig.model_validate(
        {
            "build": {"binary": "tool", "arch": ["amd64", "arm64"], "os": ["linux", "darwin"]},
            "release": {"owner": "acme", "repo": "tool"},
            "brew": {
                "name": "tool",
                "description": "a tool",
                "homepage": "https://example.com/tool",
                "install": 'bin.install "tool"',
                "repository": {"owner": "acme", "name": "homebrew-tap"},
                "pull_request": {"head": "bump-version"},
            },
        }
    )


@pytest.fixture
def cargo_output(tmp_path: Path, project: ProjectConfig) -> Path:
    """Fake cargo output for every target of the ``project`` fixture."""
    from releasekit.matrix import build_output_path

    for arch in project.build.arch:
        for os in project.build.os:
            path = build_output_path(project.build.binary, arch, os, root=tmp_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(f"binary {arch.token} {os.token}".encode())
    return tmp_path
