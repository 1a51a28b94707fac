"""Release and release asset models."""

from __future__ import annotations

from .base import GitHubModel


class ReleaseAsset(GitHubModel):
    id: int
    name: str = ""
    label: str | None = None
    state: str = ""
    content_type: str = ""
    size: int = 0
    browser_download_url: str = ""


class ReleaseResponse(GitHubModel):
    id: int
    tag_name: str = ""
    name: str | None = None
    body: str | None = None
    draft: bool = False
    prerelease: bool = False
    target_commitish: str = ""
    html_url: str = ""
    upload_url: str = ""
    tarball_url: str | None = None
    zipball_url: str | None = None
    assets: list[ReleaseAsset] = []
