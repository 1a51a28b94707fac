"""Pull request models."""

from __future__ import annotations

from .base import GitHubModel


class PullRequest(GitHubModel):
    id: int
    number: int
    state: str = ""
    title: str = ""
    body: str | None = None
    draft: bool = False
    html_url: str = ""
