"""Base model for GitHub API responses."""

from __future__ import annotations

from pydantic import BaseModel


class GitHubModel(BaseModel):
    """A GitHub response payload, keeping only the fields releasekit reads.

    GitHub returns large objects (owners, reactions, urls for every related
    resource); anything not declared on a subclass is dropped on validation.
    """

    model_config = {"extra": "ignore"}
