"""Git data models: refs, blobs, trees, commits and repository contents."""

from __future__ import annotations

from .base import GitHubModel


class GitObject(GitHubModel):
    sha: str
    type: str = ""
    url: str = ""


class Ref(GitHubModel):
    ref: str = ""
    node_id: str = ""
    url: str = ""
    object: GitObject


class Blob(GitHubModel):
    sha: str
    url: str = ""


class TreeEntry(GitHubModel):
    path: str = ""
    mode: str = ""
    type: str = ""
    sha: str | None = None


class Tree(GitHubModel):
    sha: str
    url: str = ""
    tree: list[TreeEntry] = []
    truncated: bool = False


class TreeRef(GitHubModel):
    sha: str
    url: str = ""


class Commit(GitHubModel):
    sha: str
    url: str = ""
    message: str = ""
    tree: TreeRef
    parents: list[GitObject] = []


class ContentFile(GitHubModel):
    name: str = ""
    path: str = ""
    sha: str
    size: int = 0
    type: str = "file"
