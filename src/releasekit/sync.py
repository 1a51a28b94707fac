"""Commit a file to a branch through the git data API and optionally open a pull request.

The upsert runs blob -> tree -> commit -> ref update against the branch head.
When the file does not exist yet, it is created directly through the contents
API. Objects created before a failing step are left unreferenced. The ref
update is always the last write.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .client import GitHubClient
from .exceptions import (
    ContentSyncError,
    GitHubApiError,
    GitHubError,
    GitHubNotFoundError,
    ReleaseKitError,
)
from .models.git import Blob, Commit, ContentFile, Ref, Tree
from .models.pulls import PullRequest

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

FILE_MODE = "100644"


@dataclass(frozen=True)
class Committer:
    name: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class PullRequestSpec:
    title: str
    body: str = ""
    draft: bool = False
    assignees: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UpsertRequest:
    """Make *path* on *branch* contain *content*.

    *branch* is created from the head of *base* when missing. A pull request
    from *branch* into *base* is opened when *pull_request* is given.
    """

    path: str
    content: str
    branch: str
    message: str
    base: str = "main"
    committer: Committer | None = None
    pull_request: PullRequestSpec | None = None


@dataclass
class SyncResult:
    branch: str
    commit_sha: str | None
    changed: bool
    pull_request: PullRequest | None = None


def git_blob_sha(content: bytes) -> str:
    """The object id git assigns to a blob with this content."""
    header = f"blob {len(content)}\0".encode()
    return hashlib.sha1(header + content).hexdigest()


def _already_exists(error: GitHubApiError) -> bool:
    return error.status_code == 422 and "already exists" in error.body.lower()


class ContentSynchronizer:
    """Upserts text files on branches of one repository."""

    def __init__(self, client: GitHubClient, owner: str, repo: str) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo

    async def _step(self, step: str, call: Awaitable[Any], model: type[M]) -> M:
        try:
            return model.model_validate(await call)
        except (GitHubError, ValidationError) as e:
            raise ContentSyncError(step, e) from e

    async def upsert(self, request: UpsertRequest) -> SyncResult:
        logger.debug("upserting %s on %s/%s@%s", request.path, self.owner, self.repo, request.branch)
        base_ref = await self._step(
            "base branch lookup",
            self.client.get_ref(self.owner, self.repo, request.base),
            Ref,
        )
        if request.branch != request.base:
            await self._ensure_branch(request.branch, base_ref.object.sha)

        data = request.content.encode()
        encoded = base64.b64encode(data).decode()
        existing = await self._existing_file(request)

        if existing is None:
            commit_sha = await self._create_file(request, encoded)
            changed = True
        elif existing.sha == git_blob_sha(data):
            logger.info("%s is already up to date on %s", request.path, request.branch)
            commit_sha = None
            changed = False
        else:
            commit_sha = await self._commit(request, encoded)
            changed = True

        pull_request = None
        if request.pull_request is not None:
            pull_request = await self.open_pull_request(
                request.branch, request.base, request.pull_request
            )
        return SyncResult(
            branch=request.branch,
            commit_sha=commit_sha,
            changed=changed,
            pull_request=pull_request,
        )

    # ── protocol steps ────────────────────────────────────────────

    async def _ensure_branch(self, branch: str, sha: str) -> None:
        try:
            await self.client.create_ref(self.owner, self.repo, branch, sha)
        except GitHubApiError as e:
            if _already_exists(e):
                logger.debug("branch %s already exists, reusing it", branch)
                return
            raise ContentSyncError("branch creation", e) from e
        except GitHubError as e:
            raise ContentSyncError("branch creation", e) from e
        logger.info("created branch %s at %s", branch, sha)

    async def _existing_file(self, request: UpsertRequest) -> ContentFile | None:
        try:
            data = await self.client.get_contents(
                self.owner, self.repo, request.path, request.branch
            )
        except GitHubNotFoundError:
            logger.debug("%s does not exist on %s yet", request.path, request.branch)
            return None
        except GitHubError as e:
            raise ContentSyncError("file lookup", e) from e
        if isinstance(data, list):
            msg = f"{request.path} is a directory"
            raise ContentSyncError("file lookup", ReleaseKitError(msg))
        try:
            return ContentFile.model_validate(data)
        except ValidationError as e:
            raise ContentSyncError("file lookup", e) from e

    async def _create_file(self, request: UpsertRequest, encoded: str) -> str | None:
        params: dict[str, Any] = {
            "message": request.message,
            "content": encoded,
            "branch": request.branch,
        }
        if request.committer:
            params["committer"] = request.committer.to_dict()
        try:
            data = await self.client.create_file(self.owner, self.repo, request.path, params)
        except GitHubError as e:
            raise ContentSyncError("file creation", e) from e
        commit_sha = ((data or {}).get("commit") or {}).get("sha")
        logger.info("created %s on %s (%s)", request.path, request.branch, commit_sha)
        return commit_sha

    async def _commit(self, request: UpsertRequest, encoded: str) -> str:
        owner, repo = self.owner, self.repo

        blob = await self._step(
            "blob creation", self.client.create_blob(owner, repo, encoded), Blob
        )
        head = await self._step("tree lookup", self.client.get_ref(owner, repo, request.branch), Ref)
        parent_sha = head.object.sha
        parent = await self._step(
            "tree lookup", self.client.get_commit(owner, repo, parent_sha), Commit
        )

        tree = await self._step(
            "tree creation",
            self.client.create_tree(
                owner,
                repo,
                parent.tree.sha,
                [{"path": request.path, "mode": FILE_MODE, "type": "blob", "sha": blob.sha}],
            ),
            Tree,
        )

        payload: dict[str, Any] = {
            "message": request.message,
            "tree": tree.sha,
            "parents": [parent_sha],
        }
        if request.committer:
            payload["author"] = request.committer.to_dict()
            payload["committer"] = request.committer.to_dict()
        commit = await self._step(
            "commit creation", self.client.create_commit(owner, repo, payload), Commit
        )

        await self._step(
            "ref update",
            self.client.update_ref(owner, repo, request.branch, commit.sha),
            Ref,
        )
        verified = await self._step(
            "ref verification", self.client.get_ref(owner, repo, request.branch), Ref
        )
        if verified.object.sha != commit.sha:
            msg = (
                f"refs/heads/{request.branch} points at {verified.object.sha}, "
                f"expected {commit.sha}"
            )
            raise ContentSyncError("ref verification", ReleaseKitError(msg))

        logger.info("committed %s to %s (%s)", request.path, request.branch, commit.sha)
        return commit.sha

    # ── pull request ──────────────────────────────────────────────

    async def open_pull_request(
        self, head: str, base: str, spec: PullRequestSpec
    ) -> PullRequest | None:
        """Open a pull request from *head* into *base*.

        Returns ``None`` when one is already open or there is nothing to merge.
        Assignees and labels are added afterwards; failing to add them only logs
        a warning.
        """
        params = {
            "title": spec.title,
            "head": head,
            "base": base,
            "body": spec.body,
            "draft": spec.draft,
        }
        try:
            data = await self.client.create_pull_request(self.owner, self.repo, params)
        except GitHubApiError as e:
            if _already_exists(e) or "no commits between" in e.body.lower():
                logger.info("pull request %s -> %s not opened: %s", head, base, e.body)
                return None
            raise ContentSyncError("pull request creation", e) from e
        except GitHubError as e:
            raise ContentSyncError("pull request creation", e) from e

        try:
            pr = PullRequest.model_validate(data)
        except ValidationError as e:
            raise ContentSyncError("pull request creation", e) from e
        logger.info("opened pull request #%s: %s", pr.number, pr.html_url)

        if spec.assignees:
            try:
                await self.client.add_assignees(self.owner, self.repo, pr.number, spec.assignees)
            except GitHubError as e:
                logger.warning("could not assign %s to #%s: %s", spec.assignees, pr.number, e)
        if spec.labels:
            try:
                await self.client.add_labels(self.owner, self.repo, pr.number, spec.labels)
            except GitHubError as e:
                logger.warning("could not label #%s with %s: %s", pr.number, spec.labels, e)
        return pr
