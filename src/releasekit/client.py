"""GitHub API client using httpx."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import httpx

from .config import GitHubConfig
from .exceptions import (
    GitHubApiError,
    GitHubAuthError,
    GitHubNotFoundError,
    GitHubTransportError,
)

API_VERSION = "2022-11-28"
USER_AGENT = "releasekit"


class GitHubClient:
    """Async HTTP client for the GitHub REST API.

    One instance is created per run and passed to every component that talks
    to the hosting platform.
    """

    def __init__(self, config: GitHubConfig | None = None) -> None:
        self.config = config or GitHubConfig.from_env()
        self.config.validate()
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            headers={
                "Authorization": f"Bearer {self.config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": USER_AGENT,
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout,
            verify=self.config.ssl_verify,
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _repo(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
        content: bytes | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        """Make an API request and return parsed JSON, or None for an empty body."""
        headers = {}
        if extra_headers:
            headers.update(extra_headers)

        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if json_data is not None:
            kwargs["json"] = json_data
        if content is not None:
            kwargs["content"] = content

        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            reason = str(e) or type(e).__name__
            raise GitHubTransportError(method, path, reason) from e

        if resp.status_code in (401, 403):
            raise GitHubAuthError(resp.status_code, resp.text)
        if resp.status_code == 404:
            raise GitHubNotFoundError(resp.text)
        if not resp.is_success:
            raise GitHubApiError(resp.status_code, resp.reason_phrase or "", resp.text)

        if resp.status_code == 204 or not resp.content:
            return None

        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check URL and authentication"
            raise GitHubApiError(resp.status_code, msg, resp.text[:500])

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise GitHubApiError(
                resp.status_code,
                f"JSON parse error: {e}",
                resp.text[:500],
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, json_data: Any = None, **kwargs: Any) -> Any:
        return await self._request("POST", path, json_data=json_data, **kwargs)

    async def put(self, path: str, json_data: Any = None, **kwargs: Any) -> Any:
        return await self._request("PUT", path, json_data=json_data, **kwargs)

    async def patch(self, path: str, json_data: Any = None, **kwargs: Any) -> Any:
        return await self._request("PATCH", path, json_data=json_data, **kwargs)

    # ── Releases ──────────────────────────────────────────────────

    async def get_release_by_tag(self, owner: str, repo: str, tag: str) -> dict:
        return await self.get(f"{self._repo(owner, repo)}/releases/tags/{quote(tag, safe='')}")

    async def create_release(self, owner: str, repo: str, params: dict[str, Any]) -> dict:
        return await self.post(f"{self._repo(owner, repo)}/releases", params)

    async def upload_release_asset(
        self,
        owner: str,
        repo: str,
        release_id: int,
        name: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> dict:
        url = f"{self.config.upload_url}{self._repo(owner, repo)}/releases/{release_id}/assets"
        return await self.post(
            url,
            params={"name": name},
            content=content,
            extra_headers={"Content-Type": content_type},
        )

    # ── Git data ──────────────────────────────────────────────────

    async def get_ref(self, owner: str, repo: str, branch: str) -> dict:
        ref = f"refs/heads/{branch}"
        data = await self.get(f"{self._repo(owner, repo)}/git/{quote(ref, safe='/')}")
        # a prefix match returns every ref starting with the name
        if isinstance(data, list):
            for item in data:
                if item.get("ref") == ref:
                    return item
            raise GitHubNotFoundError(f"Reference {ref} not found")
        return data

    async def create_ref(self, owner: str, repo: str, branch: str, sha: str) -> dict:
        return await self.post(
            f"{self._repo(owner, repo)}/git/refs",
            {"ref": f"refs/heads/{branch}", "sha": sha},
        )

    async def update_ref(
        self, owner: str, repo: str, branch: str, sha: str, force: bool = False
    ) -> dict:
        ref = quote(f"refs/heads/{branch}", safe="/")
        return await self.patch(
            f"{self._repo(owner, repo)}/git/{ref}",
            {"sha": sha, "force": force},
        )

    async def create_blob(self, owner: str, repo: str, content: str) -> dict:
        return await self.post(
            f"{self._repo(owner, repo)}/git/blobs",
            {"content": content, "encoding": "base64"},
        )

    async def get_commit(self, owner: str, repo: str, sha: str) -> dict:
        return await self.get(f"{self._repo(owner, repo)}/git/commits/{quote(sha, safe='')}")

    async def create_tree(
        self, owner: str, repo: str, base_tree: str, entries: list[dict[str, Any]]
    ) -> dict:
        return await self.post(
            f"{self._repo(owner, repo)}/git/trees",
            {"base_tree": base_tree, "tree": entries},
        )

    async def create_commit(self, owner: str, repo: str, params: dict[str, Any]) -> dict:
        return await self.post(f"{self._repo(owner, repo)}/git/commits", params)

    # ── Contents ──────────────────────────────────────────────────

    async def get_contents(self, owner: str, repo: str, path: str, ref: str) -> dict:
        return await self.get(
            f"{self._repo(owner, repo)}/contents/{quote(path, safe='/')}",
            params={"ref": ref},
        )

    async def create_file(
        self, owner: str, repo: str, path: str, params: dict[str, Any]
    ) -> dict:
        return await self.put(f"{self._repo(owner, repo)}/contents/{quote(path, safe='/')}", params)

    # ── Pull requests ─────────────────────────────────────────────

    async def create_pull_request(self, owner: str, repo: str, params: dict[str, Any]) -> dict:
        return await self.post(f"{self._repo(owner, repo)}/pulls", params)

    async def add_assignees(
        self, owner: str, repo: str, number: int, assignees: list[str]
    ) -> dict:
        return await self.post(
            f"{self._repo(owner, repo)}/issues/{number}/assignees",
            {"assignees": assignees},
        )

    async def add_labels(self, owner: str, repo: str, number: int, labels: list[str]) -> list:
        return await self.post(
            f"{self._repo(owner, repo)}/issues/{number}/labels",
            {"labels": labels},
        )
