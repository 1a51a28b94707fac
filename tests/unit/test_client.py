"""Tests for GitHub API client."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from releasekit.client import GitHubClient
from releasekit.config import GitHubConfig
from releasekit.exceptions import (
    GitHubApiError,
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    GitHubTransportError,
)

API = "https://api.github.test"
UPLOADS = "https://uploads.github.test"
REPO = f"{API}/repos/acme/tool"


def _make_client() -> GitHubClient:
    return GitHubClient(GitHubConfig(token="test-token", api_url=API, upload_url=UPLOADS))


class TestConstruction:
    def test_requires_token(self):
        with pytest.raises(ValueError, match="GITHUB_TOKEN"):
            GitHubClient(GitHubConfig(token=""))

    @pytest.mark.asyncio
    async def test_sends_github_headers(self):
        async with respx.mock() as router:
            route = router.get(f"{REPO}/releases/tags/v1.0.0").mock(
                return_value=httpx.Response(200, json={"id": 1})
            )
            client = _make_client()
            await client.get_release_by_tag("acme", "tool", "v1.0.0")
            request = route.calls.last.request
            assert request.headers["Authorization"] == "Bearer test-token"
            assert request.headers["Accept"] == "application/vnd.github+json"
            assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"


class TestRequest:
    @pytest.mark.asyncio
    async def test_auth_error_401(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/releases/tags/v1.0.0").mock(
                return_value=httpx.Response(401, text="Bad credentials")
            )
            client = _make_client()
            with pytest.raises(GitHubAuthError) as exc_info:
                await client.get_release_by_tag("acme", "tool", "v1.0.0")
            assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_auth_error_403(self):
        async with respx.mock() as router:
            router.post(f"{REPO}/releases").mock(return_value=httpx.Response(403, text="nope"))
            client = _make_client()
            with pytest.raises(GitHubAuthError) as exc_info:
                await client.create_release("acme", "tool", {"tag_name": "v1.0.0"})
            assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_not_found_error(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/releases/tags/v9.9.9").mock(
                return_value=httpx.Response(404, json={"message": "Not Found"})
            )
            client = _make_client()
            with pytest.raises(GitHubNotFoundError):
                await client.get_release_by_tag("acme", "tool", "v9.9.9")

    @pytest.mark.asyncio
    async def test_validation_error(self):
        async with respx.mock() as router:
            router.post(f"{REPO}/git/refs").mock(
                return_value=httpx.Response(422, json={"message": "Reference already exists"})
            )
            client = _make_client()
            with pytest.raises(GitHubApiError) as exc_info:
                await client.create_ref("acme", "tool", "feature", "abc")
            assert exc_info.value.status_code == 422
            assert "already exists" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_html_response_error(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/git/commits/abc").mock(
                return_value=httpx.Response(
                    200,
                    text="<html><body>Login</body></html>",
                    headers={"content-type": "text/html"},
                )
            )
            client = _make_client()
            with pytest.raises(GitHubApiError, match="HTML"):
                await client.get_commit("acme", "tool", "abc")

    @pytest.mark.asyncio
    async def test_invalid_json_error(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/git/commits/abc").mock(
                return_value=httpx.Response(
                    200, text="{not json", headers={"content-type": "application/json"}
                )
            )
            client = _make_client()
            with pytest.raises(GitHubApiError, match="JSON parse error"):
                await client.get_commit("acme", "tool", "abc")

    @pytest.mark.asyncio
    async def test_empty_response(self):
        async with respx.mock() as router:
            router.post(f"{REPO}/issues/3/labels").mock(return_value=httpx.Response(204))
            client = _make_client()
            assert await client.add_labels("acme", "tool", 3, ["brew"]) is None

    @pytest.mark.asyncio
    async def test_connect_error_is_transport_error(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/releases/tags/v1.0.0").mock(
                side_effect=httpx.ConnectError("connection refused")
            )
            client = _make_client()
            with pytest.raises(GitHubTransportError, match="connection refused") as exc_info:
                await client.get_release_by_tag("acme", "tool", "v1.0.0")
            assert exc_info.value.method == "GET"
            assert isinstance(exc_info.value, GitHubError)
            assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self):
        async with respx.mock() as router:
            router.post(f"{REPO}/git/blobs").mock(side_effect=httpx.ReadTimeout("timed out"))
            client = _make_client()
            with pytest.raises(GitHubTransportError, match="POST"):
                await client.create_blob("acme", "tool", "aGk=")


class TestReleases:
    @pytest.mark.asyncio
    async def test_upload_goes_to_uploads_host(self):
        async with respx.mock() as router:
            route = router.post(f"{UPLOADS}/repos/acme/tool/releases/7/assets").mock(
                return_value=httpx.Response(201, json={"id": 1, "name": "a.tar.gz"})
            )
            client = _make_client()
            result = await client.upload_release_asset("acme", "tool", 7, "a.tar.gz", b"\x00\x01")
            assert result["name"] == "a.tar.gz"
            request = route.calls.last.request
            assert request.url.params["name"] == "a.tar.gz"
            assert request.headers["Content-Type"] == "application/octet-stream"
            assert request.content == b"\x00\x01"


class TestGitData:
    @pytest.mark.asyncio
    async def test_get_ref(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/git/refs/heads/main").mock(
                return_value=httpx.Response(
                    200, json={"ref": "refs/heads/main", "object": {"sha": "abc"}}
                )
            )
            client = _make_client()
            result = await client.get_ref("acme", "tool", "main")
            assert result["object"]["sha"] == "abc"

    @pytest.mark.asyncio
    async def test_get_ref_prefix_match_picks_exact(self):
        refs = [
            {"ref": "refs/heads/main-old", "object": {"sha": "old"}},
            {"ref": "refs/heads/main", "object": {"sha": "abc"}},
        ]
        async with respx.mock() as router:
            router.get(f"{REPO}/git/refs/heads/main").mock(
                return_value=httpx.Response(200, json=refs)
            )
            client = _make_client()
            result = await client.get_ref("acme", "tool", "main")
            assert result["object"]["sha"] == "abc"

    @pytest.mark.asyncio
    async def test_get_ref_prefix_match_without_exact(self):
        async with respx.mock() as router:
            router.get(f"{REPO}/git/refs/heads/main").mock(
                return_value=httpx.Response(200, json=[{"ref": "refs/heads/main-old"}])
            )
            client = _make_client()
            with pytest.raises(GitHubNotFoundError):
                await client.get_ref("acme", "tool", "main")

    @pytest.mark.asyncio
    async def test_update_ref(self):
        async with respx.mock() as router:
            route = router.patch(f"{REPO}/git/refs/heads/bump").mock(
                return_value=httpx.Response(
                    200, json={"ref": "refs/heads/bump", "object": {"sha": "new"}}
                )
            )
            client = _make_client()
            await client.update_ref("acme", "tool", "bump", "new")
            assert json.loads(route.calls.last.request.content) == {"sha": "new", "force": False}

    @pytest.mark.asyncio
    async def test_create_blob_is_base64(self):
        async with respx.mock() as router:
            route = router.post(f"{REPO}/git/blobs").mock(
                return_value=httpx.Response(201, json={"sha": "b1"})
            )
            client = _make_client()
            await client.create_blob("acme", "tool", "WA==")
            assert json.loads(route.calls.last.request.content) == {
                "content": "WA==",
                "encoding": "base64",
            }

    @pytest.mark.asyncio
    async def test_get_contents_passes_ref(self):
        async with respx.mock() as router:
            route = router.get(f"{REPO}/contents/Formula/tool.rb").mock(
                return_value=httpx.Response(200, json={"sha": "s", "path": "Formula/tool.rb"})
            )
            client = _make_client()
            await client.get_contents("acme", "tool", "Formula/tool.rb", "bump")
            assert route.calls.last.request.url.params["ref"] == "bump"
