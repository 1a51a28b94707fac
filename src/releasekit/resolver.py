"""Idempotent release resolution: fetch by tag first, create on miss."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from .client import GitHubClient
from .exceptions import GitHubError, ReleaseResolutionError
from .models.config import ReleaseConfig
from .models.releases import ReleaseResponse
from .target import Compression, Tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Release:
    """The remote release record for a version tag."""

    id: int
    owner: str
    repo: str
    tag: Tag
    name: str
    tarball_url: str = ""
    zipball_url: str = ""
    upload_url: str = ""
    html_url: str = ""

    @classmethod
    def from_response(cls, data: ReleaseResponse, owner: str, repo: str) -> Release:
        return cls(
            id=data.id,
            owner=owner,
            repo=repo,
            tag=Tag(data.tag_name),
            name=data.name or data.tag_name,
            tarball_url=data.tarball_url or "",
            zipball_url=data.zipball_url or "",
            upload_url=data.upload_url,
            html_url=data.html_url,
        )

    def archive_url(self, compression: Compression) -> str:
        """Source archive URL matching the given compression."""
        if compression is Compression.TAR_GZ:
            return self.tarball_url
        return self.zipball_url


@dataclass(frozen=True)
class ReleaseRequest:
    """Body of a release creation call."""

    tag_name: str
    target_commitish: str
    name: str
    body: str = ""
    draft: bool = False
    prerelease: bool = False

    @classmethod
    def from_config(cls, config: ReleaseConfig, tag: Tag) -> ReleaseRequest:
        return cls(
            tag_name=tag.name,
            target_commitish=config.target_branch,
            name=config.name or tag.name,
            body=config.body,
            draft=config.draft,
            prerelease=config.prerelease,
        )


async def fetch_release(client: GitHubClient, owner: str, repo: str, tag: Tag) -> Release:
    data = await client.get_release_by_tag(owner, repo, tag.name)
    return Release.from_response(ReleaseResponse.model_validate(data), owner, repo)


async def create_release(
    client: GitHubClient, owner: str, repo: str, request: ReleaseRequest
) -> Release:
    data = await client.create_release(owner, repo, asdict(request))
    return Release.from_response(ReleaseResponse.model_validate(data), owner, repo)


async def resolve_release(client: GitHubClient, config: ReleaseConfig, tag: Tag) -> Release:
    """Return the release for *tag*, creating it if the lookup fails.

    Lookup and creation are not transactional on the remote side. Two runs
    creating the same release at once are not guarded against.
    """
    try:
        release = await fetch_release(client, config.owner, config.repo, tag)
    except GitHubError as fetch_error:
        logger.debug("no release found for %s (%s), creating one", tag, fetch_error)
        try:
            release = await create_release(
                client, config.owner, config.repo, ReleaseRequest.from_config(config, tag)
            )
        except GitHubError as create_error:
            raise ReleaseResolutionError(tag.name, fetch_error, create_error) from create_error
        logger.info("created release %s (id=%s)", release.name, release.id)
        return release

    logger.info("found release %s (id=%s)", release.name, release.id)
    return release
