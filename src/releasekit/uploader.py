"""Concurrent asset upload and enrichment of planned entries with their download URLs."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .client import GitHubClient
from .exceptions import AssetUploadError, EnrichmentError, MissingChecksumError
from .models.assets import Asset, MatrixEntry, Package, UploadedAsset
from .models.config import UploadPolicy
from .models.releases import ReleaseAsset
from .resolver import Release

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    uploaded: list[UploadedAsset] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)


async def upload_asset(client: GitHubClient, release: Release, asset: Asset) -> UploadedAsset:
    """Upload one artifact and its checksum sidecar, concurrently."""
    sidecar_name, sidecar_body = asset.sidecar()
    content = await asyncio.to_thread(asset.path.read_bytes)

    artifact, _ = await asyncio.gather(
        client.upload_release_asset(release.owner, release.repo, release.id, asset.name, content),
        client.upload_release_asset(
            release.owner, release.repo, release.id, sidecar_name, sidecar_body
        ),
    )
    uploaded = ReleaseAsset.model_validate(artifact)
    logger.debug("uploaded %s -> %s", asset.name, uploaded.browser_download_url)
    return UploadedAsset(
        name=asset.name,
        url=uploaded.browser_download_url,
        checksum=asset.checksum or "",
    )


async def upload_assets(
    client: GitHubClient,
    release: Release,
    entries: list[MatrixEntry],
    policy: UploadPolicy = UploadPolicy.STRICT,
) -> UploadResult:
    """Upload every processed entry's asset to *release*.

    All uploads are issued at once and awaited together. Under
    ``UploadPolicy.STRICT`` any failure raises ``AssetUploadError`` naming every
    failed asset. Under ``UploadPolicy.LENIENT`` failures are logged and
    returned in ``UploadResult.failed``.
    """
    assets: list[Asset] = []
    for entry in entries:
        if entry.asset is None or not entry.asset.checksum:
            raise MissingChecksumError(entry.computed_name)
        assets.append(entry.asset)

    results = await asyncio.gather(
        *(upload_asset(client, release, asset) for asset in assets),
        return_exceptions=True,
    )

    result = UploadResult()
    for asset, outcome in zip(assets, results):
        if isinstance(outcome, Exception):
            result.failed[asset.name] = outcome
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.uploaded.append(outcome)

    if result.failed:
        if policy is UploadPolicy.STRICT:
            raise AssetUploadError(result.failed)
        for name, error in result.failed.items():
            logger.warning("upload of %s failed, leaving it out of the release: %s", name, error)

    logger.info("uploaded %d of %d assets", len(result.uploaded), len(assets))
    return result


def enrich(entries: list[MatrixEntry], uploaded: list[UploadedAsset]) -> list[Package]:
    """Join uploaded assets back to their planned entries by exact name.

    Every entry must have exactly one uploaded asset and vice versa.
    """
    by_name: dict[str, UploadedAsset] = {}
    for asset in uploaded:
        if asset.name in by_name:
            msg = f"Asset {asset.name} was uploaded more than once"
            raise EnrichmentError(msg)
        by_name[asset.name] = asset

    packages: list[Package] = []
    for entry in entries:
        asset = by_name.pop(entry.computed_name, None)
        if asset is None:
            msg = f"No uploaded asset matches planned entry {entry.computed_name}"
            raise EnrichmentError(msg)
        packages.append(
            Package(
                name=asset.name,
                url=asset.url,
                checksum=asset.checksum,
                os=entry.os,
                arch=entry.arch,
                prebuilt=entry.is_prebuilt,
            )
        )

    if by_name:
        msg = f"Uploaded assets with no planned entry: {', '.join(sorted(by_name))}"
        raise EnrichmentError(msg)
    return packages
