"""End-to-end release flow: plan, package, resolve, upload, enrich, then publish the formula."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from .client import GitHubClient
from .exceptions import StageError
from .formula import render_formula
from .matrix import build_matrix
from .models.assets import MatrixEntry, Package
from .models.config import BrewConfig, ProjectConfig
from .processor import process_matrix
from .resolver import Release, resolve_release
from .sync import Committer, ContentSynchronizer, PullRequestSpec, SyncResult, UpsertRequest
from .target import Tag
from .uploader import enrich, upload_assets

logger = logging.getLogger(__name__)


@dataclass
class ReleaseOutcome:
    release: Release
    packages: list[Package]
    failed: dict[str, Exception] = field(default_factory=dict)


@contextmanager
def stage(name: str) -> Iterator[None]:
    """Tag any failure inside the block with the stage name."""
    logger.info("stage: %s", name)
    try:
        yield
    except StageError:
        raise
    except Exception as e:
        raise StageError(name, e) from e


def plan(project: ProjectConfig, tag: Tag, *, workdir: Path = Path(".")) -> list[MatrixEntry]:
    with stage("matrix"):
        return build_matrix(
            project.build, tag, project.release.archive.compression, root=workdir
        )


async def release_assets(
    client: GitHubClient,
    project: ProjectConfig,
    tag: Tag,
    *,
    workdir: Path = Path("."),
    matrix: list[MatrixEntry] | None = None,
) -> ReleaseOutcome:
    """Package every planned artifact and attach it to the release for *tag*.

    Every artifact is compressed and checksummed (in a worker thread) before
    the release is looked up, so a missing binary never touches the remote.
    """
    config = project.release
    if matrix is None:
        matrix = plan(project, tag, workdir=workdir)

    with stage("asset processing"):
        processed: list[MatrixEntry] = await asyncio.to_thread(
            process_matrix,
            matrix,
            workdir=workdir,
            compression=config.archive.compression,
            extra_files=config.archive.files,
        )

    with stage("release resolution"):
        release = await resolve_release(client, config, tag)

    with stage("asset upload"):
        result = await upload_assets(client, release, processed, config.upload_policy)

    # entries whose upload failed under the lenient policy are left out
    kept = [entry for entry in processed if entry.computed_name not in result.failed]
    with stage("enrichment"):
        packages = enrich(kept, result.uploaded)

    logger.info("released %d packages for %s", len(packages), tag)
    return ReleaseOutcome(release=release, packages=packages, failed=result.failed)


def formula_request(brew: BrewConfig, content: str) -> UpsertRequest:
    """Build the upsert for a rendered formula.

    With a pull request configured the formula is committed to its head branch
    and a pull request into its base is opened. Otherwise it is committed
    straight to ``brew.branch``.
    """
    committer = None
    if brew.commit_author is not None:
        committer = Committer(name=brew.commit_author.name, email=brew.commit_author.email)

    pr = brew.pull_request
    if pr is None:
        return UpsertRequest(
            path=brew.formula_path,
            content=content,
            branch=brew.branch,
            base=brew.branch,
            message=brew.commit_message,
            committer=committer,
        )
    return UpsertRequest(
        path=brew.formula_path,
        content=content,
        branch=pr.head,
        base=pr.base,
        message=brew.commit_message,
        committer=committer,
        pull_request=PullRequestSpec(
            title=pr.title,
            body=pr.body,
            draft=pr.draft,
            assignees=list(pr.assignees),
            labels=list(pr.labels),
        ),
    )


async def publish_formula(
    client: GitHubClient, brew: BrewConfig, packages: list[Package], tag: Tag
) -> SyncResult:
    with stage("formula rendering"):
        content = render_formula(brew, packages, tag)

    request = formula_request(brew, content)
    synchronizer = ContentSynchronizer(client, brew.repository.owner, brew.repository.name)
    with stage("content sync"):
        return await synchronizer.upsert(request)
