"""Build, package and publish release binaries to GitHub, with an optional Homebrew formula."""

import asyncio
import json
import logging
import os
from pathlib import Path

import click
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


async def _release(
    config_path: Path, workdir: Path, skip_build: bool, skip_formula: bool
) -> list[dict]:
    from .build import build_targets
    from .client import GitHubClient
    from .config import GitHubConfig, load_project_config
    from .pipeline import plan, publish_formula, release_assets
    from .vcs import current_tag

    project = load_project_config(config_path)
    github = GitHubConfig.from_env()
    github.validate()

    tag = current_tag(workdir)
    matrix = plan(project, tag, workdir=workdir)
    if skip_build:
        logger.info("skipping build")
    else:
        await asyncio.to_thread(build_targets, matrix, root=workdir)

    client = GitHubClient(github)
    try:
        outcome = await release_assets(client, project, tag, workdir=workdir, matrix=matrix)
        if project.brew is None or skip_formula:
            logger.info("no formula to publish")
        else:
            result = await publish_formula(client, project.brew, outcome.packages, tag)
            if result.pull_request is not None:
                logger.info("formula pull request: %s", result.pull_request.html_url)
    finally:
        await client.close()

    return [package.to_dict() for package in outcome.packages]


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default="releasekit.yaml",
    show_default=True,
    help="Project configuration file",
)
@click.option(
    "--workdir",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    default=".",
    help="Project root holding the build output",
)
@click.option("--skip-build", is_flag=True, help="Package existing build output without building")
@click.option("--skip-formula", is_flag=True, help="Do not publish the Homebrew formula")
@click.option("--github-token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Logging verbosity",
)
def main(
    config_path: Path,
    workdir: Path,
    skip_build: bool,
    skip_formula: bool,
    github_token: str | None,
    log_level: str,
) -> None:
    """Release the current tag's binaries to GitHub."""
    load_dotenv()
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if github_token:
        os.environ["GITHUB_TOKEN"] = github_token

    from .exceptions import ReleaseKitError

    try:
        packages = asyncio.run(_release(config_path, workdir, skip_build, skip_formula))
    except ReleaseKitError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(packages, indent=2))


if __name__ == "__main__":
    main()
