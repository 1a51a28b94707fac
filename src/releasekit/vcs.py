"""Current version lookup from the repository's tags."""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import NoTagsError
from .target import Tag

logger = logging.getLogger(__name__)

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # numeric identifiers sort before alphanumeric ones
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    @property
    def sort_key(self) -> tuple:
        if not self.prerelease:
            # a release sorts above any of its pre-releases
            pre: tuple = (1,)
        else:
            pre = (0, tuple(_identifier_key(i) for i in self.prerelease))
        return (self.major, self.minor, self.patch, pre)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{'.'.join(self.prerelease)}"
        return base


def parse_version(tag: str) -> SemVer | None:
    """Parse ``1.2.3``, ``v1.2.3-beta.1`` and the like. Returns ``None`` for anything else."""
    m = _SEMVER_RE.match(tag.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease)


def list_tags(repo_path: Path | str = ".") -> list[str]:
    try:
        proc = subprocess.run(
            ["git", "tag", "--list"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        msg = f"Cannot read tags in {repo_path}: git is not installed"
        raise NoTagsError(msg) from e
    except subprocess.CalledProcessError as e:
        msg = f"Cannot read tags in {repo_path}: {e.stderr.strip() or e}"
        raise NoTagsError(msg) from e
    return [line.strip() for line in proc.stdout.splitlines() if line.strip()]


def latest_tag(tags: list[str]) -> Tag:
    """Pick the highest semantic version among *tags*, ignoring the rest."""
    versions = [(parse_version(name), name) for name in tags]
    candidates = [(version, name) for version, name in versions if version is not None]
    if not candidates:
        msg = "No tags found"
        raise NoTagsError(msg)
    _, name = max(candidates, key=lambda pair: pair[0].sort_key)
    return Tag(name)


def current_tag(repo_path: Path | str = ".") -> Tag:
    tag = latest_tag(list_tags(repo_path))
    logger.info("current version tag: %s", tag)
    return tag
