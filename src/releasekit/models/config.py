"""Project configuration models, validated from ``releasekit.yaml``."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from ..target import Arch, Compression, Os

ArchField = Annotated[Arch, BeforeValidator(Arch.parse)]
OsField = Annotated[Os, BeforeValidator(Os.parse)]
CompressionField = Annotated[Compression, BeforeValidator(Compression.parse)]


class UploadPolicy(Enum):
    """What the uploader does when some asset uploads fail."""

    STRICT = "strict"
    LENIENT = "lenient"


class Symbol(Enum):
    BUILD = "build"
    TEST = "test"


def _one_or_many(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, (str, Symbol)):
        return [value]
    return value


class ConfigModel(BaseModel):
    model_config = {"extra": "forbid"}


# ── build ─────────────────────────────────────────────────────────


class PrebuiltItem(ConfigModel):
    path: Path
    arch: ArchField
    os: OsField


class BuildConfig(ConfigModel):
    binary: str = Field(min_length=1)
    arch: list[ArchField] = []
    os: list[OsField] = []
    prebuilt: list[PrebuiltItem] = []

    @field_validator("arch", "os")
    @classmethod
    def _dedupe(cls, value: list) -> list:
        return list(dict.fromkeys(value))

    @property
    def has_prebuilt(self) -> bool:
        return bool(self.prebuilt)

    @property
    def is_multi_target(self) -> bool:
        return bool(self.arch) and bool(self.os)


# ── release ───────────────────────────────────────────────────────


class ArchiveConfig(ConfigModel):
    compression: CompressionField = Compression.TAR_GZ
    files: list[str] = []


class ReleaseConfig(ConfigModel):
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    target_branch: str = "main"
    prerelease: bool = False
    draft: bool = False
    name: str | None = None
    body: str = ""
    archive: ArchiveConfig = ArchiveConfig()
    upload_policy: UploadPolicy = UploadPolicy.STRICT


# ── brew ──────────────────────────────────────────────────────────


class CommitterConfig(ConfigModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)


class PullRequestConfig(ConfigModel):
    title: str = "Bump formula version"
    body: str = ""
    labels: list[str] = []
    assignees: list[str] = []
    draft: bool = False
    base: str = "main"
    head: str = "bumps-formula-version"


class RepositoryConfig(ConfigModel):
    owner: str = Field(min_length=1)
    name: str = Field(min_length=1)


class HeadConfig(ConfigModel):
    url: str
    branch: str = "main"


class DependencyConfig(ConfigModel):
    name: str = Field(min_length=1)
    symbol: Annotated[list[Symbol], BeforeValidator(_one_or_many)] = []


class BrewConfig(ConfigModel):
    name: str = Field(min_length=1)
    description: str = ""
    homepage: str = ""
    install: str = Field(min_length=1)
    license: str = ""
    head: HeadConfig | None = None
    test: str = ""
    caveats: str = ""
    commit_message: str = "update formula"
    commit_author: CommitterConfig | None = None
    pull_request: PullRequestConfig | None = None
    branch: str = "main"
    path: str | None = None
    repository: RepositoryConfig
    dependencies: list[DependencyConfig] = []
    with_version: bool = False

    @property
    def formula_path(self) -> str:
        return self.path or f"{self.name.lower()}.rb"


class ProjectConfig(ConfigModel):
    build: BuildConfig
    release: ReleaseConfig
    brew: BrewConfig | None = None
