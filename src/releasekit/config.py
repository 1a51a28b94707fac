"""releasekit configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models.config import ProjectConfig

DEFAULT_CONFIG_FILE = "releasekit.yaml"


@dataclass
class GitHubConfig:
    """Credentials and transport settings for the GitHub API, loaded from environment variables."""

    token: str = ""
    api_url: str = "https://api.github.com"
    upload_url: str = "https://uploads.github.com"
    timeout: int = 30
    ssl_verify: bool = True

    @classmethod
    def from_env(cls) -> GitHubConfig:
        token = (
            os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN") or os.getenv("GITHUB_PAT", "")
        )
        api_url = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
        upload_url = os.getenv("GITHUB_UPLOAD_URL", "https://uploads.github.com").rstrip("/")
        timeout = int(os.getenv("GITHUB_TIMEOUT", "30"))
        ssl_verify = os.getenv("GITHUB_SSL_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )

        return cls(
            token=token,
            api_url=api_url,
            upload_url=upload_url,
            timeout=timeout,
            ssl_verify=ssl_verify,
        )

    def validate(self) -> None:
        if not self.token:
            msg = "GitHub token is required. Set one of: GITHUB_TOKEN, GH_TOKEN, or GITHUB_PAT"
            raise ValueError(msg)
        if not self.api_url:
            msg = "GITHUB_API_URL must not be empty"
            raise ValueError(msg)


def load_project_config(path: str | Path = DEFAULT_CONFIG_FILE) -> ProjectConfig:
    """Read and validate the YAML project configuration at *path*."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"Config file not found: {path}"
        raise ConfigError(msg) from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise ConfigError(msg) from e

    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping at the top level"
        raise ConfigError(msg)

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) + f" ({err['msg']})" for err in e.errors()
        )
        msg = f"Invalid config in {path}: {fields}"
        raise ConfigError(msg) from e
