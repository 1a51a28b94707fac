"""releasekit exceptions."""

from __future__ import annotations

from pathlib import Path


class ReleaseKitError(Exception):
    """Base exception for release operations."""


# ── Hosting API ───────────────────────────────────────────────────


class GitHubError(ReleaseKitError):
    """Base exception for GitHub API operations."""


class GitHubTransportError(GitHubError):
    """Raised when a request gets no HTTP response (connect failure, timeout)."""

    def __init__(self, method: str, url: str, reason: str) -> None:
        self.method = method
        self.url = url
        self.reason = reason
        super().__init__(f"GitHub request {method} {url} failed: {reason}")


class GitHubApiError(GitHubError):
    """Raised when the GitHub API returns a non-success response."""

    def __init__(self, status_code: int, status_text: str, body: str = "") -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(f"GitHub API Error {status_code} {status_text}: {body}")


class GitHubAuthError(GitHubApiError):
    """Raised on 401/403 authentication failures."""

    def __init__(self, status_code: int, body: str = "") -> None:
        status_text = "Unauthorized" if status_code == 401 else "Forbidden"
        super().__init__(status_code, status_text, body)


class GitHubNotFoundError(GitHubApiError):
    """Raised on 404 responses."""

    def __init__(self, body: str = "") -> None:
        super().__init__(404, "Not Found", body)


# ── Preconditions ─────────────────────────────────────────────────


class ConfigError(ReleaseKitError):
    """Raised when the project configuration cannot be loaded or validated."""


class UnknownTargetError(ReleaseKitError, ValueError):
    """Raised when an arch/os/compression token is not recognized."""

    def __init__(self, kind: str, token: str, accepted: list[str]) -> None:
        self.kind = kind
        self.token = token
        super().__init__(f"Unknown {kind} {token!r}; expected one of: {', '.join(accepted)}")


class MissingBinaryError(ReleaseKitError):
    """Raised when the build output for a target is not where it should be."""

    def __init__(self, path: Path, hint: str) -> None:
        self.path = path
        self.hint = hint
        super().__init__(f"No binary found at {path}. {hint}")


class NoTagsError(ReleaseKitError):
    """Raised when the repository has no semantic-version tag."""


class BuildError(ReleaseKitError):
    """Raised when the native build tool fails."""


# ── Pipeline stages ───────────────────────────────────────────────


class MatrixError(ReleaseKitError):
    """Raised when a planned matrix breaks the unique-name invariant."""


class MissingChecksumError(ReleaseKitError):
    """Raised when an asset reaches the uploader without a checksum."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Asset {name} has no checksum; cannot produce its sidecar")


class ReleaseResolutionError(ReleaseKitError):
    """Raised when a release can neither be fetched nor created."""

    def __init__(self, tag: str, fetch_error: Exception, create_error: Exception) -> None:
        self.tag = tag
        self.fetch_error = fetch_error
        self.create_error = create_error
        super().__init__(
            f"Cannot resolve release for tag {tag}: "
            f"fetch failed ({fetch_error}); create failed ({create_error})"
        )


class AssetUploadError(ReleaseKitError):
    """Raised when one or more asset uploads fail under the strict policy."""

    def __init__(self, failures: dict[str, Exception]) -> None:
        self.failures = failures
        detail = "; ".join(f"{name}: {err}" for name, err in failures.items())
        super().__init__(f"{len(failures)} asset upload(s) failed: {detail}")


class EnrichmentError(ReleaseKitError):
    """Raised when uploaded assets and planned entries cannot be matched by name."""


class ContentSyncError(ReleaseKitError):
    """Raised when a step of the file upsert protocol fails."""

    def __init__(self, step: str, cause: Exception) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"Content sync failed at {step}: {cause}")


class StageError(ReleaseKitError):
    """Wraps a failure with the name of the pipeline stage it happened in."""

    def __init__(self, stage: str, cause: Exception) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"[{stage}] {cause}")
