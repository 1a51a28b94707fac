"""Planned, processed and uploaded release artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..exceptions import MissingChecksumError
from ..target import Arch, Os

SIDECAR_SUFFIX = ".sha256"


@dataclass
class Asset:
    """A local compressed file ready for upload."""

    name: str
    path: Path
    checksum: str | None = None

    def sidecar(self) -> tuple[str, bytes]:
        """Return the checksum sidecar as ``(file name, content)``.

        The content uses the ``sha256sum`` line format: ``{digest}  {name}``.
        """
        if not self.checksum:
            raise MissingChecksumError(self.name)
        return f"{self.name}{SIDECAR_SUFFIX}", f"{self.checksum}  {self.name}".encode()


@dataclass
class MatrixEntry:
    """One planned artifact.

    ``computed_name`` is unique within a matrix and is the key used to match
    upload results back to their entry. ``arch``/``os`` are both ``None`` in
    single-target mode.
    """

    computed_name: str
    binary: str
    source: Path
    arch: Arch | None = None
    os: Os | None = None
    is_prebuilt: bool = False
    asset: Asset | None = None


@dataclass(frozen=True)
class UploadedAsset:
    name: str
    url: str
    checksum: str


@dataclass(frozen=True)
class Package:
    """Upload-independent description of a released artifact, consumed by the formula renderer."""

    name: str
    url: str
    checksum: str
    os: Os | None = None
    arch: Arch | None = None
    prebuilt: bool = False

    def __post_init__(self) -> None:
        if (self.os is None) != (self.arch is None):
            msg = f"Package {self.name} must carry both os and arch, or neither"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "os": self.os.token if self.os else None,
            "arch": self.arch.token if self.arch else None,
            "url": self.url,
            "checksum": self.checksum,
            "prebuilt": self.prebuilt,
        }
