"""Target platforms, compression formats and version tags.

Every string form of an arch or os goes through the tables below, both when
parsing config input and when generating artifact names, so names stay
byte-stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .exceptions import UnknownTargetError


class Arch(Enum):
    AMD64 = "amd64"
    ARM = "arm"
    ARM64 = "arm64"

    @classmethod
    def parse(cls, value: str | Arch) -> Arch:
        if isinstance(value, cls):
            return value
        try:
            return _ARCH_ALIASES[str(value).strip().lower()]
        except KeyError:
            raise UnknownTargetError("arch", str(value), sorted(_ARCH_ALIASES)) from None

    @property
    def token(self) -> str:
        return _ARCH_TOKENS[self]


class Os(Enum):
    DARWIN = "darwin"
    LINUX = "linux"

    @classmethod
    def parse(cls, value: str | Os) -> Os:
        if isinstance(value, cls):
            return value
        try:
            return _OS_ALIASES[str(value).strip().lower()]
        except KeyError:
            raise UnknownTargetError("os", str(value), sorted(_OS_ALIASES)) from None

    @property
    def token(self) -> str:
        return _OS_TOKENS[self]


class Compression(Enum):
    TAR_GZ = "tar.gz"
    ZIP = "zip"

    @classmethod
    def parse(cls, value: str | Compression) -> Compression:
        if isinstance(value, cls):
            return value
        try:
            return _COMPRESSION_ALIASES[str(value).strip().lower()]
        except KeyError:
            raise UnknownTargetError(
                "compression", str(value), sorted(_COMPRESSION_ALIASES)
            ) from None

    @property
    def extension(self) -> str:
        return self.value


# ── Conversion tables ─────────────────────────────────────────────

_ARCH_ALIASES: dict[str, Arch] = {
    "amd64": Arch.AMD64,
    "x86_64": Arch.AMD64,
    "arm": Arch.ARM,
    "arm64": Arch.ARM64,
    "aarch64": Arch.ARM64,
}

_ARCH_TOKENS: dict[Arch, str] = {
    Arch.AMD64: "amd64",
    Arch.ARM: "arm",
    Arch.ARM64: "arm64",
}

_OS_ALIASES: dict[str, Os] = {
    "darwin": Os.DARWIN,
    "apple-darwin": Os.DARWIN,
    "macos": Os.DARWIN,
    "linux": Os.LINUX,
    "unknown-linux-gnu": Os.LINUX,
}

_OS_TOKENS: dict[Os, str] = {
    Os.DARWIN: "darwin",
    Os.LINUX: "linux",
}

_COMPRESSION_ALIASES: dict[str, Compression] = {
    "tar.gz": Compression.TAR_GZ,
    "targz": Compression.TAR_GZ,
    "tgz": Compression.TAR_GZ,
    "zip": Compression.ZIP,
}

# cargo target triples, used to locate per-target build output
_TRIPLE_ARCH: dict[Arch, str] = {
    Arch.AMD64: "x86_64",
    Arch.ARM: "arm",
    Arch.ARM64: "aarch64",
}

_TRIPLE_OS: dict[Os, str] = {
    Os.DARWIN: "apple-darwin",
    Os.LINUX: "unknown-linux-gnu",
}

_TRIPLE_OVERRIDES: dict[tuple[Arch, Os], str] = {
    (Arch.ARM, Os.LINUX): "arm-unknown-linux-gnueabihf",
}


def target_triple(arch: Arch, os: Os) -> str:
    """Return the cargo target triple for an (arch, os) pair."""
    override = _TRIPLE_OVERRIDES.get((arch, os))
    if override:
        return override
    return f"{_TRIPLE_ARCH[arch]}-{_TRIPLE_OS[os]}"


@dataclass(frozen=True)
class Tag:
    """A version tag, stored exactly as it appears in version control."""

    name: str

    @property
    def version(self) -> str:
        """The tag without its leading ``v``."""
        return self.name[1:] if self.name.startswith("v") else self.name

    def __str__(self) -> str:
        return self.name
