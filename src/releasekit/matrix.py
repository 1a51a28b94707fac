"""Target matrix planning."""

from __future__ import annotations

import logging
from pathlib import Path

from .exceptions import MatrixError
from .models.assets import MatrixEntry
from .models.config import BuildConfig
from .target import Arch, Compression, Os, Tag, target_triple

logger = logging.getLogger(__name__)

TARGET_DIR = "target"


def build_output_path(
    binary: str, arch: Arch | None = None, os: Os | None = None, *, root: Path | None = None
) -> Path:
    """Where the native build tool leaves the binary for a target."""
    base = (root or Path(".")) / TARGET_DIR
    if arch is None or os is None:
        return base / "release" / binary
    return base / target_triple(arch, os) / "release" / binary


def entry_name(
    binary: str,
    tag: Tag,
    compression: Compression,
    arch: Arch | None = None,
    os: Os | None = None,
    *,
    prebuilt: bool = False,
) -> str:
    if arch is None or os is None:
        return f"{binary}_{tag.name}.{compression.extension}"
    sep = "-" if prebuilt else "_"
    stem = sep.join([binary, tag.name, arch.token, os.token])
    return f"{stem}.{compression.extension}"


def build_matrix(
    build: BuildConfig,
    tag: Tag,
    compression: Compression = Compression.TAR_GZ,
    *,
    root: Path | None = None,
) -> list[MatrixEntry]:
    """Expand a build configuration into the ordered list of artifacts to produce.

    - prebuilt items, in input order (directories are skipped)
    - otherwise the arch x os cross product, arch-major, when both lists are non-empty
    - otherwise a single entry without arch/os
    """
    root = root or Path(".")
    matrix: list[MatrixEntry] = []

    if build.has_prebuilt:
        logger.debug("planning prebuilt matrix")
        for item in build.prebuilt:
            path = item.path if item.path.is_absolute() else root / item.path
            if path.is_dir():
                logger.info("prebuilt path %s is a directory, ignoring", path)
                continue
            matrix.append(
                MatrixEntry(
                    computed_name=entry_name(
                        path.name, tag, compression, item.arch, item.os, prebuilt=True
                    ),
                    binary=path.name,
                    source=path,
                    arch=item.arch,
                    os=item.os,
                    is_prebuilt=True,
                )
            )
    elif build.is_multi_target:
        logger.debug("planning %d x %d target matrix", len(build.arch), len(build.os))
        for arch in build.arch:
            for os in build.os:
                matrix.append(
                    MatrixEntry(
                        computed_name=entry_name(build.binary, tag, compression, arch, os),
                        binary=build.binary,
                        source=build_output_path(build.binary, arch, os, root=root),
                        arch=arch,
                        os=os,
                    )
                )
    else:
        if build.arch or build.os:
            logger.debug("only one of arch/os is set, falling back to single target")
        matrix.append(
            MatrixEntry(
                computed_name=entry_name(build.binary, tag, compression),
                binary=build.binary,
                source=build_output_path(build.binary, root=root),
            )
        )

    _check_unique(matrix)
    return matrix


def _check_unique(matrix: list[MatrixEntry]) -> None:
    seen: set[str] = set()
    for entry in matrix:
        if entry.computed_name in seen:
            msg = f"Duplicate artifact name in matrix: {entry.computed_name}"
            raise MatrixError(msg)
        seen.add(entry.computed_name)
