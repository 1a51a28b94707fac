"""Per-target asset processing: locate, compress and checksum each planned binary."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .archive import compress, sha256_file
from .exceptions import MissingBinaryError
from .models.assets import Asset, MatrixEntry
from .target import Compression, target_triple

logger = logging.getLogger(__name__)


def _rebuild_hint(entry: MatrixEntry) -> str:
    if entry.is_prebuilt:
        return "Check the prebuilt path in the build configuration."
    if entry.arch is None or entry.os is None:
        return "Please run `cargo build --release` first."
    return f"Please run `cargo build --release --target {target_triple(entry.arch, entry.os)}`."


def check_binary(entry: MatrixEntry) -> Path:
    logger.debug("checking binary for %s at %s", entry.computed_name, entry.source)
    if not entry.source.is_file():
        raise MissingBinaryError(entry.source, _rebuild_hint(entry))
    return entry.source


def process_entry(
    entry: MatrixEntry,
    *,
    workdir: Path,
    compression: Compression = Compression.TAR_GZ,
    extra_files: Sequence[str] = (),
) -> MatrixEntry:
    """Compress the entry's binary into ``workdir/computed_name`` and attach the checksummed asset.

    The checksum covers the compressed artifact, which is what consumers download.
    The artifact is left on disk.
    """
    source = check_binary(entry)
    destination = workdir / entry.computed_name

    compress(
        source,
        destination,
        arcname=entry.binary,
        compression=compression,
        extra_files=extra_files,
        root=workdir,
    )
    checksum = sha256_file(destination)
    logger.debug("%s sha256=%s", entry.computed_name, checksum)

    entry.asset = Asset(name=entry.computed_name, path=destination, checksum=checksum)
    return entry


def process_matrix(
    matrix: list[MatrixEntry],
    *,
    workdir: Path,
    compression: Compression = Compression.TAR_GZ,
    extra_files: Sequence[str] = (),
) -> list[MatrixEntry]:
    """Process every entry in emission order."""
    for entry in matrix:
        logger.info("packaging %s", entry.computed_name)
        process_entry(entry, workdir=workdir, compression=compression, extra_files=extra_files)
    return matrix
