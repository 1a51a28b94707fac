"""Archive and checksum primitives."""

from __future__ import annotations

import glob
import hashlib
import logging
import os
import tarfile
from collections.abc import Callable, Sequence
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from .target import Compression

logger = logging.getLogger(__name__)

# (destination, [(source, arcname), ...])
Compressor = Callable[[Path, list[tuple[Path, str]]], None]


def _tar_gz(destination: Path, members: list[tuple[Path, str]]) -> None:
    with tarfile.open(destination, "w:gz") as tar:
        for src, arc in members:
            tar.add(src, arcname=arc, recursive=False)


def _zip(destination: Path, members: list[tuple[Path, str]]) -> None:
    with ZipFile(destination, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
        for src, arc in members:
            zf.write(src, arcname=arc)


_COMPRESSORS: dict[Compression, Compressor] = {
    Compression.TAR_GZ: _tar_gz,
    Compression.ZIP: _zip,
}


def _collect_extra(patterns: Sequence[str], root: Path) -> list[tuple[Path, str]]:
    """Expand glob patterns relative to *root* into (path, arcname) pairs."""
    out: list[tuple[Path, str]] = []
    for pattern in patterns:
        for match in sorted(glob.glob(pattern, root_dir=root, recursive=True)):
            path = root / match
            if path.is_file():
                logger.debug("archiving file: %s", match)
                out.append((path, Path(match).as_posix()))
            elif path.is_dir():
                logger.debug("archiving dir: %s", match)
                for dirpath, _, filenames in os.walk(path):
                    for filename in sorted(filenames):
                        child = Path(dirpath) / filename
                        out.append((child, child.relative_to(root).as_posix()))
    return out


def compress(
    source: Path,
    destination: Path,
    *,
    arcname: str,
    compression: Compression = Compression.TAR_GZ,
    extra_files: Sequence[str] = (),
    root: Path | None = None,
) -> Path:
    """Archive *source* (stored as *arcname*) plus any *extra_files* globs into *destination*.

    Globs are resolved against *root*, defaulting to the current directory.
    Returns the destination path.
    """
    compressor = _COMPRESSORS[compression]
    members = [(source, arcname)]
    members += _collect_extra(extra_files, root or Path.cwd())

    logger.debug(
        "compressing %s as %s into %s (%s)", source, arcname, destination, compression.value
    )
    destination.parent.mkdir(parents=True, exist_ok=True)
    compressor(destination, members)
    return destination


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()
