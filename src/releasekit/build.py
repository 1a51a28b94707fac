"""Native build invocation through cargo."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from .exceptions import BuildError
from .models.assets import MatrixEntry
from .target import target_triple

logger = logging.getLogger(__name__)

CARGO = "cargo"


def build_command(entry: MatrixEntry) -> list[str]:
    cmd = [CARGO, "build", "--release"]
    if entry.arch is not None and entry.os is not None:
        cmd += ["--target", target_triple(entry.arch, entry.os)]
    return cmd


def _describe(entry: MatrixEntry) -> str:
    if entry.arch is None or entry.os is None:
        return "host target"
    return target_triple(entry.arch, entry.os)


def build_targets(matrix: list[MatrixEntry], *, root: Path | str = ".") -> None:
    """Build every entry of *matrix* in order, stopping at the first failure.

    Prebuilt entries are skipped. Build output goes straight to the terminal.
    """
    entries = [entry for entry in matrix if not entry.is_prebuilt]
    if not entries:
        logger.info("nothing to build")
        return

    if shutil.which(CARGO) is None:
        msg = "cargo not found on PATH"
        raise BuildError(msg)

    for entry in entries:
        target = _describe(entry)
        cmd = build_command(entry)
        logger.info("building %s: %s", target, " ".join(cmd))
        try:
            subprocess.run(cmd, cwd=str(root), check=True)
        except subprocess.CalledProcessError as e:
            msg = f"Build failed for {target} (exit {e.returncode})"
            raise BuildError(msg) from e
        logger.info("build successful for %s", target)
