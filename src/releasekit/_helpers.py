"""Shared helper functions."""

from __future__ import annotations

import functools
from importlib import resources

FORMULA_TEMPLATE = "formula.rb.tmpl"


@functools.cache
def formula_template() -> str:
    """The bundled Homebrew formula template."""
    template = resources.files("releasekit") / "resources" / FORMULA_TEMPLATE
    return template.read_text(encoding="utf-8")


def _indent(text: str, width: int) -> str:
    """Indent every non-empty line of *text* by *width* spaces, dropping surrounding blank lines."""
    pad = " " * width
    return "\n".join(pad + line if line.strip() else "" for line in text.strip("\n").splitlines())
