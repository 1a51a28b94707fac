"""Homebrew formula rendering."""

from __future__ import annotations

import logging
import re
from string import Template

from ._helpers import _indent, formula_template
from .models.assets import Package
from .models.config import BrewConfig, DependencyConfig
from .target import Arch, Os, Tag

logger = logging.getLogger(__name__)

_OS_BLOCKS: dict[Os, str] = {
    Os.DARWIN: "on_macos",
    Os.LINUX: "on_linux",
}

_CPU_CONDITIONS: dict[Arch, str] = {
    Arch.AMD64: "Hardware::CPU.intel?",
    Arch.ARM64: "Hardware::CPU.arm? && Hardware::CPU.is_64_bit?",
    Arch.ARM: "Hardware::CPU.arm? && !Hardware::CPU.is_64_bit?",
}


def class_name(name: str) -> str:
    """Homebrew's class name for a formula: ``my-tool`` -> ``MyTool``."""
    name = name.replace("+", "x").replace("@", "AT")
    name = re.sub(r"[-_.\s]([a-zA-Z0-9])", lambda m: m.group(1).upper(), name)
    return name[:1].upper() + name[1:]


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _quote(value: str) -> str:
    return f'"{_escape(value)}"'


def _dependency_line(dep: DependencyConfig) -> str:
    line = f"depends_on {_quote(dep.name)}"
    symbols = [f":{symbol.value}" for symbol in dep.symbol]
    if len(symbols) == 1:
        line += f" => {symbols[0]}"
    elif symbols:
        line += f" => [{', '.join(symbols)}]"
    return line


def _header(brew: BrewConfig, tag: Tag) -> str:
    lines: list[str] = []
    if brew.with_version:
        lines.append(f"version {_quote(tag.version)}")
    if brew.license:
        lines.append(f"license {_quote(brew.license)}")
    if brew.head is not None:
        lines.append(f"head {_quote(brew.head.url)}, branch: {_quote(brew.head.branch)}")
    if brew.dependencies:
        lines.append("")
        lines.extend(_dependency_line(dep) for dep in brew.dependencies)
    if not lines:
        return ""
    return "\n".join(f"  {line}" if line else "" for line in lines) + "\n\n"


def _url_block(package: Package) -> list[str]:
    return [f"url {_quote(package.url)}", f"sha256 {_quote(package.checksum)}"]


def _packages(packages: list[Package]) -> str:
    if len(packages) == 1 and packages[0].os is None:
        return "\n".join(f"  {line}" for line in _url_block(packages[0]))

    if any(package.os is None for package in packages):
        msg = "Cannot mix a single-target package with per-platform packages"
        raise ValueError(msg)

    seen: set[tuple[Os, Arch]] = set()
    for package in packages:
        key = (package.os, package.arch)
        if key in seen:
            msg = f"More than one package for {package.os.token}/{package.arch.token}"
            raise ValueError(msg)
        seen.add(key)

    blocks: list[str] = []
    for os, block in _OS_BLOCKS.items():
        matching = [package for package in packages if package.os is os]
        if not matching:
            continue
        lines = [f"  {block} do"]
        for package in matching:
            lines.append(f"    if {_CPU_CONDITIONS[package.arch]}")
            lines.extend(f"      {line}" for line in _url_block(package))
            lines.append("    end")
        lines.append("  end")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_formula(brew: BrewConfig, packages: list[Package], tag: Tag) -> str:
    """Render the Ruby formula for *packages*.

    A single package without os/arch gives a top-level ``url``/``sha256`` pair.
    Otherwise packages are grouped into ``on_macos``/``on_linux`` blocks with
    one CPU branch per arch.
    """
    if not packages:
        msg = "Cannot render a formula without packages"
        raise ValueError(msg)

    test = f"\n\n  test do\n{_indent(brew.test, 4)}\n  end" if brew.test.strip() else ""
    caveats = ""
    if brew.caveats.strip():
        caveats = f"\n\n  def caveats\n    <<~EOS\n{_indent(brew.caveats, 6)}\n    EOS\n  end"

    rendered = Template(formula_template()).safe_substitute(
        class_name=class_name(brew.name),
        description=_escape(brew.description[:1].upper() + brew.description[1:]),
        homepage=_escape(brew.homepage),
        header=_header(brew, tag),
        packages=_packages(packages),
        install=_indent(brew.install, 4),
        test=test,
        caveats=caveats,
    )
    logger.debug("rendered formula for %s (%d packages)", brew.name, len(packages))
    return rendered
