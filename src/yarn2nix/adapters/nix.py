"""Render fetch descriptors as a Nix expression for ``yarn2nix``'s offline cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

from yarn2nix.domain.catalog import GitSource, PlainSource

if TYPE_CHECKING:
    from collections.abc import Iterable

    from yarn2nix.domain.catalog import FetchDescriptor

NIX_HEAD = """\
{fetchgitTarball, fetchurl, linkFarm}: rec {
  offline_cache = linkFarm "offline" packages;
  packages = ["""

NIX_TAIL = """\
  ];
}"""


def nix_string(value: str) -> str:
    """Quote ``value`` as a Nix double-quoted string literal."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{escaped}"'


def render_descriptor(descriptor: FetchDescriptor) -> str:
    source = descriptor.source
    if isinstance(source, GitSource):
        fetch_expr = (
            f"fetchgitTarball {nix_string(source.file_name)} {{\n"
            f"        url = {nix_string(source.url)};\n"
            f"        rev = {nix_string(source.rev)};\n"
            f"        sha256 = {nix_string(source.sha256)};\n"
            "      }"
        )
    elif isinstance(source, PlainSource):
        fetch_expr = (
            "fetchurl {\n"
            f"        name = {nix_string(source.file_name)};\n"
            f"        url  = {nix_string(source.url)};\n"
            f"        sha1 = {nix_string(source.sha1)};\n"
            "      }"
        )
    else:
        raise TypeError(f"Unsupported fetch source: {type(source).__name__}")

    return (
        "    {\n"
        f"      name = {nix_string(descriptor.name)};\n"
        f"      path = {fetch_expr};\n"
        "    }"
    )


def render_nix(descriptors: Iterable[FetchDescriptor]) -> str:
    """Return the full Nix expression, newline-terminated."""

    blocks = [NIX_HEAD, *(render_descriptor(descriptor) for descriptor in descriptors), NIX_TAIL]
    return "\n".join(blocks) + "\n"


__all__ = ["NIX_HEAD", "NIX_TAIL", "nix_string", "render_descriptor", "render_nix"]
