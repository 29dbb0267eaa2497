"""Adapters for the lockfile format, HTTP, nix-prefetch-git and Nix output."""

from __future__ import annotations

from .artifact import HttpArtifactHasher
from .http_resilience import ResilientClient
from .nix import render_nix
from .nix_prefetch_git import NixPrefetchGit, NixPrefetchGitOutput
from .yarn_lockfile import parse_lockfile, serialize_lockfile, write_lockfile

__all__ = [
    "HttpArtifactHasher",
    "NixPrefetchGit",
    "NixPrefetchGitOutput",
    "ResilientClient",
    "parse_lockfile",
    "render_nix",
    "serialize_lockfile",
    "write_lockfile",
]
