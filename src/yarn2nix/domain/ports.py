"""Ports for the external lookups performed during reconciliation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ArtifactHasher(Protocol):
    """Fetch ``url`` and return the hex SHA-1 digest of its body."""

    async def __call__(self, url: str) -> str: ...


@runtime_checkable
class RevisionHasher(Protocol):
    """Return the Nix sha256 of the tree at ``rev`` in the git repository ``repo``."""

    async def __call__(self, repo: str, rev: str) -> str: ...


__all__ = ["ArtifactHasher", "RevisionHasher"]
