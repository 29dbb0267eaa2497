"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from yarn2nix.adapters.artifact import HttpArtifactHasher
from yarn2nix.adapters.http_resilience import ResilientClient
from yarn2nix.adapters.nix import render_nix
from yarn2nix.adapters.nix_prefetch_git import NixPrefetchGit
from yarn2nix.adapters.yarn_lockfile import parse_lockfile, write_lockfile
from yarn2nix.config import Yarn2NixConfig
from yarn2nix.domain.catalog import build_catalog
from yarn2nix.domain.errors import ParseError, PatchBlockedError
from yarn2nix.domain.reconciliation import ReconciliationResult, reconcile_lockfile

if TYPE_CHECKING:
    from yarn2nix.domain.lockfile import Lockfile
    from yarn2nix.domain.ports import ArtifactHasher, RevisionHasher

DEFAULT_LOCKFILE = "./yarn.lock"

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpdateResult:
    lockfile: Lockfile
    reconciliation: ReconciliationResult
    changed: bool
    written: bool


def update_lockfile(
    path: str | Path = DEFAULT_LOCKFILE,
    *,
    allow_patch: bool = True,
    config: Yarn2NixConfig | None = None,
    artifact_hasher: ArtifactHasher | None = None,
    revision_hasher: RevisionHasher | None = None,
) -> UpdateResult:
    """Fill in missing hashes and rewrite the lockfile at ``path`` if anything changed.

    Raises ``PatchBlockedError`` instead of writing when ``allow_patch`` is false.
    """

    lock_path = Path(path)
    effective_config = config or Yarn2NixConfig()
    try:
        original_text = lock_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"Lockfile is not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    lockfile = parse_lockfile(original_text)

    reconciliation = asyncio.run(
        _reconcile(
            lockfile,
            config=effective_config,
            artifact_hasher=artifact_hasher,
            revision_hasher=revision_hasher,
        )
    )

    if lockfile == parse_lockfile(original_text):
        return UpdateResult(
            lockfile=lockfile, reconciliation=reconciliation, changed=False, written=False
        )

    log.warning("found changes in the lockfile %s", lock_path)
    if not allow_patch:
        raise PatchBlockedError(path=str(lock_path))

    write_lockfile(lockfile, lock_path)
    log.info("Patched %s", lock_path)
    return UpdateResult(
        lockfile=lockfile, reconciliation=reconciliation, changed=True, written=True
    )


def generate_nix(lockfile: Lockfile) -> str:
    """Render the offline-cache Nix expression for ``lockfile``."""

    return render_nix(build_catalog(lockfile))


async def _reconcile(
    lockfile: Lockfile,
    *,
    config: Yarn2NixConfig,
    artifact_hasher: ArtifactHasher | None,
    revision_hasher: RevisionHasher | None,
) -> ReconciliationResult:
    effective_revision_hasher = revision_hasher or NixPrefetchGit(command=config.prefetch_git)
    if artifact_hasher is not None:
        return await reconcile_lockfile(
            lockfile,
            artifact_hasher=artifact_hasher,
            revision_hasher=effective_revision_hasher,
        )

    async with ResilientClient(config.resilience) as client:
        return await reconcile_lockfile(
            lockfile,
            artifact_hasher=HttpArtifactHasher(client=client),
            revision_hasher=effective_revision_hasher,
        )
