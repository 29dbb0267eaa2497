"""Reconciliation of lockfile integrity data.

Every entry with a ``resolved`` field is inspected independently:
- no ``#token``: the artifact is downloaded and its SHA-1 appended
- git-hosted source: the revision's Nix sha256 is looked up and stored
- otherwise the entry already carries a usable hash

Entries are reconciled concurrently. The first failure cancels the remaining
lookups and is raised as-is; nothing is rolled back because nothing has been
persisted yet.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .lockfile import source_control_url, split_resolved

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .lockfile import LockEntry, Lockfile
    from .ports import ArtifactHasher, RevisionHasher

log = getLogger(__name__)


class EntryAction(StrEnum):
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    ARTIFACT_HASHED = "artifact_hashed"
    REVISION_RESOLVED = "revision_resolved"


@dataclass(slots=True)
class ReconciliationResult:
    """Counts of what a reconciliation run did."""

    inspected: int = 0
    skipped: int = 0
    artifacts_hashed: int = 0
    revisions_resolved: int = 0

    def record(self, action: EntryAction) -> None:
        self.inspected += 1
        if action is EntryAction.SKIPPED:
            self.skipped += 1
        elif action is EntryAction.ARTIFACT_HASHED:
            self.artifacts_hashed += 1
        elif action is EntryAction.REVISION_RESOLVED:
            self.revisions_resolved += 1


async def reconcile_entry(
    entry: LockEntry,
    *,
    artifact_hasher: ArtifactHasher,
    revision_hasher: RevisionHasher,
) -> EntryAction:
    """Fill in the hash data ``entry`` is missing, mutating it in place."""

    resolved = entry.resolved
    if resolved is None:
        # local or workspace dependency
        return EntryAction.SKIPPED

    ref = split_resolved(resolved)
    if not ref.has_token:
        log.debug("Hashing artifact %s", ref.url)
        digest = await artifact_hasher(ref.url)
        entry.resolved = f"{ref.url}#{digest}"
        return EntryAction.ARTIFACT_HASHED

    repo = source_control_url(ref.url)
    if repo is not None:
        log.debug("Resolving git revision %s#%s", repo, ref.token)
        entry.sha256 = await revision_hasher(repo, ref.token)
        return EntryAction.REVISION_RESOLVED

    return EntryAction.UNCHANGED


async def reconcile_entries(
    entries: Iterable[LockEntry],
    *,
    artifact_hasher: ArtifactHasher,
    revision_hasher: RevisionHasher,
) -> ReconciliationResult:
    """Reconcile all ``entries`` concurrently and wait for every lookup."""

    try:
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(
                    reconcile_entry(
                        entry,
                        artifact_hasher=artifact_hasher,
                        revision_hasher=revision_hasher,
                    )
                )
                for entry in entries
            ]
    except ExceptionGroup as errors:
        raise errors.exceptions[0] from None

    result = ReconciliationResult()
    for task in tasks:
        result.record(task.result())

    log.info(
        "Reconciled %s entries: artifacts_hashed=%s, revisions_resolved=%s, skipped=%s",
        result.inspected,
        result.artifacts_hashed,
        result.revisions_resolved,
        result.skipped,
    )
    return result


async def reconcile_lockfile(
    lockfile: Lockfile,
    *,
    artifact_hasher: ArtifactHasher,
    revision_hasher: RevisionHasher,
) -> ReconciliationResult:
    """Reconcile every distinct entry of ``lockfile`` in place.

    Keys grouped under one block share an entry, which is looked up once.
    """

    return await reconcile_entries(
        lockfile.entries(),
        artifact_hasher=artifact_hasher,
        revision_hasher=revision_hasher,
    )


__all__ = [
    "EntryAction",
    "ReconciliationResult",
    "reconcile_entries",
    "reconcile_entry",
    "reconcile_lockfile",
]
