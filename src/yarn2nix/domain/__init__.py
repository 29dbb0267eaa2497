"""Lockfile model, reconciliation and catalog building."""

from __future__ import annotations

from .catalog import FetchDescriptor, FetchKind, GitSource, PlainSource, build_catalog
from .errors import (
    FetchError,
    MissingSourceHashError,
    ParseError,
    PatchBlockedError,
    ResolutionToolError,
    Yarn2NixError,
)
from .lockfile import (
    LockEntry,
    Lockfile,
    LockValue,
    ResolvedRef,
    scope_prefix,
    source_control_url,
    split_resolved,
    url_file_name,
)
from .ports import ArtifactHasher, RevisionHasher
from .reconciliation import (
    EntryAction,
    ReconciliationResult,
    reconcile_entries,
    reconcile_entry,
    reconcile_lockfile,
)

__all__ = [
    "ArtifactHasher",
    "EntryAction",
    "FetchDescriptor",
    "FetchError",
    "FetchKind",
    "GitSource",
    "LockEntry",
    "LockValue",
    "Lockfile",
    "MissingSourceHashError",
    "ParseError",
    "PatchBlockedError",
    "PlainSource",
    "ReconciliationResult",
    "ResolutionToolError",
    "ResolvedRef",
    "RevisionHasher",
    "Yarn2NixError",
    "build_catalog",
    "reconcile_entries",
    "reconcile_entry",
    "reconcile_lockfile",
    "scope_prefix",
    "source_control_url",
    "split_resolved",
    "url_file_name",
]
