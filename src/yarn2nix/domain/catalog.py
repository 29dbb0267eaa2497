"""Build the ordered, duplicate-free list of fetch descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import MissingSourceHashError
from .lockfile import scope_prefix, source_control_url, split_resolved, url_file_name

if TYPE_CHECKING:
    from .lockfile import Lockfile

log = getLogger(__name__)


class FetchKind(StrEnum):
    """Nix fetch primitive used for a descriptor."""

    PLAIN = "fetchurl"
    SOURCE_CONTROL = "fetchgitTarball"


@dataclass(frozen=True, slots=True)
class PlainSource:
    file_name: str
    url: str
    sha1: str


@dataclass(frozen=True, slots=True)
class GitSource:
    file_name: str
    url: str
    rev: str
    sha256: str


@dataclass(frozen=True, slots=True)
class FetchDescriptor:
    """One entry of the offline cache: a cache file name and how to fetch it."""

    name: str
    kind: FetchKind
    source: PlainSource | GitSource


def build_catalog(lockfile: Lockfile) -> list[FetchDescriptor]:
    """Derive fetch descriptors from ``lockfile`` in lockfile order.

    The cache file name is the dedup key: the first entry producing a name
    wins and later entries with the same name are dropped.
    """

    found: set[str] = set()
    descriptors: list[FetchDescriptor] = []

    for key, entry in lockfile.items():
        resolved = entry.resolved
        if resolved is None:
            continue

        ref = split_resolved(resolved)
        namespace = scope_prefix(key)
        file_name = url_file_name(ref.url)
        repo = source_control_url(ref.url)
        cache_file_name = f"{file_name}-{ref.token}" if repo is not None else file_name
        full_file_name = f"{namespace}{cache_file_name}"
        if full_file_name in found:
            continue
        found.add(full_file_name)

        if repo is not None:
            sha256 = entry.sha256
            if sha256 is None:
                raise MissingSourceHashError(key=key)
            descriptor = FetchDescriptor(
                name=full_file_name,
                kind=FetchKind.SOURCE_CONTROL,
                source=GitSource(file_name=file_name, url=repo, rev=ref.token, sha256=sha256),
            )
        else:
            descriptor = FetchDescriptor(
                name=full_file_name,
                kind=FetchKind.PLAIN,
                source=PlainSource(file_name=file_name, url=ref.url, sha1=ref.token),
            )
        descriptors.append(descriptor)

    log.debug("Built catalog with %s descriptors from %s keys", len(descriptors), len(lockfile))
    return descriptors


__all__ = ["FetchDescriptor", "FetchKind", "GitSource", "PlainSource", "build_catalog"]
