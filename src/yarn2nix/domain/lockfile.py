"""In-memory model of a yarn lockfile.

A lockfile is an ordered mapping from ``name@range`` keys to entries. Several
keys may resolve to the same block in the file; they then share one
``LockEntry`` object, so a change made through one key is visible through all
of them.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from posixpath import basename
from typing import TypeAlias
from urllib.parse import urlsplit

LockValue: TypeAlias = "str | bool | int | dict[str, LockValue]"

GIT_PLUS_HTTPS_PREFIX = "git+https://"
_SCOPE_PATTERN = re.compile(r"^(@[\w.-]+)/")


@dataclass(slots=True)
class LockEntry:
    """One resolution record, holding every field of its lockfile block."""

    data: dict[str, LockValue] = field(default_factory=dict)

    @property
    def resolved(self) -> str | None:
        value = self.data.get("resolved")
        if isinstance(value, str) and value:
            return value
        return None

    @resolved.setter
    def resolved(self, value: str) -> None:
        self.data["resolved"] = value

    @property
    def sha256(self) -> str | None:
        value = self.data.get("sha256")
        if isinstance(value, str) and value:
            return value
        return None

    @sha256.setter
    def sha256(self, value: str) -> None:
        self.data["sha256"] = value


class Lockfile(Mapping[str, LockEntry]):
    """Insertion-ordered mapping of lockfile keys to entries."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, LockEntry] | None = None) -> None:
        self._entries: dict[str, LockEntry] = dict(entries or {})

    def __getitem__(self, key: str) -> LockEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Lockfile({self._entries!r})"

    def add(self, key: str, entry: LockEntry) -> None:
        if key in self._entries:
            raise KeyError(f"Duplicate lockfile key: {key}")
        self._entries[key] = entry

    def entries(self) -> tuple[LockEntry, ...]:
        """Return each distinct entry object once, in order of its first key."""

        seen: set[int] = set()
        unique: list[LockEntry] = []
        for entry in self._entries.values():
            if id(entry) in seen:
                continue
            seen.add(id(entry))
            unique.append(entry)
        return tuple(unique)


@dataclass(frozen=True, slots=True)
class ResolvedRef:
    """A ``resolved`` field split into its location and integrity token."""

    url: str
    token: str

    @property
    def has_token(self) -> bool:
        return bool(self.token)


def split_resolved(resolved: str) -> ResolvedRef:
    """Split ``<url>#<token>`` on its last ``#``.

    URLs may themselves contain ``#``; only the final one separates the token.
    Without any ``#`` the token is empty, which marks a missing hash.
    """

    if not resolved:
        raise ValueError("Cannot split an empty resolved value")
    url, separator, token = resolved.rpartition("#")
    if not separator:
        return ResolvedRef(url=resolved, token="")
    return ResolvedRef(url=url, token=token)


def source_control_url(url: str) -> str | None:
    """Return the repository URL for git-hosted sources, ``None`` otherwise."""

    if url.startswith(GIT_PLUS_HTTPS_PREFIX):
        return url.removeprefix("git+")
    if url.endswith(".git"):
        return url
    return None


def scope_prefix(key: str) -> str:
    """Return ``@scope-`` for scoped keys such as ``@scope/pkg@^1.0.0``."""

    match = _SCOPE_PATTERN.match(key)
    return f"{match.group(1)}-" if match else ""


def url_file_name(url: str) -> str:
    """Return the last path segment of ``url``, ignoring query and fragment."""

    return basename(urlsplit(url).path.rstrip("/"))


__all__ = [
    "LockEntry",
    "LockValue",
    "Lockfile",
    "ResolvedRef",
    "scope_prefix",
    "source_control_url",
    "split_resolved",
    "url_file_name",
]
