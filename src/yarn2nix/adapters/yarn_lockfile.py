"""Parser and serializer for the yarn v1 lockfile format.

The output mirrors what ``yarn`` itself writes, so a lockfile that needed no
patching serializes back to the same text:
- fields are ordered ``name, version, uid, resolved, integrity, registry,
  dependencies`` first, then alphabetically
- keys sharing one block are written as a single comma-separated header
- tokens are quoted when yarn would quote them
"""

from __future__ import annotations

import json
import os
import re
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from yarn2nix.domain.errors import ParseError
from yarn2nix.domain.lockfile import LockEntry, Lockfile

if TYPE_CHECKING:
    from collections.abc import Mapping

    from yarn2nix.domain.lockfile import LockValue

LOCKFILE_HEADER = (
    "# THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.\n# yarn lockfile v1\n"
)
INDENT = "  "

_FIELD_PRIORITY = {
    "name": 1,
    "version": 2,
    "uid": 3,
    "resolved": 4,
    "integrity": 5,
    "registry": 6,
    "dependencies": 7,
}
_NEEDS_QUOTES = re.compile(r"[:\s\\\",\[\]]")
_INTEGER = re.compile(r"^[0-9]+$")
_BARE_TERMINATORS = frozenset(" \t,:")
_BOM = "\ufeff"


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------


def parse_lockfile(raw: str) -> Lockfile:
    """Parse yarn lockfile text into a ``Lockfile``."""

    lockfile = Lockfile()
    # stack[n] is the mapping receiving lines indented n levels deep
    stack: list[dict[str, LockValue] | None] = [None]

    for line_no, line in enumerate(raw.removeprefix(_BOM).split("\n"), start=1):
        content = line.lstrip(" ")
        if not content.strip() or content.startswith("#"):
            continue
        if content[0] == "\t":
            raise ParseError("Tabs are not allowed for indentation", line=line_no)

        indent = len(line) - len(content)
        if indent % len(INDENT):
            raise ParseError("Invalid indentation", line=line_no)
        level = indent // len(INDENT)
        if level >= len(stack):
            raise ParseError("Unexpected indentation", line=line_no)
        del stack[level + 1 :]

        keys, value = _parse_line(content.rstrip(), line_no=line_no)
        if level == 0:
            if value is not None:
                raise ParseError("Top-level lockfile values must be blocks", line=line_no)
            entry = LockEntry()
            for key in keys:
                if key in lockfile:
                    raise ParseError(f"Duplicate lockfile key {key!r}", line=line_no)
                lockfile.add(key, entry)
            stack.append(entry.data)
            continue

        parent = stack[level]
        if parent is None:
            raise ParseError("Unexpected indentation", line=line_no)
        if value is None:
            block: dict[str, LockValue] = {}
            for key in keys:
                _assign(parent, key, block, line_no=line_no)
            stack.append(block)
        else:
            _assign(parent, keys[0], value, line_no=line_no)
            stack.append(None)

    return lockfile


def _assign(
    target: dict[str, LockValue], key: str, value: LockValue, *, line_no: int
) -> None:
    if key in target:
        raise ParseError(f"Duplicate key {key!r}", line=line_no)
    target[key] = value


def _parse_line(content: str, *, line_no: int) -> tuple[list[str], LockValue | None]:
    """Return the keys of a line and its scalar value, or ``None`` for a block header."""

    tokens = _tokenize(content, line_no=line_no)

    if tokens[-1] == (":", None):
        keys: list[str] = []
        expect_key = True
        for token in tokens[:-1]:
            kind, value = token
            if expect_key and kind in {"string", "bare"}:
                keys.append(str(value))
            elif not expect_key and kind == ",":
                pass
            else:
                raise ParseError("Malformed block header", line=line_no)
            expect_key = not expect_key
        if not keys or expect_key:
            raise ParseError("Malformed block header", line=line_no)
        return keys, None

    if len(tokens) != 2 or tokens[0][0] not in {"string", "bare"}:
        raise ParseError("Expected `key value` pair", line=line_no)
    (_, key), (kind, raw_value) = tokens
    if kind == "string":
        return [str(key)], str(raw_value)
    if kind != "bare":
        raise ParseError("Expected a value", line=line_no)
    return [str(key)], _bare_value(str(raw_value))


def _tokenize(content: str, *, line_no: int) -> list[tuple[str, str | None]]:
    tokens: list[tuple[str, str | None]] = []
    index = 0
    while index < len(content):
        char = content[index]
        if char in " \t":
            index += 1
        elif char in ",:":
            tokens.append((char, None))
            index += 1
        elif char == '"':
            end = _string_end(content, index, line_no=line_no)
            try:
                tokens.append(("string", json.loads(content[index : end + 1])))
            except json.JSONDecodeError as exc:
                raise ParseError(f"Invalid string literal: {exc.msg}", line=line_no) from exc
            index = end + 1
        else:
            start = index
            while index < len(content) and content[index] not in _BARE_TERMINATORS:
                index += 1
            tokens.append(("bare", content[start:index]))
    return tokens


def _string_end(content: str, start: int, *, line_no: int) -> int:
    index = start + 1
    while index < len(content):
        char = content[index]
        if char == "\\":
            index += 2
            continue
        if char == '"':
            return index
        index += 1
    raise ParseError("Unterminated string", line=line_no)


def _bare_value(token: str) -> LockValue:
    if token == "true":
        return True
    if token == "false":
        return False
    if _INTEGER.match(token):
        return int(token)
    return token


# ----------------------------------------------------------------------
# Serialization
# ----------------------------------------------------------------------


def serialize_lockfile(lockfile: Lockfile) -> str:
    """Render ``lockfile`` the way ``yarn`` writes it."""

    top_level = {key: entry.data for key, entry in lockfile.items()}
    body = _stringify(top_level, indent="", top_level=True)
    return f"{LOCKFILE_HEADER}\n\n{body}"


def write_lockfile(lockfile: Lockfile, path: str | Path) -> Path:
    """Atomically replace the lockfile at ``path`` with ``lockfile``.

    The permission bits of an existing lockfile are kept.
    """

    lock_path = Path(path)
    temp_path = lock_path.with_name(f".{lock_path.name}.tmp")
    try:
        temp_path.write_text(serialize_lockfile(lockfile), encoding="utf-8")
        if lock_path.exists():
            shutil.copymode(lock_path, temp_path)
        os.replace(temp_path, lock_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return lock_path


def _stringify(obj: Mapping[str, LockValue], *, indent: str, top_level: bool = False) -> str:
    lines: list[str] = []
    added: set[str] = set()
    keys = sorted(obj, key=_field_sort_key)

    for position, key in enumerate(keys):
        if key in added:
            continue
        value = obj[key]
        value_keys = [key]
        if isinstance(value, dict):
            value_keys.extend(other for other in keys[position + 1 :] if obj[other] is value)
        added.update(value_keys)
        key_line = ", ".join(_maybe_quote(item) for item in sorted(value_keys))

        if isinstance(value, dict):
            if value:
                nested = _stringify(value, indent=indent + INDENT)
                block = f"{key_line}:\n{nested}"
            else:
                block = f"{key_line}:"
            lines.append(block + ("\n" if top_level else ""))
        else:
            lines.append(f"{key_line} {_maybe_quote(value)}")

    return indent + f"\n{indent}".join(lines)


def _field_sort_key(key: str) -> tuple[int, str]:
    return _FIELD_PRIORITY.get(key, len(_FIELD_PRIORITY) + 1), key


def _maybe_quote(value: LockValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        raise TypeError("Nested blocks cannot be rendered inline")
    if _should_quote(value):
        return json.dumps(value, ensure_ascii=False)
    return value


def _should_quote(value: str) -> bool:
    return (
        value.startswith(("true", "false"))
        or bool(_NEEDS_QUOTES.search(value))
        or not value[:1].isascii()
        or not value[:1].isalpha()
    )


__all__ = ["LOCKFILE_HEADER", "parse_lockfile", "serialize_lockfile", "write_lockfile"]
