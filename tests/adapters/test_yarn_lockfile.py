from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING

import pytest

from tests.helpers.lockfiles import CODE_FRAME_SHA1, SAMPLE_LOCKFILE
from yarn2nix.adapters.yarn_lockfile import (
    LOCKFILE_HEADER,
    parse_lockfile,
    serialize_lockfile,
    write_lockfile,
)
from yarn2nix.domain.errors import ParseError
from yarn2nix.domain.lockfile import LockEntry, Lockfile

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_reads_entries_in_file_order() -> None:
    lockfile = parse_lockfile(SAMPLE_LOCKFILE)

    assert list(lockfile) == [
        "@babel/code-frame@^7.0.0",
        "@babel/code-frame@^7.10.4",
        "left-pad@^1.3.0",
    ]
    code_frame = lockfile["@babel/code-frame@^7.0.0"]
    assert code_frame.data["version"] == "7.10.4"
    assert code_frame.resolved == (
        "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.10.4.tgz"
        f"#{CODE_FRAME_SHA1}"
    )
    assert code_frame.data["dependencies"] == {"@babel/highlight": "^7.10.4"}
    assert str(code_frame.data["integrity"]).startswith("sha512-")


def test_parse_shares_entry_between_grouped_keys() -> None:
    lockfile = parse_lockfile(SAMPLE_LOCKFILE)

    assert lockfile["@babel/code-frame@^7.0.0"] is lockfile["@babel/code-frame@^7.10.4"]
    assert len(lockfile.entries()) == 2


def test_serialize_reproduces_yarn_output() -> None:
    assert serialize_lockfile(parse_lockfile(SAMPLE_LOCKFILE)) == SAMPLE_LOCKFILE


def test_serialize_orders_fields_and_quotes_like_yarn() -> None:
    entry = LockEntry(
        data={
            "optionalDependencies": {"fsevents": "^2.0.0"},
            "integrity": "sha512-abc==",
            "resolved": "https://example.com/a-1.0.0.tgz#aaa",
            "version": "1.0.0",
            "bundled": True,
            "uid": "",
        }
    )
    lockfile = Lockfile({"a@^1.0.0": entry})

    assert serialize_lockfile(lockfile) == (
        f"{LOCKFILE_HEADER}\n\n"
        "a@^1.0.0:\n"
        '  version "1.0.0"\n'
        '  uid ""\n'
        '  resolved "https://example.com/a-1.0.0.tgz#aaa"\n'
        "  integrity sha512-abc==\n"
        "  bundled true\n"
        "  optionalDependencies:\n"
        '    fsevents "^2.0.0"\n'
    )


def test_serialize_groups_keys_of_shared_entries() -> None:
    shared = LockEntry(data={"version": "1.0.0"})
    lockfile = Lockfile({"b@^1.0.0": shared, "a@1": LockEntry(data={"version": "1.0.0"})})
    lockfile.add("b@~1.0.0", shared)

    text = serialize_lockfile(lockfile)

    assert 'a@1:\n  version "1.0.0"\n\nb@^1.0.0, b@~1.0.0:\n  version "1.0.0"\n' in text


def test_parse_scalars() -> None:
    lockfile = parse_lockfile(
        'pkg@1:\n  bundled true\n  optional false\n  count 3\n  quoted "true"\n  name pkg\n'
    )

    assert lockfile["pkg@1"].data == {
        "bundled": True,
        "optional": False,
        "count": 3,
        "quoted": "true",
        "name": "pkg",
    }


def test_parse_handles_escaped_strings_and_crlf() -> None:
    lockfile = parse_lockfile('"weird\\"key@1":\r\n  note "a \\"quoted\\" value"\r\n')

    assert lockfile['weird"key@1'].data == {"note": 'a "quoted" value'}


def test_parse_skips_comments_and_blank_lines() -> None:
    lockfile = parse_lockfile("# comment\n\n\na@1:\n  # nested comment\n  version \"1\"\n")

    assert lockfile["a@1"].data == {"version": "1"}


@pytest.mark.parametrize(
    ("raw", "message", "line"),
    [
        ('a@1:\n   version "1"\n', "Invalid indentation", 2),
        ('a@1:\n\tversion "1"\n', "Tabs", 2),
        ('  version "1"\n', "Unexpected indentation", 1),
        ('a@1:\n  version "1"\n    nested "x"\n', "Unexpected indentation", 3),
        ('version "1"\n', "Top-level", 1),
        ('a@1:\n  version "1\n', "Unterminated string", 2),
        ("a@1, :\n", "Malformed block header", 1),
        ("a@1:\n  version\n", "Expected `key value` pair", 2),
        ('a@1:\n  version "1"\na@1:\n  version "2"\n', "Duplicate lockfile key", 3),
        ('a@1:\n  version "1"\n  version "2"\n', "Duplicate key", 3),
    ],
)
def test_parse_rejects_malformed_input(raw: str, message: str, line: int) -> None:
    with pytest.raises(ParseError, match=message) as excinfo:
        parse_lockfile(raw)

    assert excinfo.value.line == line


def test_write_lockfile_replaces_file(tmp_path: Path) -> None:
    path = tmp_path / "yarn.lock"
    path.write_text("stale", encoding="utf-8")

    written = write_lockfile(parse_lockfile(SAMPLE_LOCKFILE), path)

    assert written == path
    assert path.read_text(encoding="utf-8") == SAMPLE_LOCKFILE
    assert sorted(item.name for item in tmp_path.iterdir()) == ["yarn.lock"]


def test_parse_ignores_byte_order_mark() -> None:
    lockfile = parse_lockfile("\ufeff" + SAMPLE_LOCKFILE)

    assert lockfile == parse_lockfile(SAMPLE_LOCKFILE)
    assert serialize_lockfile(lockfile) == SAMPLE_LOCKFILE


def test_write_lockfile_keeps_file_mode(tmp_path: Path) -> None:
    path = tmp_path / "yarn.lock"
    path.write_text("stale", encoding="utf-8")
    path.chmod(0o640)

    write_lockfile(parse_lockfile(SAMPLE_LOCKFILE), path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o640


def test_write_lockfile_failure_leaves_original_and_no_temp_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "yarn.lock"
    path.write_text("stale", encoding="utf-8")

    def failing_replace(*_args: object) -> None:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(os, "replace", failing_replace)

    with pytest.raises(OSError, match="No space left"):
        write_lockfile(parse_lockfile(SAMPLE_LOCKFILE), path)

    assert path.read_text(encoding="utf-8") == "stale"
    assert sorted(item.name for item in tmp_path.iterdir()) == ["yarn.lock"]
