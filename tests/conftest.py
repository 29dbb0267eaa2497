from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers.lockfiles import GIT_SHA256, FakeArtifactHasher, FakeRevisionHasher

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def artifact_hasher() -> FakeArtifactHasher:
    return FakeArtifactHasher()


@pytest.fixture
def revision_hasher() -> FakeRevisionHasher:
    return FakeRevisionHasher(hashes={"https://example.com/widget.git": GIT_SHA256})


@pytest.fixture
def lockfile_path(tmp_path: Path) -> Callable[[str], Path]:
    def factory(content: str) -> Path:
        path = tmp_path / "yarn.lock"
        path.write_text(content, encoding="utf-8")
        return path

    return factory
