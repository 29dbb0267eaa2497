"""Error taxonomy for lockfile reconciliation and catalog generation."""

from __future__ import annotations


class Yarn2NixError(RuntimeError):
    """Base class for every fatal condition of a yarn2nix run."""


class ParseError(Yarn2NixError):
    """Raised when lockfile content is not well-formed."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


class FetchError(Yarn2NixError):
    """Raised when an artifact cannot be downloaded for hashing."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        detail = f"{message}: {url}"
        if status_code is not None:
            detail = f"{detail} (status code {status_code})"
        super().__init__(detail)


class ResolutionToolError(Yarn2NixError):
    """Raised when the commit-hash resolution tool fails or misbehaves."""

    def __init__(self, message: str, *, repo: str, rev: str, stderr: str | None = None) -> None:
        self.repo = repo
        self.rev = rev
        self.stderr = stderr
        detail = f"{message}: {repo}#{rev}"
        if stderr:
            detail = f"{detail}\n{stderr}"
        super().__init__(detail)


class PatchBlockedError(Yarn2NixError):
    """Raised when the lockfile needs patching but patching is disabled."""

    def __init__(self, *, path: str) -> None:
        self.path = path
        super().__init__(f"Lockfile {path} is missing hashes and patching is disabled")


class MissingSourceHashError(Yarn2NixError):
    """Raised when a git entry reaches the catalog without a resolved sha256."""

    def __init__(self, *, key: str) -> None:
        self.key = key
        super().__init__(
            f"Git dependency {key} has no sha256; the lockfile was not reconciled"
        )


__all__ = [
    "FetchError",
    "MissingSourceHashError",
    "ParseError",
    "PatchBlockedError",
    "ResolutionToolError",
    "Yarn2NixError",
]
