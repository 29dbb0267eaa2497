"""Resolve git revisions to Nix sha256 hashes with ``nix-prefetch-git``."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from logging import getLogger

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from yarn2nix.config.settings import DEFAULT_PREFETCH_GIT
from yarn2nix.domain.errors import ResolutionToolError

log = getLogger(__name__)


class NixPrefetchGitOutput(BaseModel):
    """JSON document printed by ``nix-prefetch-git``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str
    rev: str
    sha256: str = Field(min_length=1)
    date: str | None = None
    path: str | None = None
    sri_hash: str | None = Field(default=None, alias="hash")
    fetch_submodules: bool | None = Field(default=None, alias="fetchSubmodules")
    deep_clone: bool | None = Field(default=None, alias="deepClone")
    leave_dot_git: bool | None = Field(default=None, alias="leaveDotGit")


@dataclass(frozen=True, slots=True)
class NixPrefetchGit:
    """Run ``<command> --quiet <repo> <rev>`` and return the reported sha256."""

    command: str = DEFAULT_PREFETCH_GIT

    async def __call__(self, repo: str, rev: str) -> str:
        argv = [self.command, "--quiet", repo, rev]
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ResolutionToolError(
                f"Cannot run {self.command} ({exc.strerror or exc})",
                repo=repo,
                rev=rev,
            ) from exc

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            # reap the child even if we are cancelled again while waiting
            await asyncio.shield(process.wait())
            raise

        if process.returncode != 0:
            raise ResolutionToolError(
                f"{self.command} exited with status {process.returncode}",
                repo=repo,
                rev=rev,
                stderr=stderr.decode("utf-8", errors="replace").strip(),
            )

        try:
            output = NixPrefetchGitOutput.model_validate_json(stdout)
        except ValidationError as exc:
            raise ResolutionToolError(
                f"Unexpected {self.command} output",
                repo=repo,
                rev=rev,
                stderr=str(exc),
            ) from exc

        log.debug("Resolved %s#%s to sha256 %s", repo, rev, output.sha256)
        return output.sha256


__all__ = ["NixPrefetchGit", "NixPrefetchGitOutput"]
