"""Streaming SHA-1 hashing of remote artifacts."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from yarn2nix.domain.errors import FetchError

if TYPE_CHECKING:
    from .http_resilience import ResilientClient

log = getLogger(__name__)


@dataclass(slots=True)
class HttpArtifactHasher:
    """Download an artifact and digest its body chunk by chunk."""

    client: ResilientClient

    async def __call__(self, url: str) -> str:
        digest = hashlib.sha1()  # noqa: S324 - yarn v1 tarball hashes are SHA-1
        size = 0
        try:
            async with self.client.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchError(
                        "Request failed",
                        url=url,
                        status_code=response.status_code,
                    )
                async for chunk in response.aiter_bytes():
                    digest.update(chunk)
                    size += len(chunk)
        except httpx.HTTPError as exc:
            raise FetchError(f"Request failed ({type(exc).__name__}: {exc})", url=url) from exc

        log.debug("Hashed %s bytes from %s", size, url)
        return digest.hexdigest()
