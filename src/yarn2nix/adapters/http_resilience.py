from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter

from yarn2nix.config.http_resilience import ResilienceConfig

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from httpx._types import HeaderTypes, TimeoutTypes, URLTypes


class AsyncClientOptions(TypedDict, total=False):
    timeout: TimeoutTypes
    headers: HeaderTypes
    follow_redirects: bool
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """Shared async HTTP client with an optional request-rate limit."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        client_kwargs: AsyncClientOptions = {"follow_redirects": config.follow_redirects}
        if config.timeout_seconds is not None:
            client_kwargs["timeout"] = config.timeout_seconds
        if config.default_headers is not None:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @asynccontextmanager
    async def stream(self, method: str, url: URLTypes) -> AsyncIterator[httpx.Response]:
        """Open a streaming request, waiting for the rate limiter first."""

        if self._limiter is not None:
            await self._limiter.acquire()
        async with self._client.stream(method, url) as response:
            yield response


__all__ = ["ResilienceConfig", "ResilientClient"]
