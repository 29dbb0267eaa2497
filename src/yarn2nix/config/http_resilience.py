"""Configuration types for the artifact HTTP client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float | None = None
    ratelimit: RateLimit | None = None
    follow_redirects: bool = True
    default_headers: Mapping[str, str] | None = None
