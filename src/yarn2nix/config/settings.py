"""Runtime settings for a yarn2nix run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from yarn2nix import __version__

from .env import optional_env_var, optional_float, optional_int
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_PREFETCH_GIT = "nix-prefetch-git"
DEFAULT_LOG_LEVEL = "INFO"


def _artifact_resilience(
    *, timeout_seconds: float | None = None, ratelimit: RateLimit | None = None
) -> ResilienceConfig:
    return ResilienceConfig(
        name="artifacts",
        timeout_seconds=timeout_seconds,
        ratelimit=ratelimit,
        default_headers={"User-Agent": f"yarn2nix/{__version__}"},
    )


@dataclass(frozen=True, slots=True)
class Yarn2NixConfig:
    """Holds the tunables read from the environment."""

    resilience: ResilienceConfig = field(default_factory=_artifact_resilience)
    prefetch_git: str = DEFAULT_PREFETCH_GIT
    log_level: str = DEFAULT_LOG_LEVEL


def _log_level_from_environment() -> str:
    level = (optional_env_var("YARN2NIX_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"YARN2NIX_LOG_LEVEL is not a logging level: {level!r}")
    return level


def get_config() -> Yarn2NixConfig:
    """Build the run configuration from ``YARN2NIX_*`` environment variables."""

    max_per_second = optional_int("YARN2NIX_MAX_REQUESTS_PER_SECOND")
    resilience = _artifact_resilience(
        timeout_seconds=optional_float("YARN2NIX_HTTP_TIMEOUT"),
        ratelimit=(
            RateLimit(max_calls=max_per_second, per_seconds=1.0)
            if max_per_second is not None
            else None
        ),
    )
    return Yarn2NixConfig(
        resilience=resilience,
        prefetch_git=optional_env_var("YARN2NIX_PREFETCH_GIT") or DEFAULT_PREFETCH_GIT,
        log_level=_log_level_from_environment(),
    )
