"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_float, optional_int
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig
from .logging import configure_logging
from .settings import DEFAULT_PREFETCH_GIT, Yarn2NixConfig, get_config

__all__ = [
    "DEFAULT_PREFETCH_GIT",
    "ConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "Yarn2NixConfig",
    "configure_logging",
    "get_config",
    "optional_env_var",
    "optional_float",
    "optional_int",
]
