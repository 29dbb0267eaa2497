from __future__ import annotations

import pytest

from yarn2nix.config import ConfigurationError, RateLimit, Yarn2NixConfig, get_config
from yarn2nix.config.settings import DEFAULT_LOG_LEVEL, DEFAULT_PREFETCH_GIT

ENV_VARS = (
    "YARN2NIX_HTTP_TIMEOUT",
    "YARN2NIX_MAX_REQUESTS_PER_SECOND",
    "YARN2NIX_PREFETCH_GIT",
    "YARN2NIX_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    config = get_config()

    assert config.prefetch_git == DEFAULT_PREFETCH_GIT
    assert config.log_level == DEFAULT_LOG_LEVEL
    assert config.resilience.timeout_seconds is None
    assert config.resilience.ratelimit is None
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["User-Agent"].startswith("yarn2nix/")


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YARN2NIX_HTTP_TIMEOUT", "12.5")
    monkeypatch.setenv("YARN2NIX_MAX_REQUESTS_PER_SECOND", "4")
    monkeypatch.setenv("YARN2NIX_PREFETCH_GIT", "/opt/bin/nix-prefetch-git")
    monkeypatch.setenv("YARN2NIX_LOG_LEVEL", "debug")

    config = get_config()

    assert config.resilience.timeout_seconds == 12.5
    assert config.resilience.ratelimit == RateLimit(max_calls=4, per_seconds=1.0)
    assert config.prefetch_git == "/opt/bin/nix-prefetch-git"
    assert config.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YARN2NIX_PREFETCH_GIT", "   ")
    monkeypatch.setenv("YARN2NIX_HTTP_TIMEOUT", "")

    config = get_config()

    assert config.prefetch_git == DEFAULT_PREFETCH_GIT
    assert config.resilience.timeout_seconds is None


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("YARN2NIX_HTTP_TIMEOUT", "soon"),
        ("YARN2NIX_HTTP_TIMEOUT", "0"),
        ("YARN2NIX_MAX_REQUESTS_PER_SECOND", "1.5"),
        ("YARN2NIX_MAX_REQUESTS_PER_SECOND", "-2"),
        ("YARN2NIX_LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        get_config()


def test_default_config_matches_unconfigured_environment() -> None:
    assert get_config() == Yarn2NixConfig()


def test_environment_overrides_keep_default_headers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YARN2NIX_HTTP_TIMEOUT", "3")

    resilience = get_config().resilience

    assert resilience.timeout_seconds == 3.0
    assert resilience.default_headers == Yarn2NixConfig().resilience.default_headers
