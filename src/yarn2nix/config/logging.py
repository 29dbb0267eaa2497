"""Logging setup for the yarn2nix command line."""

from __future__ import annotations

import logging
import sys

# httpx logs every request at INFO; one line per tarball drowns the summary
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Send log records to stderr so the Nix expression on stdout stays clean.

    Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
