#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from yarn2nix.app import DEFAULT_LOCKFILE, generate_nix, update_lockfile
from yarn2nix.config import ConfigurationError, configure_logging, get_config
from yarn2nix.domain.errors import PatchBlockedError, Yarn2NixError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="yarn2nix",
        description="Convert a yarn.lock into a Nix offline cache expression",
    )
    parser.add_argument(
        "--no-nix",
        action="store_true",
        help="Hide the nix output",
    )
    parser.add_argument(
        "--no-patch",
        action="store_true",
        help="Don't patch the lockfile if hashes are missing",
    )
    parser.add_argument(
        "--lockfile",
        metavar="FILE",
        default=DEFAULT_LOCKFILE,
        help="Specify path to the lockfile (default: %(default)s)",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        config = get_config()
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(1)
    logging.getLogger().setLevel(config.log_level)

    try:
        result = update_lockfile(
            parsed_args.lockfile,
            allow_patch=not parsed_args.no_patch,
            config=config,
        )
        output = None if parsed_args.no_nix else generate_nix(result.lockfile)
    except PatchBlockedError as exc:
        log.error("%s ...aborting", exc)  # noqa: TRY400
        sys.exit(1)
    except Yarn2NixError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except OSError as exc:
        log.error("Cannot access lockfile %s: %s", parsed_args.lockfile, exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error while processing %s", parsed_args.lockfile)
        sys.exit(1)

    if output is not None:
        sys.stdout.write(output)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(130)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
