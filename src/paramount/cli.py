"""Command-line interface for paramount."""

from __future__ import annotations

import argparse
import sys
from typing import Iterable

from .config import RunConfig
from .controller import LifecycleController
from .logs import setup_logging
from .version import get_version


class _ArgumentParser(argparse.ArgumentParser):
    # Usage errors exit 1 like every other failure.
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    defaults = RunConfig()
    parser = _ArgumentParser(
        prog="paramount",
        description="Mount many loopback NFS exports at once and verify the mount table.",
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="produce help message")
    parser.add_argument("--version", action="version", version=f"paramount {get_version()}")
    parser.add_argument(
        "-p",
        "--preserve",
        action="store_true",
        help="preserve temporary files and directories",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=_non_negative_int,
        default=defaults.threads,
        help="the number of concurrent commands to issue",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="show verbose output")
    parser.add_argument(
        "--exports-file",
        default=defaults.exports_file,
        help="export configuration file to create (env: PARAMOUNT_EXPORTS_FILE)",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.help:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    config = RunConfig(
        threads=args.threads,
        preserve=args.preserve,
        verbose=args.verbose,
        exports_file=args.exports_file,
    )
    result = LifecycleController(config).run()
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
