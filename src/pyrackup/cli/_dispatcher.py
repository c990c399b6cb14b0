"""
Command-line entry point: ``pyrackup [options] [config]``.
"""

from __future__ import annotations

import sys
from typing import Sequence

from pyrackup.core.exceptions import OptionsError, PyrackupError
from pyrackup.core.logging import configure_logging
from pyrackup.core.options import resolve_options
from pyrackup.core.server import Server


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the pyrackup CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        options = resolve_options(argv)
    except OptionsError as exc:
        for problem in exc.context.get("errors") or [str(exc)]:
            print(f"pyrackup: invalid option: {problem}", file=sys.stderr)
        return 2

    configure_logging(options.get("log_level"))

    try:
        Server(options).start()
    except PyrackupError as exc:
        print(f"pyrackup: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
