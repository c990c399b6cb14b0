"""Command-line option registration shared by the CLI and rackup file headers.

Every flag defaults to ``argparse.SUPPRESS`` so a parse only reports the
options that were actually given. The same parser reads the ``#\\`` header
line of a rackup file, which is how a config file contributes options.
"""
from __future__ import annotations

import argparse
import os
import shlex
from typing import Any, Dict, List, Sequence

SUPPRESS = argparse.SUPPRESS


class _ServerOptionAction(argparse.Action):
    """Collect ``-O NAME[=VALUE]`` pairs into a single mapping."""

    def __call__(self, parser, namespace, values, option_string=None):  # type: ignore[no-untyped-def]
        name, sep, value = str(values).partition("=")
        if not name:
            parser.error(f"invalid server option: {values!r}")
        collected = dict(getattr(namespace, self.dest, None) or {})
        collected[name] = value if sep else True
        setattr(namespace, self.dest, collected)


class _PathListAction(argparse.Action):
    """Accumulate ``-I dir1:dir2`` style path lists."""

    def __call__(self, parser, namespace, values, option_string=None):  # type: ignore[no-untyped-def]
        collected = list(getattr(namespace, self.dest, None) or [])
        collected.extend(p for p in str(values).split(os.pathsep) if p)
        setattr(namespace, self.dest, collected)


def add_interpreter_flags(parser: argparse.ArgumentParser) -> None:
    """Add interpreter-level flags (require, include, warn, debug, quiet).

    Args:
        parser: ArgumentParser to add the flags to
    """
    group = parser.add_argument_group("interpreter options")
    group.add_argument(
        "-r",
        "--require",
        action="append",
        metavar="MODULE",
        default=SUPPRESS,
        help="Import MODULE before loading the application",
    )
    group.add_argument(
        "-I",
        "--include",
        action=_PathListAction,
        metavar="PATH",
        default=SUPPRESS,
        help=f"Prepend PATH to sys.path ({os.pathsep}-separated; may be repeated)",
    )
    group.add_argument("-w", "--warn", action="store_true", default=SUPPRESS, help="Turn Python warnings on")
    group.add_argument("-d", "--debug", action="store_true", default=SUPPRESS, help="Set debugging flags")
    group.add_argument("-q", "--quiet", action="store_true", default=SUPPRESS, help="Turn off request logging")
    group.add_argument(
        "--log-level",
        metavar="LEVEL",
        default=SUPPRESS,
        help="Log level for pyrackup itself (default: INFO)",
    )
    group.add_argument(
        "-b",
        "--builder",
        metavar="SOURCE",
        default=SUPPRESS,
        help="Build the application from SOURCE instead of a config file",
    )


def add_server_flags(parser: argparse.ArgumentParser) -> None:
    """Add server, binding, environment and process-management flags.

    Args:
        parser: ArgumentParser to add the flags to
    """
    group = parser.add_argument_group("server options")
    group.add_argument("-s", "--server", metavar="NAME", default=SUPPRESS, help="Serve using server adapter NAME")
    group.add_argument("-o", "--host", metavar="HOST", default=SUPPRESS, help="Listen on HOST")
    group.add_argument("-p", "--port", type=int, metavar="PORT", default=SUPPRESS, help="Use PORT (default: 9292)")
    group.add_argument(
        "-O",
        "--option",
        dest="server_options",
        action=_ServerOptionAction,
        metavar="NAME[=VALUE]",
        default=SUPPRESS,
        help="Pass NAME=VALUE to the server adapter as an option (VALUE defaults to true)",
    )
    group.add_argument(
        "-E",
        "--env",
        dest="environment",
        metavar="ENVIRONMENT",
        default=SUPPRESS,
        help="Use ENVIRONMENT for defaults and middleware (default: development)",
    )
    group.add_argument("-D", "--daemonize", action="store_true", default=SUPPRESS, help="Run daemonized in the background")
    group.add_argument("-P", "--pid", metavar="FILE", default=SUPPRESS, help="File to store the PID in")


def _get_version() -> str:
    from pyrackup import __version__

    return __version__


def build_option_parser(prog: str = "pyrackup", *, with_config: bool = True) -> argparse.ArgumentParser:
    """Build the option parser used for argv and rackup file headers."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Bootstrap and serve a WSGI application from a rackup file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        argument_default=SUPPRESS,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")
    if with_config:
        parser.add_argument("config", nargs="?", default=SUPPRESS, help="Rackup file to load (default: config.ru)")
    add_interpreter_flags(parser)
    add_server_flags(parser)
    return parser


def namespace_to_options(args: argparse.Namespace) -> Dict[str, Any]:
    """Flatten a parsed namespace into an options mapping.

    ``-O`` server options are lifted to top-level keys, as server adapters read
    them from the same mapping.
    """
    raw = dict(vars(args))
    server_options = raw.pop("server_options", None) or {}
    options: Dict[str, Any] = {}
    for key, value in raw.items():
        if key.startswith("_"):
            continue
        options[key] = value
    options.update(server_options)
    return options


def parse_option_args(argv: Sequence[str], *, prog: str = "pyrackup") -> Dict[str, Any]:
    """Parse ``argv`` and return only the options that were given."""
    parser = build_option_parser(prog)
    return namespace_to_options(parser.parse_args(list(argv)))


def split_header(line: str) -> List[str]:
    """Split a rackup header line into argv using shell quoting rules."""
    return shlex.split(line)


__all__ = [
    "add_interpreter_flags",
    "add_server_flags",
    "build_option_parser",
    "namespace_to_options",
    "parse_option_args",
    "split_header",
]
