"""
Option resolution (YAML defaults, environment, command-line flags).

Sources, lowest to highest priority:
1. Bundled defaults: ``pyrackup.data/config/defaults.yaml``
2. Environment: ``$RACKUP_ENV`` selects the environment (and thereby the host)
3. Command-line flags

A rackup file may contribute further options later; those are merged by the
application loader, not here.
"""
from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

from pyrackup.cli._args import parse_option_args
from pyrackup.core.schemas import validate_payload
from pyrackup.data import read_yaml

logger = logging.getLogger(__name__)

ENV_VAR = "RACKUP_ENV"
DEFAULT_ENVIRONMENT = "development"

Options = Dict[str, Any]


def default_host(environment: str) -> str:
    hosts = read_yaml("config", "defaults.yaml").get("hosts") or {}
    return str(hosts.get(environment) or hosts.get("default") or "0.0.0.0")


def default_options(environ: Mapping[str, str] | None = None) -> Options:
    """Return a fresh defaults mapping for the environment named by ``$RACKUP_ENV``."""
    env = os.environ if environ is None else environ
    bundled = read_yaml("config", "defaults.yaml").get("options") or {}
    options: Options = copy.deepcopy(dict(bundled))

    environment = env.get(ENV_VAR) or DEFAULT_ENVIRONMENT
    options["environment"] = environment
    options["host"] = default_host(environment)
    return options


def resolve_options(
    argv: Sequence[str],
    *,
    environ: Mapping[str, str] | None = None,
    validate: bool = True,
) -> Options:
    """Resolve the final options mapping for a run.

    - argv is ignored entirely when ``REQUEST_METHOD`` is set, so CGI
      ISINDEX query arguments are never interpreted as flags.
    - A host given on the command line wins; otherwise the host follows the
      (possibly overridden) environment.
    - The config path is made absolute.
    - The resolved environment is written back to ``$RACKUP_ENV`` so re-entrant
      loads and child processes observe the same value.
    """
    env = os.environ if environ is None else environ
    args = [] if "REQUEST_METHOD" in env else list(argv)

    options = default_options(env)
    given = parse_option_args(args)
    options.update(given)
    if "host" not in given:
        options["host"] = default_host(str(options["environment"]))

    if options.get("config"):
        options["config"] = str(Path(str(options["config"])).expanduser().resolve())

    if validate:
        validate_payload(options, "options")

    os.environ[ENV_VAR] = str(options["environment"])
    logger.debug("Resolved options: %s", options)
    return options


__all__ = [
    "ENV_VAR",
    "DEFAULT_ENVIRONMENT",
    "Options",
    "default_host",
    "default_options",
    "resolve_options",
]
