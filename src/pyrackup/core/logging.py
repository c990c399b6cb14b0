from __future__ import annotations

import logging
import sys

from pyrackup.data import read_yaml

LOGGER_NAME = "pyrackup"

_INSTALLED_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    try:
        return int(getattr(logging, name.upper()))
    except (AttributeError, TypeError, ValueError):
        return logging.INFO


def _defaults() -> dict[str, str]:
    section = read_yaml("config", "defaults.yaml").get("logging") or {}
    return {
        "level": str(section.get("level", "INFO")),
        "format": str(section.get("format", "%(levelname)s %(name)s: %(message)s")),
    }


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``pyrackup`` logger.

    Idempotent per-process: a second call only adjusts the level.
    """
    global _INSTALLED_HANDLER

    defaults = _defaults()
    resolved = _level_from_name(level or defaults["level"])

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)

    if _INSTALLED_HANDLER is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(defaults["format"]))
        logger.addHandler(handler)
        _INSTALLED_HANDLER = handler

    _INSTALLED_HANDLER.setLevel(resolved)
    return logger


def set_debug_logging() -> None:
    """Switch the ``pyrackup`` logger to DEBUG for the rest of the process."""
    configure_logging("DEBUG")


def reset_logging_for_tests() -> None:
    """Test-only: remove the installed handler."""
    global _INSTALLED_HANDLER
    logger = logging.getLogger(LOGGER_NAME)
    if _INSTALLED_HANDLER is not None:
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
    _INSTALLED_HANDLER = None
    logger.setLevel(logging.NOTSET)


__all__ = ["LOGGER_NAME", "configure_logging", "set_debug_logging", "reset_logging_for_tests"]
