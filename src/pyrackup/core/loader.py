"""Lazy, memoized construction of the raw WSGI application."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pyrackup.cli._args import parse_option_args
from pyrackup.core.builder import Builder, OptionParser
from pyrackup.core.schemas import validate_payload

logger = logging.getLogger(__name__)

_UNSET = object()


class ApplicationLoader:
    """Builds the application once and hands back the same object afterwards.

    Construction paths, in priority order:

    - ``options["app"]``: an already-built application.
    - ``options["builder"]``: inline builder source; no file I/O.
    - ``options["config"]``: a rackup file. Options declared in its header are
      merged into ``options`` (file values win) and the result is validated
      against the options schema before the app is returned.

    The shared ``options`` mapping is mutated by the config-file path. That
    merge happens once, on the first ``load()``.
    """

    def __init__(
        self,
        options: Dict[str, Any],
        *,
        option_parser: OptionParser | None = None,
    ) -> None:
        self.options = options
        self.option_parser = option_parser or parse_option_args
        self._app: Any = _UNSET

    @property
    def loaded(self) -> bool:
        return self._app is not _UNSET

    def load(self) -> Callable[..., Any]:
        if self._app is _UNSET:
            self._app = self._build()
        return self._app

    def _build(self) -> Callable[..., Any]:
        app = self.options.get("app")
        if app is not None:
            return app
        if self.options.get("builder"):
            return self._build_from_string()
        return self._build_from_config()

    def _build_from_string(self) -> Callable[..., Any]:
        logger.debug("Building application from inline builder source")
        return Builder.new_from_string(str(self.options["builder"]))

    def _build_from_config(self) -> Callable[..., Any]:
        config: Optional[str] = self.options.get("config")
        if not config or not Path(config).is_file():
            raise SystemExit(f"configuration {config} not found")

        logger.debug("Loading configuration %s", config)
        app, file_options = Builder.parse_file(config, self.option_parser)
        if file_options:
            logger.debug("Configuration %s contributes options: %s", config, file_options)
            self.options.update(file_options)
            validate_payload(self.options, "options")
        return app


__all__ = ["ApplicationLoader"]
