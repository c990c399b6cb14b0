"""Close request tempfiles once the response body has been closed."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from ._body import BodyProxy

logger = logging.getLogger(__name__)

TEMPFILES_KEY = "pyrackup.tempfiles"


class TempfileReaper:
    """Applications append open tempfiles to ``environ["pyrackup.tempfiles"]``."""

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]):
        environ.setdefault(TEMPFILES_KEY, [])
        result = self.app(environ, start_response)
        return BodyProxy(result, lambda: self.reap(environ))

    @staticmethod
    def reap(environ: Dict[str, Any]) -> None:
        files: List[Any] = environ.get(TEMPFILES_KEY) or []
        for fh in files:
            try:
                fh.close()
            except OSError as exc:
                logger.warning("Failed to close tempfile %r: %s", fh, exc)


__all__ = ["TempfileReaper", "TEMPFILES_KEY"]
