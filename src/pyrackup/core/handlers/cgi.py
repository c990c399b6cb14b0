"""Reference adapter serving one request as a CGI program."""
from __future__ import annotations

from typing import Any, Callable, Dict
from wsgiref.handlers import CGIHandler


class CGIAdapter:
    """One-shot CGI execution; there is no server loop to shut down."""

    name = "CGI"

    def run(self, app: Callable[..., Any], options: Dict[str, Any]) -> None:
        CGIHandler().run(app)


__all__ = ["CGIAdapter"]
