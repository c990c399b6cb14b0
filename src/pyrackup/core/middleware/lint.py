"""Strict WSGI conformance checking for development."""
from __future__ import annotations

from typing import Any, Callable, Dict
from wsgiref.validate import validator


class Lint:
    """Wrap ``app`` with :func:`wsgiref.validate.validator`.

    Violations raise ``AssertionError`` on the offending request, which the
    exception display layer above turns into a 500 page.
    """

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app
        self._checked = validator(app)

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]):
        return self._checked(environ, start_response)


__all__ = ["Lint"]
