"""Catch uncaught application exceptions and render a 500 page.

Browsers (``Accept: text/html``) get an HTML page with the traceback and the
request environment; other clients get plain text.
"""
from __future__ import annotations

import logging
import sys
import traceback
from functools import lru_cache
from typing import Any, Callable, Dict, List, Tuple

from jinja2 import Environment, select_autoescape

from pyrackup.data import read_text

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "show_exceptions.html.j2"


@lru_cache(maxsize=1)
def _template():
    env = Environment(
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=select_autoescape(default=True, default_for_string=True),
    )
    return env.from_string(read_text("templates", TEMPLATE_NAME))


def _prefers_html(environ: Dict[str, Any]) -> bool:
    accept = str(environ.get("HTTP_ACCEPT") or "")
    return "text/html" in accept or ("*/*" in accept and "text/plain" not in accept)


class ShowExceptions:
    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]):
        try:
            return self.app(environ, start_response)
        except Exception as exc:
            exc_info = sys.exc_info()
            trace = "".join(traceback.format_exception(*exc_info))
            logger.debug("Uncaught exception in application", exc_info=exc_info)

            errors = environ.get("wsgi.errors")
            if errors is not None:
                errors.write(trace)
                errors.flush()

            content_type, body = self.render(environ, exc, trace)
            headers: List[Tuple[str, str]] = [
                ("Content-Type", content_type),
                ("Content-Length", str(len(body))),
            ]
            start_response("500 Internal Server Error", headers, exc_info)
            return [body]

    def render(self, environ: Dict[str, Any], exc: BaseException, trace: str) -> Tuple[str, bytes]:
        if not _prefers_html(environ):
            return "text/plain; charset=utf-8", f"{type(exc).__name__}: {exc}\n{trace}".encode("utf-8")

        html = _template().render(
            exc_type=type(exc).__name__,
            message=str(exc),
            path=environ.get("PATH_INFO", "/"),
            traceback=trace,
            environ=sorted((str(k), repr(v)) for k, v in environ.items()),
        )
        return "text/html; charset=utf-8", html.encode("utf-8")


__all__ = ["ShowExceptions"]
