"""Apache common-log-format request logging.

Each request produces one line, written when the server closes the body::

    127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /path?q=1 HTTP/1.1" 200 12 0.0021
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Optional, TextIO, Union

from ._body import BodyProxy, status_code

LOG_FORMAT = '%s - %s [%s] "%s %s%s %s" %d %s %0.4f\n'


class _CountingBody(BodyProxy):
    def __init__(self, body: Any, on_close: Callable[[], Any]) -> None:
        super().__init__(body, on_close)
        self.length = 0

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self.body:
            self.length += len(chunk)
            yield chunk


class CommonLogger:
    """Log requests to a stream or a :class:`logging.Logger`.

    With no target the log line goes to ``environ["wsgi.errors"]``.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        target: Union[TextIO, logging.Logger, None] = None,
    ) -> None:
        self.app = app
        self.target = target

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]):
        began = time.monotonic()
        seen: Dict[str, str] = {}

        def _start(status: str, headers: List[tuple], exc_info: Any = None):
            seen["status"] = status
            return start_response(status, headers, exc_info)

        result = self.app(environ, _start)
        body: Optional[_CountingBody] = None

        def _on_close() -> None:
            self.log(environ, seen.get("status", "500"), body.length if body else 0, began)

        body = _CountingBody(result, _on_close)
        return body

    def log(self, environ: Dict[str, Any], status: str, length: int, began: float) -> None:
        query = environ.get("QUERY_STRING") or ""
        line = LOG_FORMAT % (
            environ.get("HTTP_X_FORWARDED_FOR") or environ.get("REMOTE_ADDR") or "-",
            environ.get("REMOTE_USER") or "-",
            time.strftime("%d/%b/%Y:%H:%M:%S %z"),
            environ.get("REQUEST_METHOD", "-"),
            environ.get("PATH_INFO", ""),
            f"?{query}" if query else "",
            environ.get("SERVER_PROTOCOL", "-"),
            status_code(status),
            str(length) if length else "-",
            time.monotonic() - began,
        )

        target = self.target if self.target is not None else environ.get("wsgi.errors")
        if isinstance(target, logging.Logger):
            target.info(line.rstrip("\n"))
        elif target is not None:
            target.write(line)
            flush = getattr(target, "flush", None)
            if flush is not None:
                flush()


__all__ = ["CommonLogger", "LOG_FORMAT"]
