"""Reference adapter on top of :mod:`wsgiref.simple_server`."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

logger = logging.getLogger(__name__)


class _QuietRequestHandler(WSGIRequestHandler):
    # Request lines are logged by the CommonLogger middleware instead.
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug(format, *args)


class WSGIRefAdapter:
    """Serve with the standard library's single-threaded reference server."""

    name = "WSGIRef"

    def __init__(self) -> None:
        self.httpd: Optional[WSGIServer] = None
        self._shutdown_requested = threading.Event()

    def run(self, app: Callable[..., Any], options: Dict[str, Any]) -> None:
        host = str(options.get("host") or "0.0.0.0")
        port = int(options.get("port") or 0)
        self.httpd = make_server(host, port, app, handler_class=_QuietRequestHandler)
        bound_host, bound_port = self.httpd.server_address[:2]
        logger.info("WSGIRef serving on http://%s:%s", bound_host, bound_port)
        try:
            self.httpd.serve_forever(poll_interval=float(options.get("poll_interval", 0.5)))
        finally:
            self.httpd.server_close()
            logger.info("WSGIRef stopped")

    def shutdown(self) -> None:
        """Ask the serving loop to stop; safe to call from a signal handler.

        ``serve_forever`` is usually on the main thread, which is also where
        signal handlers run, so the blocking ``shutdown()`` is issued from a
        helper thread. Repeated calls are no-ops.
        """
        if self.httpd is None or self._shutdown_requested.is_set():
            return
        self._shutdown_requested.set()
        threading.Thread(target=self.httpd.shutdown, name="wsgiref-shutdown", daemon=True).start()


__all__ = ["WSGIRefAdapter"]
