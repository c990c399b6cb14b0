"""Set Content-Length on fully-buffered responses that lack one."""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, List

from ._body import STATUS_WITH_NO_ENTITY_BODY, BodyProxy, buffered_chunks, header_value, status_code


class ContentLength:
    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]):
        captured: Dict[str, Any] = {}

        def _start(status: str, headers: List[tuple], exc_info: Any = None):
            captured["response"] = (status, list(headers), exc_info)
            return _write

        def _send_headers() -> None:
            if "write" not in captured:
                status, headers, exc_info = captured["response"]
                captured["write"] = start_response(status, headers, exc_info)

        def _write(data: bytes) -> None:
            # Legacy write() path: headers must go out as they are.
            _send_headers()
            captured["write"](data)

        def _deferred(body: Iterable[bytes]) -> Iterator[bytes]:
            # Generator apps call start_response on first iteration; the
            # length is unknown then, so headers are forwarded unchanged.
            for chunk in body:
                _send_headers()
                yield chunk
            if "response" in captured:
                _send_headers()

        result = self.app(environ, _start)
        if "write" in captured:
            return result
        if "response" not in captured:
            return BodyProxy(_deferred(result), lambda: getattr(result, "close", lambda: None)())

        status, headers, exc_info = captured["response"]
        chunks = buffered_chunks(result)
        if (
            chunks is not None
            and status_code(status) not in STATUS_WITH_NO_ENTITY_BODY
            and header_value(headers, "Content-Length") is None
            and header_value(headers, "Transfer-Encoding") is None
        ):
            headers.append(("Content-Length", str(sum(len(c) for c in chunks))))

        start_response(status, headers, exc_info)
        return result


__all__ = ["ContentLength"]
