"""Chunked transfer coding for HTTP/1.1 responses of unknown length.

``Transfer-Encoding`` is a hop-by-hop header, which PEP 3333 reserves for the
server. The coding is only applied when the server adapter opts in by setting
``environ["pyrackup.allow_chunked"]``; otherwise framing is left to the server.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, List

from ._body import STATUS_WITH_NO_ENTITY_BODY, BodyProxy, header_value, status_code

ALLOW_KEY = "pyrackup.allow_chunked"
TERM = b"\r\n"
TAIL = b"0" + TERM + TERM


def _frame(chunk: bytes) -> bytes:
    return f"{len(chunk):x}".encode("ascii") + TERM + chunk + TERM


def encode_chunks(body: Iterable[bytes]) -> Iterator[bytes]:
    for chunk in body:
        if chunk:
            yield _frame(chunk)
    yield TAIL


def _encode_when_decided(body: Iterable[bytes], state: Dict[str, bool]) -> Iterator[bytes]:
    # start_response happens during the first next() of a generator app, so
    # the decision is known before the first chunk is seen.
    for chunk in body:
        if not state["chunk"]:
            yield chunk
        elif chunk:
            yield _frame(chunk)
    if state["chunk"]:
        yield TAIL


class Chunked:
    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    def _chunkable(self, environ: Dict[str, Any], status: str, headers: List[tuple]) -> bool:
        return bool(
            environ.get(ALLOW_KEY)
            and environ.get("SERVER_PROTOCOL") == "HTTP/1.1"
            and environ.get("REQUEST_METHOD") != "HEAD"
            and status_code(status) not in STATUS_WITH_NO_ENTITY_BODY
            and header_value(headers, "Content-Length") is None
            and header_value(headers, "Transfer-Encoding") is None
        )

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]):
        state = {"chunk": False, "started": False}

        def _start(status: str, headers: List[tuple], exc_info: Any = None):
            state["started"] = True
            headers = list(headers)
            if self._chunkable(environ, status, headers):
                state["chunk"] = True
                headers.append(("Transfer-Encoding", "chunked"))
            return start_response(status, headers, exc_info)

        result = self.app(environ, _start)

        def close() -> None:
            getattr(result, "close", lambda: None)()

        if not state["started"]:
            return BodyProxy(_encode_when_decided(result, state), close)
        if not state["chunk"]:
            return result
        return BodyProxy(encode_chunks(result), close)


__all__ = ["Chunked", "ALLOW_KEY", "encode_chunks"]
