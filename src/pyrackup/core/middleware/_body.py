"""Response body wrapper that runs a callback once the server closes it."""
from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List, Optional


class BodyProxy:
    """Iterate ``body`` unchanged; call ``on_close`` exactly once on ``close()``."""

    def __init__(self, body: Iterable[bytes], on_close: Callable[[], Any]) -> None:
        self.body = body
        self._on_close = on_close
        self._closed = False

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.body)

    @property
    def buffered(self) -> Optional[List[bytes]]:
        """The chunks, when the wrapped body is an in-memory list or tuple."""
        if isinstance(self.body, BodyProxy):
            return self.body.buffered
        if isinstance(self.body, (list, tuple)):
            return list(self.body)
        return None

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            close = getattr(self.body, "close", None)
            if close is not None:
                close()
        finally:
            self._on_close()


def buffered_chunks(body: Any) -> Optional[List[bytes]]:
    if isinstance(body, (list, tuple)):
        return list(body)
    if isinstance(body, BodyProxy):
        return body.buffered
    return None


def header_value(headers: Iterable[tuple], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers:
        if key.lower() == lowered:
            return value
    return None


# Statuses that never carry a message body.
STATUS_WITH_NO_ENTITY_BODY = frozenset({204, 304}) | frozenset(range(100, 200))


def status_code(status: str) -> int:
    return int(str(status).split(" ", 1)[0])


__all__ = ["BodyProxy", "buffered_chunks", "header_value", "status_code", "STATUS_WITH_NO_ENTITY_BODY"]
