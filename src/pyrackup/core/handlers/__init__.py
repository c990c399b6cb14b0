"""Server adapters: resolution by name and the bundled reference adapters."""

from .cgi import CGIAdapter
from .registry import (
    AdapterFactory,
    ServerAdapter,
    default_adapter,
    get_adapter,
    register,
    registered_names,
)
from .simple import WSGIRefAdapter

register("wsgiref", WSGIRefAdapter)
register("cgi", CGIAdapter)

__all__ = [
    "AdapterFactory",
    "CGIAdapter",
    "ServerAdapter",
    "WSGIRefAdapter",
    "default_adapter",
    "get_adapter",
    "register",
    "registered_names",
]
