"""Server adapter lookup.

An adapter is any object with a ``name`` attribute and a blocking
``run(app, options)`` method; it may also offer ``shutdown()``.
"""
from __future__ import annotations

import importlib
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

from pyrackup.core.exceptions import AdapterNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class ServerAdapter(Protocol):
    name: str

    def run(self, app: Callable[..., Any], options: Dict[str, Any]) -> None: ...


AdapterFactory = Callable[[], ServerAdapter]

_REGISTRY: Dict[str, AdapterFactory] = {}


def register(name: str, factory: AdapterFactory) -> None:
    _REGISTRY[name.strip().lower()] = factory


def registered_names() -> list[str]:
    return sorted(_REGISTRY)


def _import_adapter(target: str) -> ServerAdapter:
    module_name, _, attr = target.partition(":")
    try:
        module = importlib.import_module(module_name)
        obj = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise AdapterNotFoundError(
            f"cannot import server adapter {target!r}: {exc}",
            context={"server": target},
        ) from exc
    return obj() if isinstance(obj, type) else obj


def get_adapter(name: Optional[str]) -> Optional[ServerAdapter]:
    """Resolve ``name`` to a fresh adapter; ``None`` when no name is configured.

    ``module:attr`` names are imported (a class is instantiated).
    """
    if not name or not str(name).strip():
        return None
    key = str(name).strip()
    if ":" in key:
        return _import_adapter(key)

    factory = _REGISTRY.get(key.lower())
    if factory is None:
        raise AdapterNotFoundError(
            f"unknown server adapter {key!r} (available: {', '.join(registered_names())})",
            context={"server": key},
        )
    return factory()


def default_adapter(options: Mapping[str, Any], environ: Mapping[str, str] | None = None) -> ServerAdapter:
    """CGI when running under a CGI gateway, otherwise the wsgiref server."""
    env = os.environ if environ is None else environ
    name = "cgi" if "REQUEST_METHOD" in env else "wsgiref"
    logger.debug("No server configured, defaulting to %s", name)
    adapter = get_adapter(name)
    assert adapter is not None
    return adapter


__all__ = [
    "AdapterFactory",
    "ServerAdapter",
    "default_adapter",
    "get_adapter",
    "register",
    "registered_names",
]
