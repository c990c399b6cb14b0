"""Environment-keyed middleware stacks and their assembly.

A stack entry is either a concrete :class:`Middleware` or a
:class:`MiddlewareFactory` that is asked, at build time, whether it wants to
contribute a layer for the server being started.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:
    from pyrackup.core.server import Server


@dataclass(frozen=True)
class Middleware:
    """A component built as ``component(app, *args)``."""

    component: Callable[..., Any]
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class MiddlewareFactory:
    """Deferred entry; ``factory(server)`` returns a :class:`Middleware` or ``None``."""

    factory: Callable[["Server"], Optional[Middleware]]


MiddlewareSpec = Union[Middleware, MiddlewareFactory]


@dataclass(frozen=True)
class MiddlewareTable:
    """Read-only mapping from environment name to an ordered spec list.

    Unknown environments resolve to an empty stack; lookups never add keys.
    """

    stacks: Mapping[str, Tuple[MiddlewareSpec, ...]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[MiddlewareSpec]]) -> "MiddlewareTable":
        return cls({name: tuple(specs) for name, specs in mapping.items()})

    def for_environment(self, environment: str) -> Tuple[MiddlewareSpec, ...]:
        return self.stacks.get(environment, ())

    def __contains__(self, environment: object) -> bool:
        return environment in self.stacks


def build_middleware_stack(
    app: Callable[..., Any],
    environment: str,
    table: MiddlewareTable,
    server: "Server",
) -> Callable[..., Any]:
    """Wrap ``app`` with the stack for ``environment``.

    Entries are applied last-to-first, so the first listed component ends up
    as the outermost wrapper.
    """
    current = app
    for spec in reversed(table.for_environment(environment)):
        if isinstance(spec, MiddlewareFactory):
            resolved = spec.factory(server)
            if resolved is None:
                continue
            spec = resolved
        if not isinstance(spec, Middleware):
            raise TypeError(f"unsupported middleware entry: {spec!r}")
        current = spec.component(current, *spec.args)
    return current


def logging_middleware() -> MiddlewareFactory:
    """Request logging, unless the adapter is CGI or ``quiet`` is set."""
    from pyrackup.core.middleware.common_logger import CommonLogger

    def _factory(server: "Server") -> Optional[Middleware]:
        if "CGI" in str(server.server.name) or server.options.get("quiet"):
            return None
        return Middleware(CommonLogger, (sys.stderr,))

    return MiddlewareFactory(_factory)


def default_middleware_by_environment() -> MiddlewareTable:
    from pyrackup.core.middleware.chunked import Chunked
    from pyrackup.core.middleware.content_length import ContentLength
    from pyrackup.core.middleware.lint import Lint
    from pyrackup.core.middleware.show_exceptions import ShowExceptions
    from pyrackup.core.middleware.tempfile_reaper import TempfileReaper

    stacks: Dict[str, Tuple[MiddlewareSpec, ...]] = {
        "deployment": (
            Middleware(ContentLength),
            Middleware(Chunked),
            logging_middleware(),
            Middleware(TempfileReaper),
        ),
        "development": (
            Middleware(ContentLength),
            Middleware(Chunked),
            logging_middleware(),
            Middleware(ShowExceptions),
            Middleware(Lint),
            Middleware(TempfileReaper),
        ),
    }
    return MiddlewareTable(stacks)


__all__ = [
    "Middleware",
    "MiddlewareFactory",
    "MiddlewareSpec",
    "MiddlewareTable",
    "build_middleware_stack",
    "default_middleware_by_environment",
    "logging_middleware",
]
