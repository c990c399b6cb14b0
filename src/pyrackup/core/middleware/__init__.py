"""WSGI middleware stacks and the built-in components they are made of."""

from .chunked import Chunked
from .common_logger import CommonLogger
from .content_length import ContentLength
from .lint import Lint
from .show_exceptions import ShowExceptions
from .stack import (
    Middleware,
    MiddlewareFactory,
    MiddlewareSpec,
    MiddlewareTable,
    build_middleware_stack,
    default_middleware_by_environment,
    logging_middleware,
)
from .tempfile_reaper import TempfileReaper

__all__ = [
    "Chunked",
    "CommonLogger",
    "ContentLength",
    "Lint",
    "ShowExceptions",
    "TempfileReaper",
    "Middleware",
    "MiddlewareFactory",
    "MiddlewareSpec",
    "MiddlewareTable",
    "build_middleware_stack",
    "default_middleware_by_environment",
    "logging_middleware",
]
