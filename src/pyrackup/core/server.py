"""Server bootstrap and process lifecycle.

``Server(options).start()`` runs the startup sequence in a fixed order::

    INIT -> APP_LOADED -> (DAEMONIZED) -> (PID_LOCKED) -> SIGNAL_ARMED -> RUNNING

1. apply startup flags (warnings, sys.path, imports, debug logging)
2. with a pid file configured, refuse to start if another server holds it
3. load and wrap the application, before daemonizing, so the rackup file is
   read relative to the original working directory
4. daemonize, if requested
5. write the pid file (after daemonizing, so it holds the daemon's pid)
6. arm SIGINT: graceful adapter shutdown when supported, otherwise exit
7. hand the pipeline to the server adapter, which blocks until it stops
"""
from __future__ import annotations

import enum
import importlib
import logging
import pprint
import signal
import sys
import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from pyrackup.core.exceptions import LifecycleError
from pyrackup.core.handlers import ServerAdapter, default_adapter, get_adapter
from pyrackup.core.loader import ApplicationLoader
from pyrackup.core.logging import set_debug_logging
from pyrackup.core.middleware.stack import (
    MiddlewareTable,
    build_middleware_stack,
    default_middleware_by_environment,
)
from pyrackup.core.options import Options, resolve_options
from pyrackup.core.process import check_pid, daemonize, write_pid

logger = logging.getLogger(__name__)


class LifecycleState(str, enum.Enum):
    INIT = "init"
    APP_LOADED = "app_loaded"
    DAEMONIZED = "daemonized"
    PID_LOCKED = "pid_locked"
    SIGNAL_ARMED = "signal_armed"
    RUNNING = "running"


_ALLOWED_TRANSITIONS: Dict[LifecycleState, Tuple[LifecycleState, ...]] = {
    LifecycleState.INIT: (LifecycleState.APP_LOADED,),
    LifecycleState.APP_LOADED: (
        LifecycleState.DAEMONIZED,
        LifecycleState.PID_LOCKED,
        LifecycleState.SIGNAL_ARMED,
    ),
    LifecycleState.DAEMONIZED: (LifecycleState.PID_LOCKED, LifecycleState.SIGNAL_ARMED),
    LifecycleState.PID_LOCKED: (LifecycleState.SIGNAL_ARMED,),
    LifecycleState.SIGNAL_ARMED: (LifecycleState.RUNNING,),
    LifecycleState.RUNNING: (),
}


@dataclass(frozen=True)
class StartupFlags:
    """Process-wide settings applied once at the top of ``start()``.

    Their effects (warning filters, ``sys.path`` entries, imported modules,
    debug logging) last for the rest of the process and are never undone.
    """

    warn: bool = False
    debug: bool = False
    include: Tuple[str, ...] = field(default_factory=tuple)
    require: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_options(cls, options: Options) -> "StartupFlags":
        return cls(
            warn=bool(options.get("warn")),
            debug=bool(options.get("debug")),
            include=tuple(_as_list(options.get("include"))),
            require=tuple(_as_list(options.get("require"))),
        )

    def apply(self) -> None:
        if self.warn:
            warnings.simplefilter("default")
        if self.include:
            sys.path[0:0] = [p for p in self.include if p not in sys.path]
        for module in self.require:
            importlib.import_module(module)
        if self.debug:
            set_debug_logging()


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def interrupt_handler(shutdown: Optional[Callable[[], None]]) -> Callable[[int, Any], None]:
    """Build a SIGINT handler that only requests shutdown.

    The handler holds nothing but ``shutdown``; without one it exits.
    """

    def _handler(signum: int, frame: Any) -> None:
        if shutdown is not None:
            logger.info("Received signal %d, shutting down", signum)
            shutdown()
        else:
            sys.exit(0)

    return _handler


class Server:
    """Prepare a WSGI pipeline and run it under a server adapter.

    Options (see ``pyrackup --help`` for the command-line spelling):

    * ``app``: a WSGI application to run (overrides ``config``)
    * ``config``: rackup file to load
    * ``builder``: inline builder source (overrides ``config``)
    * ``environment``: picks the middleware stack (``development``,
      ``deployment``; anything else means no middleware)
    * ``server``: adapter name, e.g. ``wsgiref``, ``cgi`` or ``module:Class``
    * ``daemonize``: detach into the background
    * ``pid``: pid file path
    * ``host`` / ``port``: passed to the adapter
    * ``debug`` / ``warn`` / ``include`` / ``require``: startup flags
    * ``quiet``: disable request logging
    """

    middleware_table: Optional[MiddlewareTable] = None

    def __init__(self, options: Optional[Options] = None) -> None:
        self._options = options
        self._loader: Optional[ApplicationLoader] = None
        self._wrapped_app: Optional[Callable[..., Any]] = None
        self._server: Optional[ServerAdapter] = None
        self.state = LifecycleState.INIT

    @classmethod
    def start_with(cls, options: Optional[Options] = None) -> None:
        cls(options).start()

    @property
    def options(self) -> Options:
        if self._options is None:
            self._options = resolve_options(sys.argv[1:])
        return self._options

    @options.setter
    def options(self, value: Options) -> None:
        self._options = value

    @classmethod
    def middleware(cls) -> MiddlewareTable:
        if cls.middleware_table is None:
            cls.middleware_table = default_middleware_by_environment()
        return cls.middleware_table

    @property
    def loader(self) -> ApplicationLoader:
        if self._loader is None:
            self._loader = ApplicationLoader(self.options)
        return self._loader

    @property
    def app(self) -> Callable[..., Any]:
        return self.loader.load()

    @property
    def wrapped_app(self) -> Callable[..., Any]:
        if self._wrapped_app is None:
            app = self.app
            self._wrapped_app = build_middleware_stack(
                app,
                str(self.options.get("environment") or ""),
                self.middleware(),
                self,
            )
        return self._wrapped_app

    @property
    def server(self) -> ServerAdapter:
        if self._server is None:
            self._server = get_adapter(self.options.get("server")) or default_adapter(self.options)
        return self._server

    def _transition(self, target: LifecycleState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise LifecycleError(
                f"cannot move from {self.state.value} to {target.value}",
                context={"from": self.state.value, "to": target.value},
            )
        logger.debug("Lifecycle %s -> %s", self.state.value, target.value)
        self.state = target

    def start(self) -> None:
        if self.state is not LifecycleState.INIT:
            raise LifecycleError("server already started", context={"state": self.state.value})

        flags = StartupFlags.from_options(self.options)
        flags.apply()
        if flags.debug:
            logger.debug("Server adapter: %s", self.server.name)
            logger.debug("Pipeline:\n%s", pprint.pformat(self.wrapped_app))
            logger.debug("Application:\n%s", pprint.pformat(self.app))

        if self.options.get("pid"):
            check_pid(self.options["pid"])

        # Build before daemonizing: the rackup file is resolved against the
        # original working directory, and its header may add a pid path.
        self.wrapped_app  # noqa: B018
        self._transition(LifecycleState.APP_LOADED)

        if self.options.get("daemonize"):
            daemonize()
            self._transition(LifecycleState.DAEMONIZED)

        if self.options.get("pid"):
            write_pid(self.options["pid"])
            self._transition(LifecycleState.PID_LOCKED)

        signal.signal(signal.SIGINT, interrupt_handler(getattr(self.server, "shutdown", None)))
        self._transition(LifecycleState.SIGNAL_ARMED)

        self._transition(LifecycleState.RUNNING)
        logger.info(
            "Starting %s (%s) on %s:%s",
            self.server.name,
            self.options.get("environment"),
            self.options.get("host"),
            self.options.get("port"),
        )
        self.server.run(self.wrapped_app, self.options)


__all__ = ["LifecycleState", "Server", "StartupFlags", "interrupt_handler"]
