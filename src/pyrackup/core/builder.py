"""Builder for WSGI applications described by rackup files.

A rackup file (``config.ru`` by default) is Python source evaluated with two
names in scope::

    #\\ --port 8080 --env deployment
    from myproject.wsgi import application

    use(SomeMiddleware, "arg")
    run(application)

The optional first line beginning with ``#\\`` carries command-line options
that the file contributes to the run. Plain ``*.py`` files are loaded as
modules and their ``application`` (or ``app``) attribute is served.
"""
from __future__ import annotations

import importlib.util
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pyrackup.cli._args import split_header
from pyrackup.core.exceptions import BuilderError

HEADER_PREFIX = "#\\"

OptionParser = Callable[[Sequence[str]], Dict[str, Any]]


class Builder:
    """Collects ``use``/``run`` declarations and assembles them into one app."""

    def __init__(self) -> None:
        self._use: List[Tuple[Callable[..., Any], tuple, dict]] = []
        self._run: Optional[Callable[..., Any]] = None

    def use(self, component: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._use.append((component, args, kwargs))

    def run(self, app: Callable[..., Any]) -> None:
        self._run = app

    def to_app(self) -> Callable[..., Any]:
        """Return the assembled app; the first ``use`` is the outermost layer."""
        if self._run is None:
            raise BuilderError("missing run() statement")
        app = self._run
        for component, args, kwargs in reversed(self._use):
            app = component(app, *args, **kwargs)
        return app

    def _namespace(self, filename: str) -> Dict[str, Any]:
        return {
            "__name__": "__rackup__",
            "__file__": filename,
            "use": self.use,
            "run": self.run,
        }

    @classmethod
    def new_from_string(cls, source: str, filename: str = "<builder>") -> Callable[..., Any]:
        """Evaluate ``source`` as a builder body and return the assembled app."""
        builder = cls()
        try:
            code = compile(source, filename, "exec")
            exec(code, builder._namespace(filename))  # noqa: S102
        except BuilderError:
            raise
        except Exception as exc:
            raise BuilderError(f"failed to evaluate builder: {exc}", path=filename) from exc
        return builder.to_app()

    @classmethod
    def parse_file(
        cls,
        path: str | Path,
        option_parser: OptionParser | None = None,
    ) -> Tuple[Callable[..., Any], Dict[str, Any]]:
        """Load ``path`` and return ``(app, options)``."""
        path = Path(path)
        if path.suffix == ".py":
            return cls.load_module_app(path), {}

        source = path.read_text(encoding="utf-8")
        if source.startswith("\ufeff"):
            source = source[1:]

        options: Dict[str, Any] = {}
        first_line, _, _ = source.partition("\n")
        if first_line.startswith(HEADER_PREFIX) and option_parser is not None:
            options = option_parser(split_header(first_line[len(HEADER_PREFIX):]))

        try:
            app = cls.new_from_string(source, filename=str(path))
        except BuilderError as exc:
            exc.context.setdefault("path", str(path))
            raise
        return app, options

    @staticmethod
    def load_module_app(path: Path) -> Callable[..., Any]:
        """Import a Python file and return its WSGI ``application`` or ``app``."""
        spec = importlib.util.spec_from_file_location(f"_pyrackup_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise BuilderError(f"cannot load {path}", path=str(path))
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise BuilderError(f"failed to import {path}: {exc}", path=str(path)) from exc

        for attr in ("application", "app"):
            app = getattr(module, attr, None)
            if app is not None:
                return app
        raise BuilderError(f"{path} defines neither 'application' nor 'app'", path=str(path))


__all__ = ["Builder", "HEADER_PREFIX"]
