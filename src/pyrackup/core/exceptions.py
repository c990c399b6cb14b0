from __future__ import annotations

from typing import Any, Dict, Mapping


class PyrackupError(Exception):
    """Base exception for pyrackup."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class OptionsError(PyrackupError, ValueError):
    """Raised when resolved options fail validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PyrackupError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class BuilderError(PyrackupError):
    """Raised when a rackup file or builder string cannot produce an application."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        super().__init__(message, context=ctx)


class LifecycleError(PyrackupError, RuntimeError):
    """Raised when a lifecycle step is attempted out of order."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PyrackupError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class PidFileError(PyrackupError, OSError):
    """Raised when a pid file cannot be acquired or a stale one cannot be removed."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        PyrackupError.__init__(self, message, context=ctx)
        OSError.__init__(self, message)


class AdapterNotFoundError(PyrackupError, LookupError):
    """Raised when a configured server adapter name cannot be resolved."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PyrackupError.__init__(self, message, context=context)
        LookupError.__init__(self, message)


__all__ = [
    "PyrackupError",
    "OptionsError",
    "BuilderError",
    "LifecycleError",
    "PidFileError",
    "AdapterNotFoundError",
]
