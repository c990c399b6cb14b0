"""pyrackup command-line interface."""

from __future__ import annotations

from typing import Sequence


def main(argv: Sequence[str] | None = None) -> int:
    """Lazy import of the dispatcher to avoid import cycles with pyrackup.core"""
    from ._dispatcher import main as _main

    return _main(argv)


__all__ = ["main"]
