"""pyrackup core library: options, application loading, middleware and process lifecycle.

Import ``Server`` from ``pyrackup.core.server``; only the exceptions module is
re-exported here so submodules can be imported without pulling in the whole
lifecycle stack.
"""

from . import exceptions  # noqa: F401

__all__ = ["exceptions"]
