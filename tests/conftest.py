import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'pyrackup'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from pyrackup.core.logging import reset_logging_for_tests
from pyrackup.core.options import ENV_VAR

# resolve_options() writes the environment name back to os.environ, and CGI
# detection looks at REQUEST_METHOD. Restore both after every test.
_LEAK_PRONE_ENV_KEYS = [ENV_VAR, "REQUEST_METHOD"]
_ENV_BASELINE = {k: os.environ.get(k) for k in _LEAK_PRONE_ENV_KEYS}


@pytest.fixture(autouse=True)
def _isolate_process_state():
    """Start every test from a clean environment and logging setup."""
    for k in _LEAK_PRONE_ENV_KEYS:
        os.environ.pop(k, None)
    yield
    reset_logging_for_tests()
    for k, v in _ENV_BASELINE.items():
        if v is None:
            os.environ.pop(k, None)
        else:
            os.environ[k] = v


def hello_app(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [b"hello"]


@pytest.fixture
def app():
    return hello_app


@pytest.fixture
def rackup_file(tmp_path):
    """Write a rackup file and return its path.

    Usage: ``rackup_file("run(app)", header="-p 8080")``
    """

    def _write(body: str = "", *, header: str | None = None, name: str = "config.ru") -> Path:
        lines = []
        if header is not None:
            lines.append(f"#\\ {header}")
        lines.append("from conftest import hello_app")
        lines.append(body or "run(hello_app)")
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


class RecordingAdapter:
    """Server adapter double that records the hand-off instead of serving."""

    name = "Recording"

    def __init__(self):
        self.runs = []
        self.shutdowns = 0

    def run(self, app, options):
        self.runs.append((app, options))

    def shutdown(self):
        self.shutdowns += 1


class RecordingCGIAdapter:
    name = "CGI"

    def __init__(self):
        self.runs = []

    def run(self, app, options):
        self.runs.append((app, options))


@pytest.fixture
def recording_adapter():
    return RecordingAdapter()
