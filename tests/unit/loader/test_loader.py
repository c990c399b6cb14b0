from __future__ import annotations

import pytest

from pyrackup.core.builder import Builder
from pyrackup.core.exceptions import OptionsError
from pyrackup.core.loader import ApplicationLoader
from pyrackup.core.options import default_options

from conftest import hello_app


def test_prebuilt_app_is_returned_as_is(app) -> None:
    loader = ApplicationLoader({"app": app, "config": "/does/not/exist.ru"})
    assert loader.load() is app


def test_builder_source_needs_no_file() -> None:
    loader = ApplicationLoader(
        {"builder": "from conftest import hello_app\nrun(hello_app)", "config": "/does/not/exist.ru"}
    )
    assert loader.load() is hello_app


def test_config_file_is_loaded(rackup_file) -> None:
    loader = ApplicationLoader({"config": str(rackup_file())})
    assert loader.loaded is False
    assert loader.load() is hello_app
    assert loader.loaded is True


def test_load_is_memoized(rackup_file, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    original = Builder.parse_file.__func__

    def _counting(cls, path, option_parser=None):
        calls.append(path)
        return original(cls, path, option_parser)

    monkeypatch.setattr(Builder, "parse_file", classmethod(_counting))
    loader = ApplicationLoader({"config": str(rackup_file())})

    first = loader.load()
    second = loader.load()

    assert first is second
    assert len(calls) == 1


def test_header_options_override_shared_options(rackup_file) -> None:
    options = {**default_options({}), "config": str(rackup_file(header="-p 8080 -q"))}

    ApplicationLoader(options).load()

    assert options["port"] == 8080
    assert options["quiet"] is True
    assert options["host"] == "localhost"


def test_header_merge_happens_once(rackup_file) -> None:
    options = {**default_options({}), "config": str(rackup_file(header="-p 8080"))}
    loader = ApplicationLoader(options)
    loader.load()
    options["port"] = 1234

    loader.load()

    assert options["port"] == 1234


def test_missing_config_exits(tmp_path) -> None:
    missing = tmp_path / "nope.ru"
    with pytest.raises(SystemExit) as excinfo:
        ApplicationLoader({"config": str(missing)}).load()
    assert str(excinfo.value) == f"configuration {missing} not found"


def test_directory_config_exits(tmp_path) -> None:
    with pytest.raises(SystemExit, match="not found"):
        ApplicationLoader({"config": str(tmp_path)}).load()


def test_custom_option_parser_is_used(rackup_file) -> None:
    seen = []

    def _parser(argv):
        seen.append(list(argv))
        return {"custom": True}

    options = {**default_options({}), "config": str(rackup_file(header="--anything 'two words'"))}
    ApplicationLoader(options, option_parser=_parser).load()

    assert seen == [["--anything", "two words"]]
    assert options["custom"] is True


def test_header_options_are_validated(rackup_file) -> None:
    options = {**default_options({}), "config": str(rackup_file(header="-p 70000"))}

    with pytest.raises(OptionsError) as excinfo:
        ApplicationLoader(options).load()

    assert any(e.startswith("port:") for e in excinfo.value.context["errors"])


def test_headerless_file_skips_validation(rackup_file) -> None:
    loader = ApplicationLoader({"config": str(rackup_file())})
    assert loader.load() is hello_app
