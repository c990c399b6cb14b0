from __future__ import annotations

from pathlib import Path

import pytest

from pyrackup.cli._args import parse_option_args
from pyrackup.core.builder import Builder
from pyrackup.core.exceptions import BuilderError

from conftest import hello_app


class Wrap:
    def __init__(self, app, label, *, suffix=""):
        self.app = app
        self.label = label + suffix


class TestBuilder:
    def test_run_only_returns_app(self) -> None:
        builder = Builder()
        builder.run(hello_app)
        assert builder.to_app() is hello_app

    def test_first_use_is_outermost(self) -> None:
        builder = Builder()
        builder.use(Wrap, "outer")
        builder.use(Wrap, "inner", suffix="!")
        builder.run(hello_app)

        app = builder.to_app()

        assert app.label == "outer"
        assert app.app.label == "inner!"
        assert app.app.app is hello_app

    def test_missing_run_is_an_error(self) -> None:
        builder = Builder()
        builder.use(Wrap, "orphan")
        with pytest.raises(BuilderError, match="run"):
            builder.to_app()


class TestNewFromString:
    def test_evaluates_use_and_run(self) -> None:
        source = (
            "from conftest import hello_app\n"
            "class Wrap:\n"
            "    def __init__(self, app, label):\n"
            "        self.app, self.label = app, label\n"
            "use(Wrap, 'x')\n"
            "run(hello_app)\n"
        )
        app = Builder.new_from_string(source)
        assert app.label == "x"
        assert app.app is hello_app

    def test_evaluation_error_is_wrapped(self) -> None:
        with pytest.raises(BuilderError) as excinfo:
            Builder.new_from_string("run(undefined_name)")
        assert isinstance(excinfo.value.__cause__, NameError)
        assert excinfo.value.context["path"] == "<builder>"

    def test_syntax_error_is_wrapped(self) -> None:
        with pytest.raises(BuilderError):
            Builder.new_from_string("run(")


class TestParseFile:
    def test_plain_rackup_file(self, rackup_file) -> None:
        app, options = Builder.parse_file(rackup_file(), parse_option_args)
        assert app is hello_app
        assert options == {}

    def test_header_options(self, rackup_file) -> None:
        path = rackup_file(header="-p 8080 -E deployment -O workers=4")

        app, options = Builder.parse_file(path, parse_option_args)

        assert app is hello_app
        assert options == {"port": 8080, "environment": "deployment", "workers": "4"}

    def test_header_ignored_without_parser(self, rackup_file) -> None:
        _, options = Builder.parse_file(rackup_file(header="-p 8080"))
        assert options == {}

    def test_byte_order_mark_is_skipped(self, rackup_file) -> None:
        path = rackup_file(header="-p 8081")
        path.write_text("\ufeff" + path.read_text(encoding="utf-8"), encoding="utf-8")

        app, options = Builder.parse_file(path, parse_option_args)

        assert app is hello_app
        assert options == {"port": 8081}

    def test_rackup_names_visible_to_source(self, rackup_file) -> None:
        path = rackup_file("assert __file__.endswith('config.ru')\nassert __name__ == '__rackup__'\nrun(hello_app)")
        app, _ = Builder.parse_file(path)
        assert app is hello_app

    def test_missing_run_reports_path(self, rackup_file) -> None:
        path = rackup_file("x = 1")
        with pytest.raises(BuilderError) as excinfo:
            Builder.parse_file(path)
        assert excinfo.value.context["path"] == str(path)

    def test_python_module_application(self, tmp_path: Path) -> None:
        path = tmp_path / "wsgi.py"
        path.write_text("from conftest import hello_app as application\n", encoding="utf-8")

        app, options = Builder.parse_file(path, parse_option_args)

        assert app is hello_app
        assert options == {}

    def test_python_module_app_fallback(self, tmp_path: Path) -> None:
        path = tmp_path / "site.py"
        path.write_text("from conftest import hello_app as app\n", encoding="utf-8")
        assert Builder.parse_file(path)[0] is hello_app

    def test_python_module_without_app(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.py"
        path.write_text("x = 1\n", encoding="utf-8")
        with pytest.raises(BuilderError, match="neither"):
            Builder.parse_file(path)

    def test_python_module_import_failure(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.py"
        path.write_text("raise RuntimeError('nope')\n", encoding="utf-8")
        with pytest.raises(BuilderError) as excinfo:
            Builder.parse_file(path)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
