from __future__ import annotations

import threading
import time
import urllib.request

import pytest

from pyrackup.core.exceptions import AdapterNotFoundError
from pyrackup.core.handlers import (
    CGIAdapter,
    ServerAdapter,
    WSGIRefAdapter,
    default_adapter,
    get_adapter,
    register,
    registered_names,
)
from pyrackup.core.handlers import registry

from conftest import RecordingAdapter, hello_app


class TestLookup:
    def test_bundled_adapters_registered(self) -> None:
        assert {"cgi", "wsgiref"} <= set(registered_names())

    @pytest.mark.parametrize("name", ["wsgiref", "WSGIRef", " wsgiref "])
    def test_lookup_is_case_insensitive(self, name) -> None:
        assert isinstance(get_adapter(name), WSGIRefAdapter)

    def test_each_lookup_is_a_fresh_adapter(self) -> None:
        assert get_adapter("wsgiref") is not get_adapter("wsgiref")

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_no_name_means_no_adapter(self, name) -> None:
        assert get_adapter(name) is None

    def test_unknown_name(self) -> None:
        with pytest.raises(AdapterNotFoundError) as excinfo:
            get_adapter("gopher")
        assert excinfo.value.context == {"server": "gopher"}
        assert "wsgiref" in str(excinfo.value)

    def test_import_path_instantiates_class(self) -> None:
        adapter = get_adapter("conftest:RecordingAdapter")
        assert isinstance(adapter, RecordingAdapter)
        assert isinstance(adapter, ServerAdapter)

    def test_bad_import_path(self) -> None:
        with pytest.raises(AdapterNotFoundError):
            get_adapter("no_such_module_anywhere:Adapter")
        with pytest.raises(AdapterNotFoundError):
            get_adapter("conftest:NoSuchAdapter")

    def test_register_custom_factory(self, monkeypatch) -> None:
        monkeypatch.setattr(registry, "_REGISTRY", dict(registry._REGISTRY))
        register("Recording", RecordingAdapter)
        assert isinstance(get_adapter("recording"), RecordingAdapter)


class TestDefaultAdapter:
    def test_wsgiref_outside_cgi(self) -> None:
        assert isinstance(default_adapter({}, environ={}), WSGIRefAdapter)

    def test_cgi_under_gateway(self) -> None:
        adapter = default_adapter({}, environ={"REQUEST_METHOD": "GET"})
        assert isinstance(adapter, CGIAdapter)
        assert adapter.name == "CGI"
        assert not hasattr(adapter, "shutdown")


class TestWSGIRefAdapter:
    def test_serves_and_shuts_down(self) -> None:
        adapter = WSGIRefAdapter()
        thread = threading.Thread(
            target=adapter.run,
            args=(hello_app, {"host": "127.0.0.1", "port": 0, "poll_interval": 0.05}),
            daemon=True,
        )
        thread.start()

        deadline = time.monotonic() + 5
        while adapter.httpd is None and time.monotonic() < deadline:
            time.sleep(0.01)
        assert adapter.httpd is not None
        port = adapter.httpd.server_address[1]

        with urllib.request.urlopen(f"http://127.0.0.1:{port}/", timeout=5) as response:
            assert response.status == 200
            assert response.read() == b"hello"

        adapter.shutdown()
        adapter.shutdown()
        thread.join(timeout=5)
        assert not thread.is_alive()

    def test_shutdown_before_run_is_noop(self) -> None:
        WSGIRefAdapter().shutdown()
