"""Tests for the server entry point's bind guard."""

from __future__ import annotations

import pytest

from sepsiscan.core.server import main


class TestLoopbackCheck:
    @pytest.mark.parametrize("host", ["127.0.0.1", "localhost", "::1", "127.0.0.2"])
    def test_loopback_hosts(self, host):
        assert main._is_loopback_host(host)

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.20", "example.com", ""])
    def test_non_loopback_hosts(self, host):
        assert not main._is_loopback_host(host)


class _FakeServer:
    def __init__(self):
        self.calls = []

    def run(self, **kwargs):
        self.calls.append(kwargs)


class TestRun:
    def test_refuses_public_bind(self, monkeypatch):
        monkeypatch.setenv("SEPSISCAN_HOST", "0.0.0.0")
        monkeypatch.setattr(main, "create_app", lambda: pytest.fail("app must not start"))
        with pytest.raises(RuntimeError, match="non-loopback"):
            main.run()

    def test_public_bind_with_override(self, monkeypatch):
        server = _FakeServer()
        monkeypatch.setenv("SEPSISCAN_HOST", "0.0.0.0")
        monkeypatch.setenv("SEPSISCAN_ALLOW_INSECURE_BIND", "true")
        monkeypatch.setattr(main, "create_app", lambda: server)
        main.run()
        assert server.calls[0]["host"] == "0.0.0.0"

    def test_loopback_runs_streamable_http(self, monkeypatch):
        server = _FakeServer()
        monkeypatch.setenv("SEPSISCAN_PORT", "9001")
        monkeypatch.setattr(main, "create_app", lambda: server)
        main.run()
        assert server.calls == [
            {"transport": "streamable-http", "host": "127.0.0.1", "port": 9001}
        ]
