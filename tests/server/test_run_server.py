from __future__ import annotations

import socket

import pytest

from run_server import _browser_host, find_available_port


def test_find_available_port_falls_back_when_port_in_use(monkeypatch: pytest.MonkeyPatch):
    calls: list[tuple[str, int]] = []

    class _DummyServer:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    def fake_create_server(addr, reuse_port=False):
        host, port = addr
        calls.append((host, port))
        if len(calls) == 1:
            raise OSError("Address already in use")
        return _DummyServer()

    monkeypatch.setattr(socket, "create_server", fake_create_server)

    chosen_port, did_fallback = find_available_port("127.0.0.1", 8000, max_tries=10)

    assert did_fallback is True
    assert chosen_port == 8001
    assert calls == [("127.0.0.1", 8000), ("127.0.0.1", 8001)]


def test_find_available_port_gives_up(monkeypatch: pytest.MonkeyPatch):
    def always_busy(addr, reuse_port=False):
        raise OSError("Address already in use")

    monkeypatch.setattr(socket, "create_server", always_busy)

    with pytest.raises(RuntimeError, match=r"9000\.\.9002 on 127\.0\.0\.1 \(Address already in use\)"):
        find_available_port("127.0.0.1", 9000, max_tries=3)


def test_find_available_port_rejects_invalid_max_tries():
    with pytest.raises(ValueError):
        find_available_port("127.0.0.1", 8000, max_tries=0)


def test_browser_host_maps_wildcard_to_loopback():
    assert _browser_host("0.0.0.0") == "127.0.0.1"
    assert _browser_host("::") == "127.0.0.1"
    assert _browser_host("localhost") == "localhost"


def test_find_available_port_keeps_a_free_start_port(monkeypatch: pytest.MonkeyPatch):
    class _DummyServer:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr(socket, "create_server", lambda addr, reuse_port=False: _DummyServer())

    assert find_available_port("0.0.0.0", 8000) == (8000, False)
