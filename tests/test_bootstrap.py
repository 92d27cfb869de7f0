import importlib
import logging
import socket
from types import SimpleNamespace

import pytest
from sqlalchemy import inspect

import userapi.admin.console_server as console_module
from userapi.admin.bootstrap import (
    AdminServers,
    bootstrap,
    start_console_server,
    start_raw_server,
    verify_readiness,
)
from userapi.admin.console_server import ConsoleServer
from userapi.admin.raw_server import RawServer
from userapi.exceptions import BindError, DependencyNotReadyError
from userapi.models import Base

bootstrap_module = importlib.import_module("userapi.admin.bootstrap")


def _settings(tcp_port=0, web_port=0):
    return SimpleNamespace(
        TCP_SERVER_PORT=tcp_port,
        TCP_ALLOW_OTHERS=False,
        TCP_IF_NOT_EXISTS=True,
        WEB_SERVER_PORT=web_port,
        WEB_ALLOW_OTHERS=False,
        DB_USER="sa",
        DB_PASSWORD="",
    )


@pytest.fixture
def occupied_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def bind_log(monkeypatch):
    """Record each bind attempt along with whether the raw server was up."""
    events = []
    raw_bind = RawServer._bind
    console_bind = ConsoleServer._bind

    def record_raw(self):
        events.append("raw")
        return raw_bind(self)

    def record_console(self):
        events.append(("console", self.raw is not None and self.raw.running))
        return console_bind(self)

    monkeypatch.setattr(RawServer, "_bind", record_raw)
    monkeypatch.setattr(ConsoleServer, "_bind", record_console)
    return events


def test_bootstrap_starts_raw_before_console(engine, bind_log):
    servers = bootstrap(_settings(), engine)
    try:
        assert servers.raw.running
        assert servers.console.running
        assert servers.raw.port != servers.console.port
        assert bind_log == ["raw", ("console", True)]
    finally:
        servers.shutdown()

    assert not servers.raw.running
    assert not servers.console.running


def test_raw_bind_failure_prevents_console(engine, occupied_port, bind_log):
    with pytest.raises(BindError) as excinfo:
        bootstrap(_settings(tcp_port=occupied_port), engine)

    assert excinfo.value.port == occupied_port
    assert bind_log == ["raw"]


def test_console_bind_failure_stops_raw(engine, occupied_port, monkeypatch):
    started = []

    def tracking_start(*args, **kwargs):
        server = start_raw_server(*args, **kwargs)
        started.append(server)
        return server

    monkeypatch.setattr(bootstrap_module, "start_raw_server", tracking_start)

    with pytest.raises(BindError):
        bootstrap(_settings(web_port=occupied_port), engine)

    assert len(started) == 1
    assert not started[0].running


def test_unexpected_console_error_stops_raw(engine, monkeypatch):
    started = []

    def tracking_start(*args, **kwargs):
        server = start_raw_server(*args, **kwargs)
        started.append(server)
        return server

    def broken_console_app(raw):
        raise RuntimeError("console app failed to build")

    monkeypatch.setattr(bootstrap_module, "start_raw_server", tracking_start)
    monkeypatch.setattr(console_module, "create_console_app", broken_console_app)

    with pytest.raises(RuntimeError):
        bootstrap(_settings(), engine)

    assert len(started) == 1
    assert not started[0].running


def test_raw_bind_failure_leaves_schema_untouched(engine, occupied_port):
    Base.metadata.drop_all(engine)

    with pytest.raises(BindError):
        start_raw_server(occupied_port, False, True, engine)

    assert not inspect(engine).has_table("users")


def test_console_requires_running_raw_server(engine, bind_log):
    with pytest.raises(DependencyNotReadyError):
        start_console_server(0, False, None)

    stopped_raw = RawServer(0, False, True, engine)
    with pytest.raises(DependencyNotReadyError):
        start_console_server(0, False, stopped_raw)

    # the dependency check comes before any bind attempt
    assert bind_log == []


def test_verify_readiness_logs_access_summary(engine, caplog, monkeypatch):
    raw = start_raw_server(0, False, True, engine)
    console = start_console_server(0, False, raw)
    raw_port, console_port = raw.port, console.port
    try:
        def no_connections(*args, **kwargs):
            raise AssertionError("readiness check must not connect")

        monkeypatch.setattr(socket, "create_connection", no_connections)
        with caplog.at_level(logging.INFO, logger="userapi.admin.bootstrap"):
            verify_readiness(raw, console)
    finally:
        console.stop()
        raw.stop()

    output = caplog.text
    assert f"http://localhost:{console_port}" in output
    assert f"tcp://localhost:{raw_port}" in output
    assert "Username: sa" in output
    assert "Password: (empty)" in output


def test_verify_readiness_needs_both_servers(engine):
    raw = start_raw_server(0, False, True, engine)
    try:
        with pytest.raises(DependencyNotReadyError):
            verify_readiness(raw, ConsoleServer(0, False, raw))
    finally:
        raw.stop()


class _FakeHandle:
    def __init__(self, name, calls, fail=False):
        self.name = name
        self.calls = calls
        self.fail = fail

    def stop(self):
        self.calls.append(self.name)
        if self.fail:
            raise OSError("boom")


def test_shutdown_runs_in_reverse_order_and_swallows_errors(caplog):
    calls = []
    servers = AdminServers(
        raw=_FakeHandle("raw", calls),
        console=_FakeHandle("console", calls, fail=True),
    )

    with caplog.at_level(logging.ERROR, logger="userapi.admin.bootstrap"):
        servers.shutdown()

    assert calls == ["console", "raw"]
    assert "Failed to stop console" in caplog.text


def test_shutdown_is_idempotent(engine):
    servers = bootstrap(_settings(), engine)
    servers.shutdown()
    servers.shutdown()

    assert not servers.raw.running
    assert not servers.console.running
