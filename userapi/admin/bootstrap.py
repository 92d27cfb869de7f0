"""Ordered startup and shutdown of the administrative servers.

Start order is raw data server, then console server, then the readiness
summary. The console proxies to the raw server, so it must never accept a
connection before the raw server does. Shutdown runs in reverse.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from userapi.admin.console_server import ConsoleServer
from userapi.admin.raw_server import RawServer
from userapi.exceptions import DependencyNotReadyError

logger = logging.getLogger(__name__)

BANNER = "=" * 43


def start_raw_server(port: int, allow_remote: bool, create_if_missing: bool,
                     engine: Engine, user: str = "sa", password: str = "") -> RawServer:
    """Bind and start the raw data-protocol server.

    Raises:
        BindError: If the port is taken or cannot be bound
    """
    logger.info(f"Raw data server starting on port {port}...")
    return RawServer(port, allow_remote, create_if_missing, engine, user, password).start()


def start_console_server(port: int, allow_remote: bool, raw: Optional[RawServer]) -> ConsoleServer:
    """Bind and start the browser console.

    Raises:
        DependencyNotReadyError: If ``raw`` is missing or not running; no bind
            is attempted in that case
        BindError: If the port is taken or cannot be bound
    """
    logger.info(f"Console server starting on port {port}...")
    return ConsoleServer(port, allow_remote, raw).start()


def verify_readiness(raw: RawServer, console: ConsoleServer) -> None:
    """Log how to reach the store from outside. Opens no connections."""
    if not raw.running or not console.running:
        raise DependencyNotReadyError("readiness check needs both admin servers running")

    lines = [
        BANNER,
        "User Store Access Information:",
        BANNER,
        "1. Browser Access:",
        f"   - Console: http://localhost:{console.port}",
        "2. External Tool Access (raw protocol):",
        f"   - URL: tcp://localhost:{raw.port}",
        f"   - Database: {raw.engine.url.render_as_string(hide_password=True)}",
        "   - Protocol: newline-delimited JSON",
        f"   - Username: {raw.user}",
        f"   - Password: {raw.password or '(empty)'}",
        BANNER,
    ]
    for line in lines:
        logger.info(line)


@dataclass
class AdminServers:
    raw: Optional[RawServer] = None
    console: Optional[ConsoleServer] = None

    def shutdown(self) -> None:
        """Stop console then raw server. Errors are logged, never raised."""
        for handle in (self.console, self.raw):
            if handle is None:
                continue
            try:
                handle.stop()
            except Exception as e:
                logger.error(f"Failed to stop {handle.name}: {e}")


def bootstrap(settings, engine: Engine) -> AdminServers:
    """Start both admin servers in dependency order and report readiness.

    Any failure stops whatever was already started before the error
    propagates, so the caller never sees one server up without the other.

    Args:
        settings: Configuration providing the TCP_*, WEB_* and DB_* values
        engine: Engine of the store both servers expose

    Returns:
        Handles of the running servers

    Raises:
        BindError: If either server cannot bind its port
        DependencyNotReadyError: If the console finds the raw server down;
            any other startup error propagates the same way, after cleanup
    """
    servers = AdminServers()
    try:
        servers.raw = start_raw_server(
            settings.TCP_SERVER_PORT,
            settings.TCP_ALLOW_OTHERS,
            settings.TCP_IF_NOT_EXISTS,
            engine,
            settings.DB_USER,
            settings.DB_PASSWORD,
        )
        servers.console = start_console_server(
            settings.WEB_SERVER_PORT,
            settings.WEB_ALLOW_OTHERS,
            servers.raw,
        )
        verify_readiness(servers.raw, servers.console)
    except Exception as e:
        logger.error(f"Admin server bootstrap failed: {e}")
        servers.shutdown()
        raise
    return servers
