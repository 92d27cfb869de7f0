"""Raw data-protocol server.

Gives external tools direct SQL access to the user store over TCP. The wire
format is one JSON object per line in each direction:

    -> {"user": "sa", "password": ""}
    <- {"ok": true}
    -> {"sql": "SELECT id, name FROM users WHERE id = :id", "params": {"id": 1}}
    <- {"ok": true, "columns": ["id", "name"], "rows": [[1, "Kim"]]}

Statements that return no rows are answered with ``{"ok": true, "rowcount": n}``.
A failing statement gets ``{"ok": false, "error": "..."}`` and the session
stays open. Every statement runs in its own transaction.
"""

import json
import logging
import socket
import socketserver
from typing import Any, Dict, Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from userapi.admin.handle import ServerHandle
from userapi.exceptions import RawProtocolError
from userapi.models import Base, User

logger = logging.getLogger(__name__)


def _encode(message: Dict[str, Any]) -> bytes:
    return (json.dumps(message, default=str) + "\n").encode("utf-8")


def execute_statement(engine: Engine, message: Dict[str, Any]) -> Dict[str, Any]:
    """Run one statement request and build its reply."""
    sql = message.get("sql")
    if not isinstance(sql, str) or not sql.strip():
        return {"ok": False, "error": "Missing 'sql'"}
    params = message.get("params") or {}
    if not isinstance(params, dict):
        return {"ok": False, "error": "'params' must be an object"}

    try:
        with engine.begin() as conn:
            result = conn.execute(text(sql), params)
            if result.returns_rows:
                return {
                    "ok": True,
                    "columns": list(result.keys()),
                    "rows": [list(row) for row in result],
                }
            return {"ok": True, "rowcount": result.rowcount}
    except SQLAlchemyError as e:
        error = getattr(e, "orig", None) or e
        logger.warning(f"Raw statement failed: {error}")
        return {"ok": False, "error": str(error)}


class RawProtocolHandler(socketserver.StreamRequestHandler):
    """Serves one client session."""

    def _send(self, message: Dict[str, Any]) -> None:
        self.wfile.write(_encode(message))
        self.wfile.flush()

    def _receive(self) -> Optional[Dict[str, Any]]:
        """Next request, ``None`` at end of stream.

        Raises:
            ValueError: If the line is not a JSON object
        """
        line = self.rfile.readline()
        if not line:
            return None
        message = json.loads(line.decode("utf-8"))
        if not isinstance(message, dict):
            raise ValueError("request must be a JSON object")
        return message

    def _login(self) -> bool:
        try:
            hello = self._receive()
        except ValueError as e:
            self._send({"ok": False, "error": f"Malformed login: {e}"})
            return False
        if hello is None:
            return False

        server = self.server
        if hello.get("user") != server.user or (hello.get("password") or "") != server.password:
            logger.warning(f"Rejected raw login from {self.client_address[0]}")
            self._send({"ok": False, "error": "Wrong user name or password"})
            return False

        if not server.create_if_missing and not inspect(server.engine).has_table(User.__tablename__):
            self._send({"ok": False, "error": "Database not found"})
            return False

        self._send({"ok": True})
        return True

    def handle(self) -> None:
        if not self._login():
            return
        logger.info(f"Raw session opened from {self.client_address[0]}")
        while True:
            try:
                message = self._receive()
            except ValueError as e:
                self._send({"ok": False, "error": f"Malformed request: {e}"})
                continue
            if message is None:
                break
            self._send(execute_statement(self.server.engine, message))
        logger.info(f"Raw session closed from {self.client_address[0]}")


class _RawTCPServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, engine: Engine, user: str, password: str, create_if_missing: bool):
        self.engine = engine
        self.user = user
        self.password = password
        self.create_if_missing = create_if_missing
        super().__init__(address, RawProtocolHandler)


class RawServer(ServerHandle):
    """Handle for the raw data-protocol server."""

    name = "raw data server"

    def __init__(self, port: int, allow_remote: bool, create_if_missing: bool,
                 engine: Engine, user: str = "sa", password: str = ""):
        super().__init__(port, allow_remote)
        self.create_if_missing = create_if_missing
        self.engine = engine
        self.user = user
        self.password = password

    def _bind(self):
        server = _RawTCPServer(
            (self.host, self.requested_port),
            self.engine,
            self.user,
            self.password,
            self.create_if_missing,
        )
        if self.create_if_missing:
            # schema is only touched once the port is ours
            try:
                Base.metadata.create_all(bind=self.engine)
            except Exception:
                server.server_close()
                raise
        return server

    @property
    def connect_host(self) -> str:
        """Address a local client should dial."""
        return "127.0.0.1"


class RawClient:
    """Client side of the raw data protocol.

    Usage:
        with RawClient("127.0.0.1", 9092, "sa", "") as client:
            reply = client.execute("SELECT count(*) FROM users")
    """

    def __init__(self, host: str, port: int, user: str = "sa", password: str = "",
                 timeout: float = 5.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._stream = None

    def connect(self) -> "RawClient":
        """Open a session.

        Raises:
            OSError: If the server cannot be reached
            RawProtocolError: If the server refuses the session
        """
        self._sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        self._stream = self._sock.makefile("rwb")
        reply = self._call({"user": self.user, "password": self.password})
        if not reply.get("ok"):
            self.close()
            raise RawProtocolError(reply.get("error", "session refused"))
        return self

    def _call(self, message: Dict[str, Any]) -> Dict[str, Any]:
        self._stream.write(_encode(message))
        self._stream.flush()
        line = self._stream.readline()
        if not line:
            raise RawProtocolError("connection closed by server")
        try:
            return json.loads(line.decode("utf-8"))
        except ValueError as e:
            raise RawProtocolError(f"unreadable reply: {e}") from e

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if self._stream is None:
            raise RawProtocolError("not connected")
        message: Dict[str, Any] = {"sql": sql}
        if params:
            message["params"] = params
        return self._call(message)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "RawClient":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
