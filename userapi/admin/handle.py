"""Lifecycle shared by the administrative network servers."""

import logging
import threading
from typing import Optional

from userapi.exceptions import BindError

logger = logging.getLogger(__name__)


class ServerHandle:
    """A network server running ``serve_forever`` on a background thread.

    Subclasses implement ``_bind`` to return a bound, listening
    ``socketserver``-style server. ``start`` wraps bind failures in
    ``BindError``; ``stop`` is a no-op on a stopped handle.
    """

    name = "server"

    def __init__(self, port: int, allow_remote: bool = False):
        self.requested_port = port
        self.allow_remote = allow_remote
        self._server = None
        self._thread: Optional[threading.Thread] = None

    @property
    def host(self) -> str:
        return "0.0.0.0" if self.allow_remote else "127.0.0.1"

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        """The bound port once running (resolves port 0), else the requested one."""
        if self._server is not None:
            return self._server.server_address[1]
        return self.requested_port

    def _check_dependencies(self) -> None:
        """Raise if a server this one relies on is not up yet."""

    def _bind(self):
        raise NotImplementedError

    def start(self) -> "ServerHandle":
        if self.running:
            return self
        self._check_dependencies()
        try:
            server = self._bind()
        except OSError as e:
            raise BindError(self.name, self.host, self.requested_port, e) from e

        self._server = server
        self._thread = threading.Thread(
            target=server.serve_forever, name=f"{self.name}-{self.port}", daemon=True
        )
        self._thread.start()
        logger.info(f"{self.name} started on {self.host}:{self.port}")
        return self

    def stop(self) -> None:
        if not self.running:
            return
        server, self._server = self._server, None
        port = server.server_address[1]
        try:
            server.shutdown()
        finally:
            server.server_close()
            if self._thread is not None:
                self._thread.join(timeout=5)
                self._thread = None
        logger.info(f"{self.name} on port {port} stopped")
