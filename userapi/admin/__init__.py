"""Administrative servers giving external tools direct access to the user store."""

from .bootstrap import (
    AdminServers,
    bootstrap,
    start_console_server,
    start_raw_server,
    verify_readiness,
)
from .console_server import ConsoleServer
from .raw_server import RawClient, RawServer

__all__ = [
    'AdminServers',
    'ConsoleServer',
    'RawClient',
    'RawServer',
    'bootstrap',
    'start_console_server',
    'start_raw_server',
    'verify_readiness',
]
