"""
=============================================================================
CORE MODULE
=============================================================================

Networking plumbing with no HTTP knowledge:

    socket_server.py   SocketServer   bind, listen, accept loop, signals
    connection.py      Connection     client socket as a reader/writer pair

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wrapper for a client socket
    "ConnectionState",  # Lifecycle states for logging
]
