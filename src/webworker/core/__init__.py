"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    core/
    ├── socket_server.py  # Bind, listen, accept → Connection
    └── connection.py     # Line reading, sending, graceful close

The socket server never touches HTTP. The connection never decides what to
answer. Both are reusable below any line-based protocol.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP listener - accepts connections
    "Connection",       # Wrapper for client socket - handles I/O
    "ConnectionState",  # Enum for connection lifecycle states
]
