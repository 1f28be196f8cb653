"""
=============================================================================
CORE TRANSPORT
=============================================================================

    SocketServer   accept loop on the listening socket (main thread)
         │
         ▼
    ThreadPool     one task per accepted connection
         │
         ▼
    Connection     buffered reads, keep-alive, graceful close

Thread-per-connection: each worker owns one client socket at a time, so the
coaster store is the only state shared between requests.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
