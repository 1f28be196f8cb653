"""
=============================================================================
COASTERSERVER - In-Memory Roller-Coaster HTTP Service
=============================================================================

A small resource server over raw sockets. Coaster records live in a
lock-guarded dict for the lifetime of the process.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           ENDPOINTS                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET  /coasters            list every coaster (JSON array)          │
    │   POST /coasters            create one (application/json only)       │
    │   *    /coasters/<id>       fetch one                                │
    │   *    /coasters/random     302 to a random coaster                  │
    │   *    /admin               HTTP Basic, user "admin"                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    coasterserver/
    ├── __main__.py          # CLI entry point (python -m coasterserver)
    ├── app.py               # create_app(): store + handlers + routes
    ├── server.py            # HTTPServer: transport + middleware + router
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Exceptions carrying their HTTP status
    ├── models.py            # Coaster record
    ├── store.py             # CoasterStore (one lock)
    ├── core/                # Sockets, connections, thread pool
    ├── http/                # Request parsing, responses, routing
    ├── middleware/          # Pipeline + access logging
    └── handlers/            # Coaster and admin handlers

=============================================================================
QUICK START
=============================================================================

    from coasterserver import ServerConfig, create_app

    config = ServerConfig.from_env()        # needs ADMIN_PASSWORD
    server = create_app(config)
    server.run()                            # 0.0.0.0:3000

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig
from .app import create_app
from .models import Coaster
from .store import CoasterStore

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "create_app",
    "Coaster",
    "CoasterStore",
    "__version__",
]
