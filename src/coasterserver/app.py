"""
Application assembly: one store, two handlers, three routes.

    /coasters            CoasterHandler.collection
    /coasters/*rest      CoasterHandler.item   (ids, "random", and "/coasters/")
    /admin               AdminHandler.handle

Routes register without a method so each handler sees every method and
decides itself what is allowed.
"""

import logging
from typing import Optional

from .config import ServerConfig
from .handlers import AdminHandler, CoasterHandler
from .middleware import LoggingMiddleware
from .server import HTTPServer
from .store import CoasterStore


logger = logging.getLogger(__name__)


def create_app(config: ServerConfig, store: Optional[CoasterStore] = None) -> HTTPServer:
    """
    Build a ready-to-run server.

    Args:
        config: Validated by the HTTPServer constructor.
        store: Pass one in to inspect or pre-fill it from tests.

    Raises:
        ConfigurationError: If config is invalid (e.g. no admin password).
    """
    server = HTTPServer(config)
    store = store if store is not None else CoasterStore()

    server.use(LoggingMiddleware(log_format=config.log_format))

    coasters = CoasterHandler(store)
    admin = AdminHandler(config.admin_password)

    server.route("/coasters")(coasters.collection)
    server.route("/coasters/*rest")(coasters.item)
    server.route("/admin")(admin.handle)

    logger.debug(f"Registered {len(server.router.routes())} routes")
    return server
