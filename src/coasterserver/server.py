"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the transport, the protocol layer and the application together.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        REQUEST LIFECYCLE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer.accept()                       main thread            │
    │        │                                                             │
    │        ▼                                                             │
    │   ThreadPool.submit(_process_connection)                             │
    │        │                                                             │
    │        ▼                                       worker thread         │
    │   Connection.read_request() ─► RequestParser.parse()                 │
    │        │                              │ HTTPParseError → 4xx/5xx     │
    │        ▼                              ▼                              │
    │   MiddlewarePipeline (access log) ─► Router ─► handler               │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.send_response() ─► keep-alive? loop : close             │
    │   (HEAD: headers only)                                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Handlers convert their own failures into responses. Anything that still
escapes is logged with its traceback and answered with a plain-text 500,
so one bad request never takes a worker down.

=============================================================================
"""

import logging
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .core.connection import ConnectionState
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, ResponseBuilder, HTTPStatus,
    Router, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Threaded HTTP/1.1 server.

        server = HTTPServer(config)

        @server.route("/coasters")
        def coasters(request):
            ...

        server.use(LoggingMiddleware())
        server.run()            # blocks until SIGINT/SIGTERM or stop()

    Raises:
        ConfigurationError: From the constructor, if config is invalid.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = Router()
        self._middleware = MiddlewarePipeline()

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first one added runs outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    def route(self, path: str, method: Optional[str] = None):
        return self._router.route(path, method)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run one parsed request through middleware and router.

        Usable without a socket, which is how the unit tests drive the
        whole application.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)
        return self._handler(request)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Serve until stopped (blocking).

        Raises:
            OSError: If the listen address cannot be bound.
        """
        self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()
        self._running = True

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )
        for route in self._router.routes():
            logger.debug(f"  {route.method or 'ANY':8} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up (for embedding and tests)."""
        return self._socket_server.wait_until_ready(timeout)

    def stop(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("coasterserver").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        logger.debug(f"Thread pool at shutdown: {self._thread_pool.stats}")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a freshly accepted connection to the pool (blocks if full)."""
        self._thread_pool.submit(self._process_connection, args=(conn,))

    def _process_connection(self, conn: Connection):
        """Keep-alive loop for one connection. Runs on a worker thread."""
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                    if raw_request is None:
                        break

                    try:
                        request = self._parser.parse(raw_request, conn.address)
                    except HTTPParseError as e:
                        logger.info(f"[{conn.id}] Bad request: {e}")
                        self._send_error(conn, HTTPStatus(e.status_code), str(e))
                        break

                    conn.state = ConnectionState.PROCESSING

                    try:
                        response = self.handle(request)
                    except Exception as e:
                        logger.exception(f"[{conn.id}] Handler error: {e}")
                        response = internal_error()

                    keep_alive = request.is_keep_alive and self.config.keep_alive
                    if keep_alive:
                        response.headers.setdefault("Connection", "keep-alive")
                        response.headers.setdefault(
                            "Keep-Alive",
                            f"timeout={int(self.config.keep_alive_timeout)}"
                        )
                    else:
                        response.headers["Connection"] = "close"

                    data = response.to_bytes(
                        self.config.server_name,
                        include_body=request.method != "HEAD",
                    )
                    if not conn.send_response(data):
                        break

                    if not keep_alive:
                        break

                    conn.set_keep_alive()

                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break

                except ValueError as e:
                    # Connection refused to buffer an oversized message
                    logger.warning(f"[{conn.id}] {e}")
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break

                except Exception as e:
                    logger.exception(f"[{conn.id}] Connection error: {e}")
                    break

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        """Plain-text error for failures that happen before routing."""
        response = (ResponseBuilder()
            .status(status)
            .text(message)
            .close_connection()
            .build())

        conn.send_response(response.to_bytes(self.config.server_name))
