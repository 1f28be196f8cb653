"""
pytest configuration and fixtures.
"""

import random
import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from coasterserver import HTTPServer, ServerConfig, CoasterStore, create_app
from coasterserver.http import HTTPRequest


ADMIN_PASSWORD = "secret"


def make_request(
    method: str,
    path: str,
    body: bytes = b"",
    headers: dict = None,
) -> HTTPRequest:
    """Build a parsed request the way RequestParser would (lowercase header keys)."""
    lowered = {name.lower(): value for name, value in (headers or {}).items()}
    if body and "content-length" not in lowered:
        lowered["content-length"] = str(len(body))
    return HTTPRequest(
        method=method,
        path=path,
        headers=lowered,
        body=body,
        client_address=("127.0.0.1", 54321),
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /coasters?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "Fury 325", "manufacturer": "B&M", "inPark": "Carowinds"}'
    return (
        b"POST /coasters HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    ) % len(body) + body


@pytest.fixture
def store() -> CoasterStore:
    """Empty store with a seeded random source."""
    return CoasterStore(rng=random.Random(1234))


@pytest.fixture
def config() -> ServerConfig:
    """Test configuration; the port is never bound by unit tests."""
    return ServerConfig(
        host="127.0.0.1",
        port=3000,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def app(config: ServerConfig, store: CoasterStore) -> HTTPServer:
    """Fully wired application, driven through HTTPServer.handle()."""
    return create_app(config, store)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: HTTPServer, store: CoasterStore):
        self.server = server
        self.store = store
        self.port = server.config.port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def test_server(free_port: int, store: CoasterStore) -> Generator[TestServer, None, None]:
    """Run the full application on a free local port."""
    server = create_app(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
        admin_password=ADMIN_PASSWORD,
    ), store)

    test_srv = TestServer(server, store)
    test_srv.start()

    yield test_srv

    test_srv.stop()
