"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket and turns the TCP byte stream into
complete HTTP request messages.

TCP does not preserve message boundaries: a single request may arrive over
several recv() calls, and a pipelining client may put two requests into
one. The Connection buffers bytes and uses the HTTP framing to cut them
apart:

    ┌─────────────────────────────────────────────────────────────────┐
    │  POST /coasters HTTP/1.1\r\n                                    │
    │  Content-Type: application/json\r\n                             │
    │  Content-Length: 61\r\n                                         │
    │  \r\n                       ← 1. read until the blank line      │
    │  {"name":"Fury",...}        ← 2. then exactly Content-Length    │
    │                                  bytes (fewer if the peer quits) │
    └─────────────────────────────────────────────────────────────────┘

If the peer closes the socket before the whole body arrived, the partial
message is still returned. Deciding whether a short body is fatal is the
handler's job (see HTTPRequest.read_body()).

Connection lifecycle:

    NEW ─► READING ─► PROCESSING ─► WRITING ─► KEEP_ALIVE ─┐
     │        │                        │            ▲       │
     │        │                        │            └───────┘
     └────────┴────────► CLOSING ◄─────┘
                            │
                            ▼
                          CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    KEEP_ALIVE = "keep_alive"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One client connection.

    The first request on a connection gets the full `timeout`; later
    keep-alive requests get the shorter `keep_alive_timeout`, after which an
    idle connection is dropped quietly.

    Attributes:
        socket: The accepted client socket.
        address: Client (ip, port).
        id: Short random id used in log lines.
        requests_handled: Requests read so far on this connection.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0

    buffer_size: int = 8192
    timeout: float = 30.0
    keep_alive_timeout: float = 5.0
    max_request_size: int = 10 * 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one HTTP request message from the socket.

        Returns:
            The request bytes (headers plus whatever body arrived), or None
            when the client closed the connection or an idle keep-alive
            connection timed out.

        Raises:
            TimeoutError: The first request did not arrive in time.
            ValueError: The message exceeds max_request_size.
        """
        self.state = ConnectionState.READING
        self.last_activity = time.time()

        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._append(chunk)

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    logger.debug(
                        f"[{self.id}] Peer closed with "
                        f"{len(self._buffer) - body_start}/{content_length} body bytes"
                    )
                    break
                self._append(chunk)

            # Leftover bytes are the start of the next pipelined request
            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            self.last_activity = time.time()
            return request_data

        except socket.timeout:
            if self.requests_handled > 0:
                logger.debug(f"[{self.id}] Keep-alive timeout")
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _append(self, chunk: bytes):
        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise ValueError(f"Request too large: {len(self._buffer)} bytes")

    def _recv(self) -> bytes:
        """recv() that reports an abrupt disconnect as end of stream."""
        try:
            data = self.socket.recv(self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Content-Length from raw header bytes, 0 if absent or unparsable.

        Done with a plain scan because the request has not been parsed yet.
        The parser rejects a malformed value later with 400.
        """
        header_str = headers.decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        sendall() the response bytes.

        Returns:
            False if the client went away mid-write.
        """
        self.state = ConnectionState.WRITING
        self.last_activity = time.time()

        try:
            self.socket.sendall(data)
            self.last_activity = time.time()
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close gracefully: shutdown(SHUT_WR) to send FIN, drain what the
        client still sends, then release the descriptor. Idempotent.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def set_keep_alive(self):
        self.state = ConnectionState.KEEP_ALIVE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
