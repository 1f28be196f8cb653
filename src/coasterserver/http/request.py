"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects
(RFC 7230 message syntax).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    POST /coasters HTTP/1.1\r\n             ← request line            │
    │    Host: localhost:3000\r\n                ← headers                 │
    │    Content-Type: application/json\r\n                                │
    │    Content-Length: 61\r\n                                            │
    │    Authorization: Basic YWRtaW46c2VjcmV0\r\n                         │
    │    \r\n                                    ← blank line              │
    │    {"name":"Fury","manufacturer":"B&M",...}  ← body                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The Connection layer hands us one complete message at a time. If the
client hung up halfway through the body we still get the bytes that did
arrive; the parser keeps them and records the shortfall so the handler
that actually needs the body can decide what to do about it.

=============================================================================
SECURITY NOTES
=============================================================================

- Size limit: requests over max_request_size are rejected with 413.
- Path traversal: paths containing ".." are rejected with 400.
- Only Content-Length framing is supported. A request that declares a
  Transfer-Encoding is rejected with 411 Length Required.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Tuple
from urllib.parse import parse_qs, urlparse, unquote
import base64
import binascii
import re


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code to send back:

        400 Bad Request                - malformed syntax
        405 Method Not Allowed         - unknown method
        411 Length Required            - Transfer-Encoding instead of
                                         Content-Length
        413 Payload Too Large          - over the size limit
        505 HTTP Version Not Supported - not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class IncompleteBodyError(HTTPParseError):
    """The body ended before Content-Length bytes arrived."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"unexpected EOF: expected {expected} body bytes, got {received}",
            status_code=500,
        )
        self.expected = expected
        self.received = received


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         GET, POST, ...
        path:           Request path without the query string, URL-decoded.
        version:        "HTTP/1.1" or "HTTP/1.0".
        headers:        Header dict with lowercase keys.
        query_params:   "?a=1&a=2" -> {"a": ["1", "2"]}.
        body:           Body bytes actually received.
        path_params:    Filled in by the router (":id", "*rest").
        client_address: (ip, port) of the peer.
        raw:            The original request bytes.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = b""

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def content_length(self) -> int:
        """Declared Content-Length, 0 if missing or not a number."""
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_keep_alive(self) -> bool:
        """
        HTTP/1.1 keeps the connection unless "Connection: close";
        HTTP/1.0 closes it unless "Connection: keep-alive".
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def read_body(self) -> bytes:
        """
        Return the full request body.

        Raises:
            IncompleteBodyError: If fewer bytes arrived than Content-Length
                                 announced (client went away mid-upload).
        """
        expected = self.content_length
        if len(self.body) < expected:
            raise IncompleteBodyError(expected, len(self.body))
        return self.body

    def basic_auth(self) -> Optional[Tuple[str, str]]:
        """
        Credentials from an "Authorization: Basic ..." header.

        =====================================================================
        BASIC AUTH (RFC 7617)
        =====================================================================

            Authorization: Basic YWRtaW46c2VjcmV0
                           ─┬─── ───────┬────────
                            │           └── base64("admin:secret")
                            └── scheme, case-insensitive

        The decoded text is split on the FIRST colon, so passwords may
        contain colons but usernames may not.

        =====================================================================

        Returns:
            (username, password), or None if the header is absent, uses a
            different scheme, or does not decode.
        """
        header = self.get_header("Authorization")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "basic" or not token:
            return None

        try:
            decoded = base64.b64decode(token.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None

        username, sep, password = decoded.partition(":")
        if not sep:
            return None
        return username, password


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw bytes
           │
           ├─ 1. size check                    → 413
           ├─ 2. split at \r\n\r\n              → 400 if missing
           ├─ 3. request line                  → 400 / 405 / 505
           ├─ 4. headers (lowercased names)    → 411 if Transfer-Encoding
           ├─ 5. body, capped at Content-Length
           ▼
        HTTPRequest
    """

    VALID_METHODS = {
        "GET",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "HEAD",
        "OPTIONS",
        "TRACE",
        "CONNECT",
    }

    # METHOD SP URI SP HTTP/x.y
    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    # Name: value
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest.

        Args:
            data: Raw request bytes from the socket.
            client_address: Peer (ip, port) for logging.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        if "transfer-encoding" in headers:
            raise HTTPParseError(
                f"Transfer-Encoding {headers['transfer-encoding']!r} is not supported; "
                "send a Content-Length body",
                status_code=411
            )

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError(
                f"Invalid Content-Length: {headers['content-length']}"
            )
        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length}")

        # Extra bytes belong to the next pipelined request; a short body is
        # kept as-is and reported by HTTPRequest.read_body()
        body = body[:content_length]

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, Dict[str, list[str]], str]:
        """
        Split "GET /coasters/42?x=1 HTTP/1.1" into its parts.

        Returns:
            (method, path, query_params, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"
        query_params = parse_qs(parsed.query, keep_blank_values=True)

        if ".." in path:
            raise HTTPParseError("Invalid path: contains ..", status_code=400)

        return method, path, query_params, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Handles obsolete line folding (continuation lines starting with
        whitespace) and joins repeated headers with ", ".
        """
        headers: Dict[str, str] = {}
        current_name = None
        current_value = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    current_value += " " + line.strip()
                    headers[current_name] = current_value
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: skip malformed header lines

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

            current_name = name
            current_value = headers[name]

        return headers

