"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses (RFC 7230 message format).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 302 Found\r\n                  ← status line             │
    │    Location: /coasters/4821\r\n            ← headers                 │
    │    Content-Length: 0\r\n                   ← auto-added              │
    │    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n ← auto-added              │
    │    Server: CoasterServer/1.0\r\n           ← auto-added              │
    │    \r\n                                    ← blank line              │
    │                                            ← body (empty here)       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Bodies are either JSON (exactly "Content-Type: application/json") or
plain UTF-8 text. Error responses are always plain text.

Construct responses with the fluent builder:

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .json([coaster.to_dict() for coaster in coasters])
        .build())

or with the one-line helpers at the bottom of this module.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, Union
import json

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "CoasterServer/1.0"

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized onto the socket.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(
        self,
        server_name: str = DEFAULT_SERVER_NAME,
        include_body: bool = True,
    ) -> bytes:
        """
        Serialize the response for socket.sendall().

        Content-Length, Date and Server are added when the handler did not
        set them. With include_body=False (answers to HEAD) the headers still
        describe the body, but the body itself is left off.
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        if not include_body:
            return header_bytes
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Every method except build() returns self:

        builder.status(302).header("Location", "/coasters/7").build()
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS / HEADERS
    # =========================================================================

    def status(self, status: Union[HTTPStatus, int]) -> "ResponseBuilder":
        """Set the status code. Plain ints are converted to HTTPStatus."""
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def text(self, text: str) -> "ResponseBuilder":
        """Set a plain UTF-8 text body."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = TEXT_CONTENT_TYPE
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Serialize data as compact JSON.

        Raises:
            TypeError, ValueError: If data is not JSON-serializable. Nothing
                is changed on the builder in that case.
        """
        payload = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        self._body = payload.encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    # =========================================================================
    # REDIRECT
    # =========================================================================

    def redirect(self, location: str) -> "ResponseBuilder":
        """
        302 Found. The body is left empty; clients follow the Location
        header.
        """
        self._status = HTTPStatus.FOUND
        self._headers["Location"] = location
        return self

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an RFC 7231 HTTP-date.

    Example: "Mon, 19 Oct 2026 12:00:00 GMT". Names are spelled out here
    rather than taken from strftime so the locale cannot change them.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok("successfully created the coaster")
#     return not_found("no coaster in the database")
#     return redirect("/coasters/4821")
#
# =============================================================================

def ok(text: str = "") -> HTTPResponse:
    """200 OK with a plain-text body."""
    return ResponseBuilder().status(HTTPStatus.OK).text(text).build()


def redirect(location: str) -> HTTPResponse:
    return ResponseBuilder().redirect(location).build()


def not_found(message: str = "Not Found") -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).text(message).build()


def method_not_allowed(
    allowed_methods: list[str],
    message: str = "Method not allowed"
) -> HTTPResponse:
    """405 with the Allow header RFC 7231 requires."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .text(message)
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500. Keep the message generic; details belong in the server log."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).text(message).build()
