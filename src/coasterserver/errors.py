"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the coaster API can report maps to exactly one exception
class below. Each class carries the HTTP status it turns into, so a handler
can raise deep inside a helper and convert at its own boundary:

    try:
        coaster = self._decode(request)
    except CoasterAPIError as e:
        return e.to_response()

    ┌──────────────────────────────┬────────┬─────────────────────────────┐
    │ Exception                    │ Status │ Raised when                 │
    ├──────────────────────────────┼────────┼─────────────────────────────┤
    │ BodyReadError                │  500   │ body shorter than declared  │
    │ PayloadDecodeError           │  400   │ body is not a coaster JSON  │
    │ UnsupportedMediaTypeError    │  415   │ Content-Type mismatch       │
    │ CoasterNotFoundError         │  404   │ unknown id / bad item path  │
    │ EmptyStoreError              │  404   │ random pick on empty store  │
    │ MethodNotAllowedError        │  405   │ verb not served by route    │
    │ UnauthorizedError            │  401   │ bad or missing credentials  │
    │ SerializationError           │ 500/415│ JSON encoding failed        │
    └──────────────────────────────┴────────┴─────────────────────────────┘

All error bodies are plain human-readable text, never JSON.

ConfigurationError is the odd one out: it never reaches a client. It is
raised at startup and aborts the process.

=============================================================================
"""

from typing import Dict, Optional

from .http.response import HTTPResponse, ResponseBuilder
from .http.status_codes import HTTPStatus


class ConfigurationError(ValueError):
    """Raised when the server cannot start with the given settings."""


class CoasterAPIError(Exception):
    """
    Base class for errors that become a terminal HTTP response.

    Subclasses pin a default status; SerializationError overrides it per
    call site because the list and item routes disagree.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status: Optional[HTTPStatus] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.headers = dict(headers or {})

    def to_response(self) -> HTTPResponse:
        """Render the error as a plain-text response."""
        return (ResponseBuilder()
            .status(self.status)
            .headers(self.headers)
            .text(self.message)
            .build())


class BodyReadError(CoasterAPIError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class PayloadDecodeError(CoasterAPIError):
    status = HTTPStatus.BAD_REQUEST


class UnsupportedMediaTypeError(CoasterAPIError):
    status = HTTPStatus.UNSUPPORTED_MEDIA_TYPE

    def __init__(self, required: str, actual: str):
        super().__init__(
            f"need content type '{required}' but got '{actual}'"
        )
        self.required = required
        self.actual = actual


class CoasterNotFoundError(CoasterAPIError):
    status = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "data with the specific id not exists"):
        super().__init__(message)


class EmptyStoreError(CoasterAPIError):
    status = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "no coaster in the database"):
        super().__init__(message)


class MethodNotAllowedError(CoasterAPIError):
    status = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, allowed: list[str], message: str = "Method not allowed"):
        super().__init__(message, headers={"Allow": ", ".join(allowed)})
        self.allowed = allowed


class UnauthorizedError(CoasterAPIError):
    status = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str = "401 - unAuthorized", realm: str = "admin"):
        super().__init__(
            message,
            headers={"WWW-Authenticate": f'Basic realm="{realm}"'},
        )


class SerializationError(CoasterAPIError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
