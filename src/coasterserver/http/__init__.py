"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Turns raw bytes from the socket into HTTPRequest objects and HTTPResponse
objects back into bytes, and routes requests to handlers.

    ┌──────────────────┬──────────────────────────────────────────────────┐
    │ request.py       │ RequestParser, HTTPRequest, Basic-auth accessor  │
    │ response.py      │ HTTPResponse, ResponseBuilder, ok/not_found/...  │
    │ router.py        │ Router: static, :param and *wildcard patterns    │
    │ status_codes.py  │ HTTPStatus with reason phrases                   │
    └──────────────────┴──────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, IncompleteBodyError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                      # 200 OK
    redirect,                # 302
    not_found,               # 404
    method_not_allowed,      # 405
    internal_error,          # 500
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "IncompleteBodyError",
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "redirect",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "Router",
    "Route",
    "HTTPStatus",
]
