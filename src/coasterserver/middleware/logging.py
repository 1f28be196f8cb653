"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log record per request on the "coasterserver.access" logger, after
the handler ran:

    text (Apache-style):
        127.0.0.1 - - [19/Oct/2026:12:00:00 +0000] "POST /coasters" 200 33 0.41ms

    json (for log shippers):
        {"request_id": "1f2e3d4c", "method": "POST", "path": "/coasters",
         "status_code": 200, "content_length": 33, "duration_ms": 0.41, ...}

Every response also gets an X-Request-ID header. A client-supplied
X-Request-ID is echoed back rather than replaced, so callers can correlate
their own logs with ours.

Request headers are not logged. In particular the Authorization header sent
to /admin never reaches the log.

=============================================================================
"""

import time
import json
import uuid
import logging
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("coasterserver.access")


@dataclass
class RequestLog:
    """One access-log record."""

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        record = asdict(self)
        record["duration_ms"] = round(self.duration_ms, 2)
        return record

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Access logging with timing and request ids. Add it first so it sees
    every request, including ones answered with an error.

    Args:
        log_format: "text" or "json".
    """

    def __init__(self, log_format: str = "text"):
        self.log_format = log_format

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = request.get_header("X-Request-ID") or uuid.uuid4().hex[:8]
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query="&".join(
                f"{key}={value}"
                for key, values in request.query_params.items()
                for value in values
            ),
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.info(json.dumps(log_entry.to_dict()))
        else:
            logger.info(log_entry.to_text())

        return response
