"""
Unit tests for the middleware pipeline and access logging.
"""

import json
import logging

import pytest

from coasterserver.http import HTTPRequest, HTTPResponse, ResponseBuilder, HTTPStatus
from coasterserver.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline

from conftest import make_request


def handler(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().text("ok").build()


class Recorder(Middleware):
    """Appends its tag before and after calling the next handler."""

    def __init__(self, tag: str, calls: list):
        self.tag = tag
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.tag}:in")
        response = next(request)
        self.calls.append(f"{self.tag}:out")
        return response


class TestMiddlewarePipeline:

    def test_first_added_runs_outermost(self):
        calls = []
        pipeline = MiddlewarePipeline().add(Recorder("a", calls)).add(Recorder("b", calls))

        pipeline.wrap(handler)(make_request("GET", "/"))

        assert calls == ["a:in", "b:in", "b:out", "a:out"]

    def test_empty_pipeline_is_the_handler(self):
        pipeline = MiddlewarePipeline()

        assert pipeline.wrap(handler)(make_request("GET", "/")).body == b"ok"

    def test_name(self):
        assert LoggingMiddleware().name == "LoggingMiddleware"


class TestLoggingMiddleware:

    @pytest.fixture(autouse=True)
    def capture(self, caplog):
        caplog.set_level(logging.INFO, logger="coasterserver.access")
        self.caplog = caplog

    def test_generates_request_id(self):
        response = LoggingMiddleware()(make_request("GET", "/coasters"), handler)

        assert len(response.headers["X-Request-ID"]) == 8

    def test_echoes_client_request_id(self):
        request = make_request("GET", "/coasters", headers={"X-Request-ID": "abc-123"})

        response = LoggingMiddleware()(request, handler)

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_text_format(self):
        LoggingMiddleware()(make_request("POST", "/coasters"), handler)

        line = self.caplog.records[-1].getMessage()
        assert line.startswith("127.0.0.1 - - [")
        assert '"POST /coasters" 200 2 ' in line

    def test_json_format(self):
        request = make_request("GET", "/coasters")
        request.query_params = {"a": ["1", "2"]}

        LoggingMiddleware(log_format="json")(request, handler)

        record = json.loads(self.caplog.records[-1].getMessage())
        assert record["method"] == "GET"
        assert record["path"] == "/coasters"
        assert record["query"] == "a=1&a=2"
        assert record["status_code"] == 200
        assert record["content_length"] == 2

    def test_authorization_header_not_logged(self):
        request = make_request("GET", "/admin",
                               headers={"Authorization": "Basic YWRtaW46c2VjcmV0"})

        LoggingMiddleware(log_format="json")(request, handler)

        assert "YWRtaW46c2VjcmV0" not in self.caplog.text

    def test_exception_is_logged_and_reraised(self):
        def broken(request):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            LoggingMiddleware()(make_request("GET", "/coasters"), broken)

        assert "RuntimeError: boom" in self.caplog.text
        assert self.caplog.records[-1].levelno == logging.ERROR

    def test_status_is_logged_as_number(self):
        def not_found(request):
            return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()

        LoggingMiddleware(log_format="json")(make_request("GET", "/x"), not_found)

        assert json.loads(self.caplog.records[-1].getMessage())["status_code"] == 404
