"""
Unit tests for HTTP response building.
"""

import json

import pytest

from coasterserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    not_found,
    method_not_allowed,
    internal_error,
    redirect,
    format_http_date,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.UNSUPPORTED_MEDIA_TYPE)
        assert response.status_line == "HTTP/1.1 415 Unsupported Media Type"

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert b"HTTP/1.1 200 OK\r\n" in result
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: CoasterServer/1.0\r\n" in result
        assert b"\r\n\r\ntest" in result

    def test_to_bytes_sets_content_length(self):
        """Test that Content-Length is auto-set."""
        result = HTTPResponse(body=b"hello world").to_bytes()

        assert b"Content-Length: 11\r\n" in result

    def test_to_bytes_empty_body(self):
        result = HTTPResponse(status=HTTPStatus.FOUND).to_bytes()

        assert b"Content-Length: 0\r\n" in result
        assert result.endswith(b"\r\n\r\n")

    def test_to_bytes_without_body(self):
        response = HTTPResponse(body=b"Method not allowed")

        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 18\r\n" in result
        assert result.endswith(b"\r\n\r\n")
        assert b"Method not allowed" not in result

    def test_set_header_chaining(self):
        """Test method chaining for headers."""
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers["X-One"] == "1"
        assert response.headers["X-Two"] == "2"


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        assert response.status == HTTPStatus.NOT_FOUND

    def test_status_from_int(self):
        response = ResponseBuilder().status(415).build()

        assert response.status is HTTPStatus.UNSUPPORTED_MEDIA_TYPE
        assert response.status_line.endswith("Unsupported Media Type")

    def test_json_body(self):
        """JSON responses carry exactly application/json, no charset."""
        data = {"name": "Fury", "inpark": "Carowinds"}
        response = ResponseBuilder().json(data).build()

        assert response.headers["Content-Type"] == "application/json"
        assert json.loads(response.body) == data

    def test_json_is_compact_utf8(self):
        response = ResponseBuilder().json({"name": "Éclair"}).build()

        assert response.body == '{"name":"Éclair"}'.encode("utf-8")

    def test_json_unserializable_leaves_builder_untouched(self):
        builder = ResponseBuilder().text("before")

        with pytest.raises(TypeError):
            builder.json({"bad": object()})

        assert builder.build().body == b"before"

    def test_text_body(self):
        text = "successfully created the coaster"
        response = ResponseBuilder().text(text).build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.body == text.encode()

    def test_redirect(self):
        response = ResponseBuilder().redirect("/coasters/42").build()

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/coasters/42"
        assert response.body == b""

    def test_close_connection(self):
        response = ResponseBuilder().close_connection().build()
        assert response.headers["Connection"] == "close"

    def test_method_chaining(self):
        """Test fluent API chaining."""
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .json({"key": "value"})
            .build())

        assert response.status == HTTPStatus.OK
        assert response.headers["X-Custom"] == "value"
        assert b'"key"' in response.body


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        response = ok("Hello")
        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello"
        assert response.headers["Content-Type"].startswith("text/plain")

    def test_redirect(self):
        response = redirect("/coasters/7")

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/coasters/7"

    def test_not_found(self):
        response = not_found("no coaster in the database")

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"no coaster in the database"

    def test_method_not_allowed(self):
        response = method_not_allowed(["GET", "POST"])

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, POST"
        assert response.body == b"Method not allowed"

    def test_internal_error(self):
        response = internal_error()
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.FOUND.phrase == "Found"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"
        assert HTTPStatus.LENGTH_REQUIRED.phrase == "Length Required"


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        from datetime import datetime, timezone

        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
