"""
Whole-application tests through HTTPServer.handle(), without sockets.
"""

import base64
import json

import pytest

from coasterserver import HTTPServer, ServerConfig, create_app
from coasterserver.errors import ConfigurationError
from coasterserver.http import HTTPStatus
from coasterserver.store import CoasterStore

from conftest import make_request


def create(app: HTTPServer, payload: dict):
    return app.handle(make_request(
        "POST", "/coasters", json.dumps(payload).encode(),
        {"Content-Type": "application/json"},
    ))


class TestRouting:

    def test_collection(self, app: HTTPServer):
        response = app.handle(make_request("GET", "/coasters"))

        assert response.status == HTTPStatus.OK
        assert json.loads(response.body) == []

    @pytest.mark.parametrize("method", ["GET", "POST"])
    def test_trailing_slash_is_an_item_lookup(self, app: HTTPServer, store: CoasterStore,
                                              method: str):
        response = app.handle(make_request(
            method, "/coasters/", b'{"name": "Fury"}', {"Content-Type": "application/json"}
        ))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"data with the specific id not exists"
        assert len(store) == 0

    def test_admin_trailing_slash_is_not_admin(self, app: HTTPServer):
        token = base64.b64encode(b"admin:secret").decode()
        response = app.handle(make_request("GET", "/admin/",
                                           headers={"Authorization": f"Basic {token}"}))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_item(self, app: HTTPServer, store: CoasterStore):
        create(app, {"name": "Fury"})
        (coaster,) = store.list()

        response = app.handle(make_request("GET", f"/coasters/{coaster.id}"))

        assert json.loads(response.body)["name"] == "Fury"

    def test_deep_item_path(self, app: HTTPServer):
        response = app.handle(make_request("GET", "/coasters/1/2"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"data with the specific id not exists"

    def test_random(self, app: HTTPServer):
        create(app, {"name": "Fury"})

        assert app.handle(make_request("GET", "/coasters/random")).status == HTTPStatus.FOUND

    def test_admin(self, app: HTTPServer):
        token = base64.b64encode(b"admin:secret").decode()
        response = app.handle(make_request("GET", "/admin",
                                           headers={"Authorization": f"Basic {token}"}))

        assert response.status == HTTPStatus.OK

    def test_unknown_path(self, app: HTTPServer):
        assert app.handle(make_request("GET", "/rides")).status == HTTPStatus.NOT_FOUND

    def test_request_id_header(self, app: HTTPServer):
        assert "X-Request-ID" in app.handle(make_request("GET", "/coasters")).headers


class TestCreateApp:

    def test_requires_admin_password(self):
        with pytest.raises(ConfigurationError):
            create_app(ServerConfig())

    def test_creates_own_store(self):
        app = create_app(ServerConfig(admin_password="secret"))

        assert app.handle(make_request("GET", "/coasters")).body == b"[]"

    def test_routes(self, app: HTTPServer):
        assert [r.path for r in app.router.routes()] == [
            "/coasters", "/coasters/*rest", "/admin"
        ]
