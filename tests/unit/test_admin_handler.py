"""
Unit tests for AdminHandler.
"""

import base64

import pytest

from coasterserver.handlers import AdminHandler
from coasterserver.http import HTTPStatus

from conftest import make_request


def auth_header(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def admin() -> AdminHandler:
    return AdminHandler("secret")


class TestAdminHandler:

    def test_correct_credentials(self, admin: AdminHandler):
        response = admin.handle(make_request("GET", "/admin",
                                             headers=auth_header("admin", "secret")))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Congrats! you are successfully logged in."

    @pytest.mark.parametrize("username,password", [
        ("admin", "wrong"),
        ("admin", ""),
        ("admin", "secret "),
        ("root", "secret"),
        ("Admin", "secret"),
    ])
    def test_wrong_credentials(self, admin: AdminHandler, username, password):
        response = admin.handle(make_request("GET", "/admin",
                                             headers=auth_header(username, password)))

        assert response.status == HTTPStatus.UNAUTHORIZED
        assert response.body == b"401 - unAuthorized"
        assert response.headers["WWW-Authenticate"] == 'Basic realm="admin"'

    def test_missing_header(self, admin: AdminHandler):
        response = admin.handle(make_request("GET", "/admin"))

        assert response.status == HTTPStatus.UNAUTHORIZED

    def test_malformed_header(self, admin: AdminHandler):
        request = make_request("GET", "/admin",
                               headers={"Authorization": "Basic %%%"})

        assert admin.handle(request).status == HTTPStatus.UNAUTHORIZED

    def test_every_method_is_checked(self, admin: AdminHandler):
        for method in ("POST", "DELETE"):
            ok = admin.handle(make_request(method, "/admin",
                                           headers=auth_header("admin", "secret")))
            denied = admin.handle(make_request(method, "/admin"))

            assert ok.status == HTTPStatus.OK
            assert denied.status == HTTPStatus.UNAUTHORIZED

    def test_password_with_colon(self):
        admin = AdminHandler("s3:cr3t")
        request = make_request("GET", "/admin", headers=auth_header("admin", "s3:cr3t"))

        assert admin.handle(request).status == HTTPStatus.OK

    def test_rejection_is_logged(self, admin: AdminHandler, caplog):
        with caplog.at_level("WARNING", logger="coasterserver.handlers.admin"):
            admin.handle(make_request("GET", "/admin",
                                      headers=auth_header("admin", "nope")))

        assert "Rejected admin login" in caplog.text
        assert "nope" not in caplog.text

    def test_empty_password_refused(self):
        with pytest.raises(ValueError):
            AdminHandler("")
