"""
Admin endpoint guarded by HTTP Basic authentication.

Exactly one credential pair is accepted: user "admin" with the password
captured from ADMIN_PASSWORD at startup. Nothing is remembered between
requests; every call has to authenticate again.
"""

import hmac
import logging

from ..errors import UnauthorizedError
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"


class AdminHandler:
    """
    Usage:
        admin = AdminHandler(config.admin_password)
        router.add_route("/admin", admin.handle)
    """

    def __init__(self, password: str, realm: str = "admin"):
        if not password:
            raise ValueError("admin password must not be empty")
        self._password = password.encode("utf-8")
        self.realm = realm

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        if not self.is_authorized(request):
            logger.warning(
                f"Rejected admin login from {request.client_address[0] or 'unknown'}"
            )
            return UnauthorizedError(realm=self.realm).to_response()

        logger.info(f"Admin login from {request.client_address[0] or 'unknown'}")
        return ok("Congrats! you are successfully logged in.")

    def is_authorized(self, request: HTTPRequest) -> bool:
        credentials = request.basic_auth()
        if credentials is None:
            return False

        username, password = credentials
        # Compare the password even on a wrong username so both paths take
        # the same time
        password_ok = hmac.compare_digest(password.encode("utf-8"), self._password)
        return username == ADMIN_USERNAME and password_ok
