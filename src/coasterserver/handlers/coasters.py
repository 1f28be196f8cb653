"""
=============================================================================
COASTER RESOURCE HANDLER
=============================================================================

Two routes over one CoasterStore:

    ┌───────────────────────┬─────────┬──────────────────────────────────────┐
    │ Route                 │ Method  │ Outcome                              │
    ├───────────────────────┼─────────┼──────────────────────────────────────┤
    │ /coasters             │ GET     │ 200 JSON array of every coaster      │
    │                       │ POST    │ 200 "successfully created the        │
    │                       │         │ coaster" + Location of the new id    │
    │                       │ other   │ 405 "Method not allowed"             │
    ├───────────────────────┼─────────┼──────────────────────────────────────┤
    │ /coasters/<id>        │ any     │ 200 JSON object, or 404              │
    │ /coasters/random      │ any     │ 302 to /coasters/<some id>, or 404   │
    └───────────────────────┴─────────┴──────────────────────────────────────┘

Create pipeline (the first failing step decides the response):

    read_body()            short body (peer hung up)        → 500
    Content-Type check     must be exactly application/json → 415
    JSON decode            not JSON / not a coaster object  → 400
    store.insert()         assigns a fresh id, client id ignored

The content type is checked before the body is decoded, so a request
without the JSON content type gets 415 whatever its body looks like.

Every failure is raised as a CoasterAPIError subclass and turned into a
plain-text response at the public method it happened in.

=============================================================================
"""

import json
import logging

from ..errors import (
    BodyReadError,
    CoasterAPIError,
    CoasterNotFoundError,
    EmptyStoreError,
    MethodNotAllowedError,
    PayloadDecodeError,
    SerializationError,
    UnsupportedMediaTypeError,
)
from ..http.request import HTTPRequest, IncompleteBodyError
from ..http.response import HTTPResponse, ResponseBuilder, ok, redirect
from ..http.status_codes import HTTPStatus
from ..models import Coaster
from ..store import CoasterStore


logger = logging.getLogger(__name__)

REQUIRED_CONTENT_TYPE = "application/json"
COLLECTION_PATH = "/coasters"
RANDOM_SEGMENT = "random"


class CoasterHandler:
    """
    List, create, fetch and random-pick over a CoasterStore.

    Usage:
        coasters = CoasterHandler(store)
        router.add_route("/coasters", coasters.collection)
        router.add_route("/coasters/*rest", coasters.item)
    """

    allowed_methods = ["GET", "POST"]

    def __init__(self, store: CoasterStore):
        self.store = store

    # =========================================================================
    # /coasters
    # =========================================================================

    def collection(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch /coasters by method."""
        try:
            if request.method == "GET":
                return self._list()
            if request.method == "POST":
                return self._create(request)
            raise MethodNotAllowedError(self.allowed_methods)
        except CoasterAPIError as e:
            return self._error_response(request, e)

    def _list(self) -> HTTPResponse:
        coasters = self.store.list()
        try:
            return (ResponseBuilder()
                .status(HTTPStatus.OK)
                .json([coaster.to_dict() for coaster in coasters])
                .build())
        except (TypeError, ValueError) as e:
            raise SerializationError(str(e)) from e

    def _create(self, request: HTTPRequest) -> HTTPResponse:
        try:
            body = request.read_body()
        except IncompleteBodyError as e:
            raise BodyReadError(str(e)) from e

        content_type = request.get_header("Content-Type")
        if content_type != REQUIRED_CONTENT_TYPE:
            raise UnsupportedMediaTypeError(REQUIRED_CONTENT_TYPE, content_type)

        coaster = self._decode(body)
        coaster_id = self.store.insert(coaster)
        logger.info(f"Created coaster {coaster_id} ({coaster.name!r})")

        response = ok("successfully created the coaster")
        response.set_header("Location", f"{COLLECTION_PATH}/{coaster_id}")
        return response

    @staticmethod
    def _decode(body: bytes) -> Coaster:
        """
        Raises:
            PayloadDecodeError: Body is not UTF-8 JSON describing a coaster.
        """
        try:
            data = json.loads(body.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise PayloadDecodeError(f"body is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise PayloadDecodeError(f"invalid JSON: {e}") from e

        try:
            return Coaster.from_dict(data)
        except TypeError as e:
            raise PayloadDecodeError(str(e)) from e

    # =========================================================================
    # /coasters/<id> and /coasters/random
    # =========================================================================

    def item(self, request: HTTPRequest) -> HTTPResponse:
        """
        Fetch one coaster, or redirect to a random one.

        The raw path must split into exactly ["", "coasters", <id>]; a
        trailing slash or any deeper path is a 404.
        """
        try:
            parts = request.path.split("/")
            if len(parts) != 3:
                raise CoasterNotFoundError()

            if parts[2] == RANDOM_SEGMENT:
                return self._random()
            return self._fetch(parts[2])
        except CoasterAPIError as e:
            return self._error_response(request, e)

    def _fetch(self, coaster_id: str) -> HTTPResponse:
        coaster = self.store.get(coaster_id)
        if coaster is None:
            raise CoasterNotFoundError()

        logger.debug(f"Fetched coaster {coaster_id}")
        try:
            return (ResponseBuilder()
                .status(HTTPStatus.OK)
                .json(coaster.to_dict())
                .build())
        except (TypeError, ValueError) as e:
            raise SerializationError(
                str(e), status=HTTPStatus.UNSUPPORTED_MEDIA_TYPE
            ) from e

    def _random(self) -> HTTPResponse:
        coaster_id = self.store.random_id()
        if coaster_id is None:
            raise EmptyStoreError()

        logger.debug(f"Random pick: {coaster_id}")
        return redirect(f"{COLLECTION_PATH}/{coaster_id}")

    @staticmethod
    def _error_response(request: HTTPRequest, error: CoasterAPIError) -> HTTPResponse:
        level = logging.ERROR if error.status >= 500 else logging.DEBUG
        logger.log(
            level,
            f"{request.method} {request.path} -> {int(error.status)}: {error.message}"
        )
        return error.to_response()
