"""
=============================================================================
URL ROUTER
=============================================================================

Path-based routing with three kinds of pattern segment:

    /coasters           static    exact match
    /coasters/:id       param     one segment      → {"id": "42"}
    /coasters/*rest     wildcard  everything after → {"rest": "42/extra"}

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /coasters/random                                               │
    │        │                                                             │
    │        ▼                                                             │
    │   ANY  /coasters        → CoasterHandler.collection                  │
    │   ANY  /coasters/*rest  → CoasterHandler.item      ← MATCH           │
    │   ANY  /admin           → AdminHandler.handle                        │
    │        │                                                             │
    │        ▼                                                             │
    │   request.path_params = {"rest": "random"}                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Patterns compile to anchored regexes with named groups. Routes are tried in
registration order and the first match wins. A path that matches some
route under a different method gets 405; one that matches nothing gets 404.

Paths are matched as sent. "/coasters/" is not "/coasters": it falls
through to "/coasters/*rest" with an empty rest.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


Handler = Callable[[HTTPRequest], HTTPResponse]

ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


@dataclass
class Route:
    """A URL pattern bound to a handler. method=None accepts any method."""

    path: str
    method: Optional[str]
    handler: Handler

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    route: Route
    params: Dict[str, str]


class Router:
    """
    First-match HTTP router.

        router = Router()

        @router.route("/coasters")
        def collection(request):
            ...

        @router.route("/coasters/:id", method="GET")
        def fetch(request):
            coaster_id = request.path_params["id"]
            ...
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (e.g. /coasters/:id)
            handler: Callable taking a request and returning a response
            method: HTTP method, or None for any method
        """
        pattern, param_names = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a route pattern into an anchored regex.

            "/coasters/:id"    → ^/coasters/(?P<id>[^/]+)$
            "/coasters/*rest"  → ^/coasters/(?P<rest>.*)$

        A wildcard must be the last segment; anything after it is ignored.
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]+)")

            elif segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
                break

            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")  # root route

        regex_parts.append("$")
        return re.compile("".join(regex_parts)), param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """Return the first route matching method and path, or None."""
        for route in self._routes:
            if route.method and route.method != method.upper():
                continue

            if route._pattern:
                match = route._pattern.match(path)
                if match:
                    return RouteMatch(route=route, params=match.groupdict())

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for a path, used for the Allow header on 405."""
        methods = set()

        for route in self._routes:
            if route._pattern and route._pattern.match(path):
                if route.method is None:
                    return list(ALL_METHODS)
                methods.add(route.method)

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request: matched handler, else 405 if the path exists
        under other methods, else 404.
        """
        match = self.match(request.method, request.path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found(f"No route matches {request.path}")

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(). Returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler
        return decorator

    def routes(self) -> List[Route]:
        return list(self._routes)
