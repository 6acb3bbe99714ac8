"""
=============================================================================
URL ROUTER
=============================================================================

Maps a parsed request to a handler. Two kinds of patterns exist:

- Static paths:   /  /user-agent          exact string match
- Wildcard paths: /echo/*text             literal prefix, remainder captured

Routes are tried in registration order and the FIRST match wins.

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /echo/hello                                                    │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  Registered routes (in order):                               │   │
    │   │    ANY  /                 → index                            │   │
    │   │    ANY  /echo/*text       → echo          ← MATCH            │   │
    │   │    ANY  /user-agent       → user_agent                       │   │
    │   │    GET  /files/*filename  → files.get                        │   │
    │   │    POST /files/*filename  → files.post                       │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(request)        request.path_params == {"text": "hello"}     │
    │                                                                      │
    │   No route matched?                                                  │
    │     path matched under another method → 405 Method Not Allowed      │
    │     otherwise                         → 404 Not Found               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Paths are matched as received: no URL decoding, no trailing-slash
normalization. "/echo/a%20b" captures "a%20b".

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, method_not_allowed, not_found


# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A URL pattern bound to a handler.

        Route(
            path="/files/*filename",   # pattern
            method="GET",              # None = any method
            handler=files.get,
            name="files.get",
        )
    """

    path: str
    method: Optional[str]
    handler: Handler
    name: Optional[str] = None

    # Internal: compiled regex pattern for matching
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)

    def accepts(self, method: str) -> bool:
        return self.method is None or self.method == method


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

        Pattern: /echo/*text
        Path:    /echo/abc
        Result:  RouteMatch(route=<Route>, params={"text": "abc"})
    """

    route: Route
    params: Dict[str, str]


class Router:
    """
    Request router with exact and wildcard-prefix routes.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router()

        @router.route("/")
        def index(request):
            return ok()

        @router.route("/echo/*text")
        def echo(request):
            return ok(request.path_params["text"])

        router.add_route("/files/*filename", files.get, method="GET")

        response = router.handle(request)

    ==========================================================================
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
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: Static path ("/user-agent") or wildcard pattern
                  ("/files/*filename"); the wildcard must be last.
            handler: Called with the request when the route matches.
            method: Only match this method. None matches any method.
            name: Optional label, used in logs and route listings.

        Returns:
            The registered Route.
        """
        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a route pattern into a regex.

            "/user-agent"      → ^/user\\-agent$
            "/echo/*text"      → ^/echo/(?P<text>.*)$

        Everything before the ``*`` is escaped and must match literally.
        """
        prefix, star, param_name = path.partition("*")
        if not star:
            return re.compile(re.escape(path))

        if "/" in param_name:
            raise ValueError(f"Wildcard must be the last segment: {path}")

        param_name = param_name or "wildcard"
        return re.compile(f"{re.escape(prefix)}(?P<{param_name}>.*)", re.DOTALL)

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route("/user-agent")
            def user_agent(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST", name)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route accepting this method and path.

        Returns:
            RouteMatch if found, None otherwise
        """
        for route in self._routes:
            if not route.accepts(method):
                continue

            match = route._pattern.fullmatch(path)
            if match:
                return RouteMatch(route=route, params=match.groupdict())

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """
        Methods with a route matching this path.

        Returns an empty list when no route matches the path at all.
        A route without a method filter counts as allowing every method,
        in which case ``["*"]`` is returned.
        """
        methods = set()
        for route in self._routes:
            if route._pattern.fullmatch(path):
                if route.method is None:
                    return ["*"]
                methods.add(route.method)
        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request and return the handler's response.

        1. First matching route → its handler, with wildcard captures
           placed in ``request.path_params``
        2. Path known under other methods → 405 Method Not Allowed
        3. Otherwise → 404 Not Found
        """
        match = self.match(request.method, request.path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        if self.get_allowed_methods(request.path):
            return method_not_allowed()

        return not_found()

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in matching order."""
        return list(self._routes)

    def describe(self) -> List[str]:
        """
        One line per route, for startup logs:

            ANY      /
            ANY      /echo/*text
            GET      /files/*filename
        """
        return [f"{route.method or 'ANY':8} {route.path}" for route in self._routes]
