"""
=============================================================================
REQUEST ROUTER
=============================================================================

Picks exactly one handler per request from an ordered table of
(method, path regex) entries, with one optional default handler per
method.

=============================================================================
ROUTING ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /match/123                                                     │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER                                                      │   │
    │   │                                                              │   │
    │   │  Routes for "GET" (registration order):                      │   │
    │   │  ┌────────────────────────────────────────────────────────┐ │   │
    │   │  │ ^/info$            → request_info                       │ │   │
    │   │  │ ^/match/([0-9]+)$  → match_number   ← FIRST MATCH WINS  │ │   │
    │   │  └────────────────────────────────────────────────────────┘ │   │
    │   │  Default for "GET":   → static files                        │   │
    │   │                                                              │   │
    │   │  request.path_match[1] == "123"                             │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   match_number(response, request)                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MATCHING RULES
=============================================================================

1. Only routes registered for the request's method are tried. Method
   strings are compared verbatim ("GET" != "get").

2. Each pattern must match the WHOLE path (re.fullmatch). "^" and "$"
   anchors are allowed but not required.

3. Routes are tried in registration order; the first match wins and
   nothing after it is evaluated.

4. No match → the method's default handler. No default handler →
   nothing is invoked and dispatch() returns False. The router has no
   built-in 404; producing one is the default handler's job.

=============================================================================
INTERVIEW QUESTIONS ABOUT ROUTING
=============================================================================

Q: "Why first-match instead of best-match?"
A: "It's predictable and O(R) with an early exit. Specific routes
   just need to be registered before general ones."

Q: "Is the router thread-safe?"
A: "The table is filled at startup and only read afterwards. Each
   dispatch keeps its state on the request object, so concurrent
   workers never share mutable router state."

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union
import logging
import re

from .request import Request
from .response import Response


logger = logging.getLogger(__name__)


# =============================================================================
# TYPE ALIASES
# =============================================================================

# A handler writes its own response; its return value is ignored
Handler = Callable[[Response, Request], None]

Pattern = Union[str, "re.Pattern[str]"]


@dataclass
class Route:
    """
    A registered (method, pattern) → handler entry.

        Route(
            method="GET",
            pattern=re.compile(r"^/match/([0-9]+)$"),
            handler=match_number,
        )
    """

    method: str
    pattern: "re.Pattern[str]"
    handler: Handler

    @property
    def source(self) -> str:
        """The pattern as it was registered."""
        return self.pattern.pattern


@dataclass
class RouteMatch:
    """
    Result of a successful match.

    match is None when the default handler was selected.
    """

    handler: Handler
    route: Optional[Route] = None
    match: Optional["re.Match[str]"] = field(default=None, repr=False)

    @property
    def is_default(self) -> bool:
        return self.route is None


class Router:
    """
    Ordered, per-method routing table.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router()

        @router.post(r"^/string$")
        def echo(response, request):
            body = request.read_body()
            response.send(200, body)

        @router.get(r"^/match/([0-9]+)$")
        def match_number(response, request):
            response.send(200, request.path_match[1])

        @router.default("GET")
        def static_files(response, request):
            ...

        router.dispatch(request, response)

    ==========================================================================
    """

    def __init__(self):
        self._routes: Dict[str, List[Route]] = {}
        self._defaults: Dict[str, Handler] = {}

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add_route(self, method: str, pattern: Pattern, handler: Handler) -> Route:
        """
        Register a handler for a method and path pattern.

        Registering the same method and pattern again replaces the handler
        but keeps the route's position in the table.

        Args:
            method: HTTP method, compared verbatim.
            pattern: Regex string or compiled pattern.
            handler: Callable taking (response, request).

        Returns:
            The Route entry.

        Raises:
            re.error: If the pattern does not compile.
        """
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        routes = self._routes.setdefault(method, [])

        for route in routes:
            if route.pattern.pattern == compiled.pattern and route.pattern.flags == compiled.flags:
                route.handler = handler
                logger.debug(f"Replaced handler for {method} {compiled.pattern}")
                return route

        route = Route(method=method, pattern=compiled, handler=handler)
        routes.append(route)
        return route

    def set_default(self, method: str, handler: Handler) -> None:
        """Register the handler used when no pattern matches for a method."""
        self._defaults[method] = handler

    def route(self, pattern: Pattern, method: str) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route(r"^/json$", "POST")
            def parse_json(response, request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, pattern, handler)
            return handler
        return decorator

    def get(self, pattern: Pattern) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(pattern, "GET")

    def post(self, pattern: Pattern) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(pattern, "POST")

    def put(self, pattern: Pattern) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self.route(pattern, "PUT")

    def delete(self, pattern: Pattern) -> Callable[[Handler], Handler]:
        """Register a DELETE route."""
        return self.route(pattern, "DELETE")

    def default(self, method: str) -> Callable[[Handler], Handler]:
        """Decorator form of set_default()."""
        def decorator(handler: Handler) -> Handler:
            self.set_default(method, handler)
            return handler
        return decorator

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Select the handler for a method and path.

        Returns:
            RouteMatch for the first matching route, a default RouteMatch
            if only the default handler applies, or None.
        """
        for route in self._routes.get(method, ()):
            found = route.pattern.fullmatch(path)
            if found:
                return RouteMatch(handler=route.handler, route=route, match=found)

        handler = self._defaults.get(method)
        if handler is not None:
            return RouteMatch(handler=handler)

        return None

    def dispatch(self, request: Request, response: Response) -> bool:
        """
        Route a request and invoke its handler.

        Sets request.path_match before calling the handler. Whatever the
        handler writes goes to the client unchanged.

        Returns:
            True if a handler was invoked, False if nothing matched.
        """
        selected = self.match(request.method, request.path)
        if selected is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return False

        if selected.is_default:
            logger.debug(f"{request.method} {request.path} -> default handler")
        else:
            logger.debug(f"{request.method} {request.path} -> {selected.route.source}")

        request.path_match = selected.match
        selected.handler(response, request)
        return True

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def routes(self, method: Optional[str] = None) -> List[Route]:
        """All routes (or those of one method), in registration order."""
        if method is not None:
            return list(self._routes.get(method, ()))
        return [route for routes in self._routes.values() for route in routes]

    def default_methods(self) -> List[str]:
        """Methods that have a default handler."""
        return sorted(self._defaults)

    def print_routes(self) -> None:
        """
        Print the routing table.

        Example output:
            Registered Routes:
            ------------------------------------------------------------
              POST     ^/string$
              GET      ^/match/([0-9]+)$
              GET      (default)
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for route in self.routes():
            print(f"  {route.method:8} {route.source}")
        for method in self.default_methods():
            print(f"  {method:8} (default)")
        print("-" * 60)
