"""
=============================================================================
URL ROUTER
=============================================================================

Maps a parsed request to a response by path prefix, in a fixed priority
order. The first matching route wins:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING TABLE                                 │
    ├─────┬──────────────────┬───────┬──────────────────────────────────────┤
    │  #  │ Pattern          │ Match │ Response                             │
    ├─────┼──────────────────┼───────┼──────────────────────────────────────┤
    │  1  │ /files/          │ prefix│ FileHandler (remainder = filename)   │
    │  2  │ /echo/           │ prefix│ 200, body = remainder                │
    │  3  │ /user-agent      │ prefix│ 200, body = User-Agent header        │
    │  4  │ /                │ exact │ 200, empty body                      │
    │  -  │ (anything else)  │       │ 404, empty body                      │
    └─────┴──────────────────┴───────┴──────────────────────────────────────┘

Routes don't look at the method (except inside FileHandler) or at the
Accept / Content-Type headers. Accept-Encoding is handled after routing by
the connection handler; every route here returns an identity body.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, ok, not_found
from ..config import ServerConfig
from ..handlers.files import FileHandler


logger = logging.getLogger(__name__)


# A handler gets the request and the part of the path after the route's
# pattern ("" for exact routes).
Handler = Callable[[HTTPRequest, str], HTTPResponse]


@dataclass(frozen=True)
class Route:
    """
    One entry in the routing table.

    Attributes:
        pattern: Path prefix ("/echo/") or exact path ("/").
        handler: Called as handler(request, remainder).
        exact: Match the whole path instead of a prefix.
    """

    pattern: str
    handler: Handler
    exact: bool = False

    def matches(self, path: str) -> bool:
        if self.exact:
            return path == self.pattern
        return path.startswith(self.pattern)

    def remainder(self, path: str) -> str:
        """
        Part of path after the pattern.

        Example:
            Route("/echo/", ...).remainder("/echo/abc")  →  "abc"
        """
        return path[len(self.pattern):]


class Router:
    """
    Ordered list of routes with a 404 fallback.

    Usage:
        router = Router()
        router.add_prefix("/echo/", lambda request, text: ok(text.encode()))
        router.add_exact("/", lambda request, _: ok())
        response = router.route(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_prefix(self, prefix: str, handler: Handler) -> "Router":
        self._routes.append(Route(prefix, handler))
        return self

    def add_exact(self, path: str, handler: Handler) -> "Router":
        self._routes.append(Route(path, handler, exact=True))
        return self

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def match(self, path: str) -> Optional[Route]:
        """First route matching path, in registration order."""
        for route in self._routes:
            if route.matches(path):
                return route
        return None

    def route(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        Returns:
            The matching handler's response, or 404 with an empty body.
        """
        route = self.match(request.path)
        if route is None:
            logger.debug(f"No route for {request.path}")
            return not_found()
        return route.handler(request, route.remainder(request.path))


# =============================================================================
# ROUTE HANDLERS
# =============================================================================

def echo(request: HTTPRequest, text: str) -> HTTPResponse:
    """GET /echo/<text>: the text back as UTF-8."""
    return ok(text.encode("utf-8"))


def user_agent(request: HTTPRequest, _: str) -> HTTPResponse:
    """GET /user-agent: the User-Agent header back ("" if absent)."""
    return ok(request.user_agent.encode("utf-8"))


def index(request: HTTPRequest, _: str) -> HTTPResponse:
    """GET /: 200 with nothing in it."""
    return ok()


def create_router(config: Optional[ServerConfig] = None) -> Router:
    """
    Build the server's routing table, in priority order.

    The file root comes from each request's config, so config is only
    used here to log whether file serving is on.
    """
    if config is not None:
        if config.files_enabled:
            logger.info(f"Serving files from {config.directory}")
        else:
            logger.info("No directory configured, /files/ will answer 503")

    files = FileHandler()
    return (Router()
        .add_prefix("/files/", files.handle)
        .add_prefix("/echo/", echo)
        .add_prefix("/user-agent", user_agent)
        .add_exact("/", index))
