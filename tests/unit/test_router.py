"""
Unit tests for the router.
"""

import pytest

from bytehttp.config import ServerConfig
from bytehttp.http.request import HTTPMethod, HTTPRequest, RequestHeaders
from bytehttp.http.response import HTTPResponse, ok
from bytehttp.http.router import Route, Router, create_router
from bytehttp.http.status_codes import HTTPStatus


def make_request(path: str, method: HTTPMethod = HTTPMethod.GET, **headers) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path, headers=RequestHeaders(**headers))


def dummy_handler(request: HTTPRequest, remainder: str) -> HTTPResponse:
    """Dummy handler for testing."""
    return ok(remainder.encode())


class TestRoute:
    """Tests for Route."""

    def test_prefix_match(self):
        """Test prefix routes."""
        route = Route("/echo/", dummy_handler)

        assert route.matches("/echo/abc")
        assert route.matches("/echo/")
        assert not route.matches("/echo")

    def test_exact_match(self):
        """Test exact routes."""
        route = Route("/", dummy_handler, exact=True)

        assert route.matches("/")
        assert not route.matches("/index.html")

    def test_remainder(self):
        """Test the part after the pattern."""
        assert Route("/echo/", dummy_handler).remainder("/echo/a/b") == "a/b"


class TestRouter:
    """Tests for Router class."""

    def test_add_routes_chainable(self):
        """Test adding routes."""
        router = Router().add_prefix("/a/", dummy_handler).add_exact("/", dummy_handler)

        assert [route.pattern for route in router.routes] == ["/a/", "/"]
        assert router.routes[1].exact

    def test_first_match_wins(self):
        """Test registration order as priority."""
        first = lambda request, rest: ok(b"first")
        second = lambda request, rest: ok(b"second")
        router = Router().add_prefix("/a", first).add_prefix("/a/b", second)

        assert router.route(make_request("/a/b")).body.buffer == b"first"

    def test_no_match(self):
        """Test the 404 fallback."""
        router = Router().add_prefix("/a/", dummy_handler)
        response = router.route(make_request("/b"))

        assert response.status is HTTPStatus.NOT_FOUND
        assert not response.has_body

    def test_match_returns_route(self):
        """Test looking up a route without dispatching."""
        router = Router().add_prefix("/a/", dummy_handler)

        assert router.match("/a/x").pattern == "/a/"
        assert router.match("/x") is None


class TestDefaultRoutes:
    """Tests for the routing table built by create_router()."""

    @pytest.fixture
    def router(self) -> Router:
        return create_router()

    def test_route_order(self, router: Router):
        """Test the fixed priority order."""
        assert [route.pattern for route in router.routes] == [
            "/files/", "/echo/", "/user-agent", "/",
        ]

    def test_root(self, router: Router):
        """Test GET / answers 200 with an empty body."""
        response = router.route(make_request("/"))

        assert response.status is HTTPStatus.OK
        assert not response.has_body

    def test_echo(self, router: Router):
        """Test /echo/<text>."""
        response = router.route(make_request("/echo/abc"))

        assert response.status is HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body.buffer == b"abc"

    def test_echo_empty(self, router: Router):
        """Test /echo/ with nothing after it."""
        response = router.route(make_request("/echo/"))

        assert response.status is HTTPStatus.OK
        assert not response.has_body

    def test_echo_without_slash_is_404(self, router: Router):
        """Test that /echo alone matches nothing."""
        assert router.route(make_request("/echo")).status is HTTPStatus.NOT_FOUND

    def test_user_agent(self, router: Router):
        """Test /user-agent."""
        response = router.route(make_request("/user-agent", user_agent="foobar/1.2.3"))

        assert response.status is HTTPStatus.OK
        assert response.body.buffer == b"foobar/1.2.3"

    def test_user_agent_is_prefix(self, router: Router):
        """Test that /user-agent matches as a prefix."""
        response = router.route(make_request("/user-agent/extra", user_agent="curl"))
        assert response.body.buffer == b"curl"

    def test_user_agent_absent(self, router: Router):
        """Test a request without User-Agent."""
        response = router.route(make_request("/user-agent"))

        assert response.status is HTTPStatus.OK
        assert not response.has_body

    def test_unknown_path(self, router: Router):
        """Test 404 for anything else."""
        assert router.route(make_request("/index.html")).status is HTTPStatus.NOT_FOUND

    def test_method_ignored_outside_files(self, router: Router):
        """Test that echo answers any method."""
        response = router.route(make_request("/echo/x", method=HTTPMethod.DELETE))
        assert response.body.buffer == b"x"

    def test_files_without_directory(self, router: Router):
        """Test /files/ with no root configured."""
        response = router.route(make_request("/files/anything"))
        assert response.status is HTTPStatus.SERVICE_UNAVAILABLE

    def test_files_uses_request_config(self, router: Router, tmp_path):
        """Test that the file root comes from the request's config."""
        (tmp_path / "a.txt").write_bytes(b"data")
        request = HTTPRequest(
            method=HTTPMethod.GET,
            path="/files/a.txt",
            config=ServerConfig(directory=tmp_path),
        )

        response = router.route(request)

        assert response.status is HTTPStatus.OK
        assert response.body.buffer == b"data"
