"""
Unit tests for URL router and the installed routing table.
"""

import pytest

from minihttp.handlers import create_router
from minihttp.http.router import Router
from minihttp.http.request import HTTPRequest, RequestLine, parse_request
from minihttp.http.response import HTTPResponse, ok
from minihttp.storage import MemoryStorage


def make_request(method: str, path: str, headers=None, body: bytes = b"") -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(
        RequestLine(method, path, "HTTP/1.1"),
        headers=headers or {},
        body=body,
    )


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    """Dummy handler for testing."""
    return ok(request.path)


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        """Test adding routes."""
        router = Router()
        route = router.add_route("/users", dummy_handler, method="get")

        assert router.routes() == [route]
        assert route.path == "/users"
        assert route.method == "GET"

    def test_match_static_path(self):
        """Static paths match exactly."""
        router = Router()
        router.add_route("/user-agent", dummy_handler)

        assert router.match("GET", "/user-agent") is not None
        assert router.match("GET", "/user-agent/") is None
        assert router.match("GET", "/user-agentx") is None

    def test_static_path_is_literal(self):
        """Regex metacharacters in a path are matched literally."""
        router = Router()
        router.add_route("/a.b", dummy_handler)

        assert router.match("GET", "/a.b") is not None
        assert router.match("GET", "/axb") is None

    def test_match_wildcard(self):
        """A wildcard captures the rest of the path verbatim."""
        router = Router()
        router.add_route("/echo/*text", dummy_handler)

        match = router.match("GET", "/echo/a/b%20c")
        assert match.params == {"text": "a/b%20c"}

        assert router.match("GET", "/echo/").params == {"text": ""}
        assert router.match("GET", "/echo") is None

    def test_wildcard_must_be_last(self):
        with pytest.raises(ValueError):
            Router().add_route("/files/*name/extra", dummy_handler)

    def test_first_match_wins(self):
        router = Router()
        first = router.add_route("/echo/*text", dummy_handler)
        router.add_route("/echo/special", dummy_handler)

        assert router.match("GET", "/echo/special").route is first

    def test_match_with_method(self):
        """Test method-based routing."""
        router = Router()
        router.add_route("/files/*name", dummy_handler, method="GET")
        router.add_route("/files/*name", dummy_handler, method="POST")

        assert router.match("GET", "/files/a").route.method == "GET"
        assert router.match("POST", "/files/a").route.method == "POST"
        assert router.match("DELETE", "/files/a") is None

    def test_get_allowed_methods(self):
        router = Router()
        router.add_route("/files/*name", dummy_handler, method="POST")
        router.add_route("/files/*name", dummy_handler, method="GET")
        router.add_route("/", dummy_handler)

        assert router.get_allowed_methods("/files/a") == ["GET", "POST"]
        assert router.get_allowed_methods("/") == ["*"]
        assert router.get_allowed_methods("/nope") == []

    def test_handle_sets_path_params(self):
        router = Router()
        seen = {}

        @router.route("/echo/*text")
        def capture(request):
            seen.update(request.path_params)
            return ok()

        router.handle(make_request("GET", "/echo/xyz"))
        assert seen == {"text": "xyz"}

    def test_decorators(self):
        router = Router()

        @router.get("/thing")
        def get_thing(request):
            return ok("got")

        @router.post("/thing")
        def post_thing(request):
            return ok("posted")

        assert router.handle(make_request("GET", "/thing")).body == b"got"
        assert router.handle(make_request("POST", "/thing")).body == b"posted"

    def test_405_and_404_fallbacks(self):
        router = Router()
        router.add_route("/only-get", dummy_handler, method="GET")

        assert router.handle(make_request("PUT", "/only-get")).status_code == 405
        assert router.handle(make_request("GET", "/missing")).status_code == 404

    def test_describe(self):
        router = Router()
        router.add_route("/", dummy_handler)
        router.add_route("/files/*name", dummy_handler, method="GET")

        assert router.describe() == [
            "ANY      /",
            "GET      /files/*name",
        ]


class TestRoutingTable:
    """The endpoints installed by create_router()."""

    @pytest.fixture
    def router(self, memory_storage: MemoryStorage) -> Router:
        return create_router(memory_storage)

    def test_root(self, router: Router):
        response = router.handle(make_request("GET", "/"))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"\r\n"
        )

    def test_echo(self, router: Router):
        response = router.handle(make_request("GET", "/echo/hello"))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_echo_not_url_decoded(self, router: Router):
        response = router.handle(make_request("GET", "/echo/a%20b"))
        assert response.body == b"a%20b"

    def test_echo_length_counts_bytes(self, router: Router):
        request = parse_request(b"GET /echo/\xc3\xa9\xff HTTP/1.1\r\n\r\n")
        response = router.handle(request)

        assert response.body == b"\xc3\xa9\xff"
        assert response.get_header("Content-Length") == "3"

    def test_user_agent(self, router: Router):
        request = make_request("GET", "/user-agent", {"User-Agent": "test-client/1.0"})
        response = router.handle(request)

        assert response.status_code == 200
        assert response.body == b"test-client/1.0"
        assert response.get_header("Content-Length") == "15"

    def test_user_agent_missing(self, router: Router):
        response = router.handle(make_request("GET", "/user-agent"))

        assert response.status_code == 200
        assert response.body == b""
        assert response.get_header("Content-Length") == "0"

    @pytest.mark.parametrize("method", ["GET", "POST", "DELETE", "PATCH", "BREW"])
    def test_basic_routes_ignore_method(self, router: Router, method: str):
        assert router.handle(make_request(method, "/")).status_code == 200
        assert router.handle(make_request(method, "/echo/x")).body == b"x"
        assert router.handle(make_request(method, "/user-agent")).status_code == 200

    @pytest.mark.parametrize("path", ["/nope", "/echo", "/user-agent/", "//", "/files"])
    def test_unknown_paths(self, router: Router, path: str):
        response = router.handle(make_request("GET", path))

        assert response.status_code == 404
        assert response.body == b""
        assert response.get_header("Content-Length") == "0"

    def test_files_method_not_allowed(self, router: Router):
        response = router.handle(make_request("DELETE", "/files/x.txt"))

        assert response.to_bytes() == (
            b"HTTP/1.1 405 Method Not Allowed\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"\r\n"
        )

    def test_files_routes_without_storage(self):
        router = create_router()

        assert router.handle(make_request("GET", "/files/a")).status_code == 404
        assert router.handle(make_request("DELETE", "/files/a")).status_code == 405

        response = router.handle(make_request("POST", "/files/a", body=b"hi"))
        assert response.status_code == 500
        assert response.get_header("Content-Length") == "0"

        assert router.handle(make_request("GET", "/echo/ok")).body == b"ok"
