"""
Unit tests for the request router.
"""

import re

import pytest

from webdispatch.http import Router

from helpers import make_request


def recorder(name, calls):
    def handler(response, request):
        calls.append((name, request.path_match))
    return handler


class TestRouteMatching:
    """Tests for route selection."""

    def test_exact_match(self, response):
        """Test that a matching route is invoked."""
        router = Router()
        calls = []
        router.add_route("POST", r"^/string$", recorder("echo", calls))

        assert router.dispatch(make_request("POST", "/string"), response)
        assert calls[0][0] == "echo"

    def test_must_match_whole_path(self):
        """Test that patterns are matched against the whole path."""
        router = Router()
        router.add_route("GET", r"/info", lambda response, request: None)

        assert router.match("GET", "/info") is not None
        assert router.match("GET", "/info/extra") is None
        assert router.match("GET", "/x/info") is None

    def test_method_is_compared_verbatim(self):
        """Test that method names are case-sensitive."""
        router = Router()
        router.add_route("GET", r"^/info$", lambda response, request: None)

        assert router.match("get", "/info") is None
        assert router.match("POST", "/info") is None

    def test_first_match_wins(self, response):
        """Test registration order."""
        router = Router()
        calls = []
        router.add_route("GET", r"^/match/([0-9]+)$", recorder("digits", calls))
        router.add_route("GET", r"^/match/(.+)$", recorder("anything", calls))

        router.dispatch(make_request("GET", "/match/7"), response)
        router.dispatch(make_request("GET", "/match/x"), response)

        assert [name for name, _ in calls] == ["digits", "anything"]

    def test_captures_are_exposed(self, response):
        """Test that capture groups reach the handler."""
        router = Router()
        calls = []
        router.add_route("GET", r"^/match/([0-9]+)$", recorder("digits", calls))
        request = make_request("GET", "/match/123")

        router.dispatch(request, response)

        assert calls[0][1][0] == "/match/123"
        assert calls[0][1][1] == "123"
        assert request.path_captures == ("123",)
        assert request.capture(1) == "123"

    def test_compiled_pattern(self):
        """Test registering a precompiled pattern."""
        router = Router()
        router.add_route("GET", re.compile(r"/users/(\w+)", re.IGNORECASE), lambda r, q: None)

        found = router.match("GET", "/USERS/ada")
        assert found is not None
        assert found.match[1] == "ada"

    def test_invalid_pattern(self):
        """Test that a bad regex fails at registration."""
        with pytest.raises(re.error):
            Router().add_route("GET", r"^/(unclosed$", lambda r, q: None)


class TestDefaultHandler:
    """Tests for the per-method default."""

    def test_default_used_when_nothing_matches(self, response):
        """Test the fallback."""
        router = Router()
        calls = []
        router.add_route("GET", r"^/info$", recorder("info", calls))
        router.set_default("GET", recorder("static", calls))
        request = make_request("GET", "/index.html")

        assert router.dispatch(request, response)

        assert calls == [("static", None)]
        assert request.path_captures == ()

    def test_default_is_per_method(self, response):
        """Test that a GET default does not serve POST."""
        router = Router()
        router.set_default("GET", lambda r, q: None)

        assert not router.dispatch(make_request("POST", "/anything"), response)

    def test_no_route_no_default(self, sink, response):
        """Test that nothing is invoked or written."""
        router = Router()
        router.add_route("GET", r"^/info$", lambda r, q: r.send(200, "info"))

        assert router.dispatch(make_request("PUT", "/info"), response) is False
        assert sink.events == []

    def test_match_reports_default(self):
        """Test RouteMatch.is_default."""
        router = Router()
        router.set_default("GET", lambda r, q: None)

        found = router.match("GET", "/")
        assert found.is_default
        assert found.match is None


class TestRegistration:
    """Tests for the registration API."""

    def test_reregistering_replaces_in_place(self, response):
        """Test that the same pattern keeps its position."""
        router = Router()
        calls = []
        router.add_route("GET", r"^/a$", recorder("old", calls))
        router.add_route("GET", r"^/.*$", recorder("catch-all", calls))
        router.add_route("GET", r"^/a$", recorder("new", calls))

        router.dispatch(make_request("GET", "/a"), response)

        assert len(router.routes("GET")) == 2
        assert calls[0][0] == "new"

    def test_decorators(self):
        """Test the decorator forms."""
        router = Router()

        @router.get(r"^/info$")
        def info(response, request):
            pass

        @router.post(r"^/json$")
        def parse_json(response, request):
            pass

        @router.put(r"^/item$")
        def put_item(response, request):
            pass

        @router.delete(r"^/item$")
        def delete_item(response, request):
            pass

        @router.default("GET")
        def fallback(response, request):
            pass

        assert router.match("GET", "/info").handler is info
        assert router.match("POST", "/json").handler is parse_json
        assert router.match("PUT", "/item").handler is put_item
        assert router.match("DELETE", "/item").handler is delete_item
        assert router.match("GET", "/else").handler is fallback
        assert router.default_methods() == ["GET"]

    def test_routes_listing(self):
        """Test listing in registration order."""
        router = Router()
        router.add_route("POST", r"^/string$", lambda r, q: None)
        router.add_route("GET", r"^/info$", lambda r, q: None)

        assert [route.source for route in router.routes()] == [r"^/string$", r"^/info$"]
        assert router.routes("DELETE") == []

    def test_print_routes(self, capsys):
        """Test the routing table printout."""
        router = Router()
        router.add_route("GET", r"^/info$", lambda r, q: None)
        router.set_default("GET", lambda r, q: None)

        router.print_routes()

        out = capsys.readouterr().out
        assert "^/info$" in out
        assert "(default)" in out


class TestHandlerOutput:
    """Tests that handler output is passed through."""

    def test_writes_are_not_altered(self, sink, response):
        """Test that handler bytes reach the sink verbatim."""
        router = Router()
        router.add_route("GET", r"^/raw$", lambda r, q: r.write(b"not even http"))

        router.dispatch(make_request("GET", "/raw"), response)

        assert sink.data == b"not even http"

    def test_handler_errors_propagate(self, response):
        """Test that the router does not swallow handler exceptions."""
        router = Router()

        def broken(response, request):
            raise RuntimeError("boom")

        router.add_route("GET", r"^/boom$", broken)

        with pytest.raises(RuntimeError):
            router.dispatch(make_request("GET", "/boom"), response)
