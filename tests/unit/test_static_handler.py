"""
Unit tests for the static file handler.
"""

import logging
import os

import pytest

from webdispatch.handlers import StaticFileHandler

from helpers import make_request, requires_symlinks, split_response


@pytest.fixture
def static(web_root):
    return StaticFileHandler(web_root)


class TestServing:
    """Tests for files that exist."""

    def test_serves_file(self, static, sink, response):
        """Test a plain file request."""
        static(response, make_request("GET", "/style.css"))

        status, headers, _ = split_response(sink.writes[0])
        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/css"
        assert sink.writes[1] == b"body { margin: 0; }"

    def test_root_serves_index(self, static, sink, response):
        """Test that '/' maps to index.html."""
        static(response, make_request("GET", "/"))

        status, _, _ = split_response(sink.writes[0])
        assert status == "HTTP/1.1 200 OK"
        assert sink.writes[1] == b"<h1>Hello</h1>"

    def test_custom_index_file(self, web_root, sink, response):
        """Test a configured index file."""
        static = StaticFileHandler(web_root, index_file="data.json")

        static(response, make_request("GET", "/"))

        _, headers, _ = split_response(sink.writes[0])
        assert headers["Content-Type"] == "application/json"

    def test_nested_file(self, static, sink, response):
        """Test a file in a subdirectory."""
        static(response, make_request("GET", "/docs/guide.txt"))
        assert sink.writes[1] == b"read me"


class TestNotFound:
    """Tests for the 404 fallback chain."""

    def test_missing_file_serves_404_page(self, static, sink, response):
        """Test the custom 404 page."""
        static(response, make_request("GET", "/missing.html"))

        status, headers, _ = split_response(sink.writes[0])
        assert status == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/html"
        assert sink.writes[1] == b"<h1>Missing</h1>"

    def test_plain_404_without_page(self, web_root, sink, response):
        """Test the text fallback when 404.html is missing."""
        os.remove(web_root / "404.html")
        static = StaticFileHandler(web_root)

        static(response, make_request("GET", "/missing.html"))

        status, headers, body = split_response(sink.data)
        assert status == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/plain"
        assert body == b'"/missing.html" not found'

    def test_404_page_disabled(self, web_root, sink, response):
        """Test an empty not_found_page."""
        static = StaticFileHandler(web_root, not_found_page="")

        static(response, make_request("GET", "/missing.html"))

        _, _, body = split_response(sink.data)
        assert body == b'"/missing.html" not found'

    def test_directory_is_not_served(self, static, sink, response):
        """Test a request for a directory."""
        static(response, make_request("GET", "/docs"))

        status, _, _ = split_response(sink.writes[0])
        assert status == "HTTP/1.1 404 Not Found"

    def test_missing_index(self, web_root, sink, response):
        """Test '/' without an index file."""
        os.remove(web_root / "index.html")
        os.remove(web_root / "404.html")
        static = StaticFileHandler(web_root)

        static(response, make_request("GET", "/"))

        _, _, body = split_response(sink.data)
        assert body == b'"/index.html" not found'


class TestRejections:
    """Tests for rejected paths and their logging."""

    def test_traversal_gets_404_page(self, static, sink, response, caplog):
        """Test that traversal looks like any other missing file."""
        with caplog.at_level(logging.WARNING, logger="webdispatch"):
            static(response, make_request("GET", "/../../etc/passwd"))

        status, _, _ = split_response(sink.writes[0])
        assert status == "HTTP/1.1 404 Not Found"
        assert sink.writes[1] == b"<h1>Missing</h1>"
        assert b"root:" not in sink.data
        assert any("path_traversal" in record.getMessage() for record in caplog.records)

    @requires_symlinks
    def test_symlink_gets_404_page(self, static, web_root, sink, response, caplog):
        """Test that symlinks are logged and not followed."""
        os.symlink(web_root / "index.html", web_root / "alias.html")

        with caplog.at_level(logging.WARNING, logger="webdispatch"):
            static(response, make_request("GET", "/alias.html"))

        status, _, _ = split_response(sink.writes[0])
        assert status == "HTTP/1.1 404 Not Found"
        assert any("symlink_rejected" in record.getMessage() for record in caplog.records)

    def test_invalid_root_logs_error(self, tmp_path, sink, response, caplog):
        """Test a missing web root."""
        static = StaticFileHandler(tmp_path / "absent")

        with caplog.at_level(logging.WARNING, logger="webdispatch"):
            static(response, make_request("GET", "/index.html"))

        _, _, body = split_response(sink.data)
        assert body == b'"/index.html" not found'
        assert any(record.levelno == logging.ERROR for record in caplog.records)

    def test_send_file_reports_failure(self, static, sink, response):
        """Test that a failed send writes nothing."""
        assert static.send_file(response, "/nope.html") is False
        assert sink.events == []
        assert static.send_file(response, "/index.html") is True
