"""
=============================================================================
EXAMPLE APPLICATION
=============================================================================

A handful of handlers showing the router's features, plus the static
file handler as the default GET handler.

    POST ^/string$            echo the body
    POST ^/json$              "firstName lastName" from a JSON body
    GET  ^/info$              HTML page describing the request
    GET  ^/match/([0-9]+)$    echo the captured number
    GET  (default)            files from the web root

Try it:

    python -m webdispatch --web-root ./web
    curl -d hello localhost:8080/string
    curl localhost:8080/match/123
=============================================================================
"""

import json
from typing import Optional

from ..config import ServerConfig
from ..http.request import Request
from ..http.response import Response
from ..http.status_codes import HTTPStatus
from ..server import HTTPServer
from .static import StaticFileHandler


def echo_string(response: Response, request: Request) -> None:
    """Respond with the posted body."""
    response.send(HTTPStatus.OK, request.read_body())


def json_full_name(response: Response, request: Request) -> None:
    """
    Respond with firstName + " " + lastName from a posted JSON object.

    Example body:
        {"firstName": "John", "lastName": "Smith", "age": 25}

    Any failure while decoding the body (malformed or too deeply nested
    JSON, a missing key, a non-object document) is answered with 400 and
    the error text as the body.
    """
    try:
        document = json.load(request.body)
        name = f"{document['firstName']} {document['lastName']}"
    except Exception as e:
        response.send(HTTPStatus.BAD_REQUEST, str(e))
        return

    response.send(HTTPStatus.OK, name)


def request_info(response: Response, request: Request) -> None:
    """
    Respond with an HTML summary of the request.

    Header names are listed lower-cased, as the parser stores them, not
    in the casing the client sent.
    """
    parts = [
        f"<h1>Request from {request.remote_address} ({request.remote_port})</h1>",
        f"{request.method} {request.path} HTTP/{request.http_version}<br>",
    ]
    for name, value in request.headers.items():
        parts.append(f"{name}: {value}<br>")

    response.send(HTTPStatus.OK, "".join(parts))


def match_number(response: Response, request: Request) -> None:
    """Respond with the number captured from /match/<number>."""
    response.send(HTTPStatus.OK, request.path_match[1])


def build_example_server(
    config: Optional[ServerConfig] = None,
    port: int = 8080,
    workers: int = 4,
) -> HTTPServer:
    """
    Create a server with the example routes registered.

    Args:
        config: Server configuration (web root, 404 page, ...).
        port: TCP port.
        workers: Worker threads.
    """
    config = config or ServerConfig()
    server = HTTPServer(port, workers, config)

    server.post(r"^/string$")(echo_string)
    server.post(r"^/json$")(json_full_name)
    server.get(r"^/info$")(request_info)
    server.get(r"^/match/([0-9]+)$")(match_number)

    server.default("GET")(StaticFileHandler(
        config.web_root,
        index_file=config.index_file,
        not_found_page=config.not_found_page,
        buffer_size=config.buffer_size,
    ))

    return server
