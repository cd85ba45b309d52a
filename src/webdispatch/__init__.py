"""
webdispatch - request dispatch and static file delivery for a small
embedded HTTP service.

    from webdispatch import HTTPServer, StaticFileHandler

    server = HTTPServer(8080, 4)

    @server.get(r"^/match/([0-9]+)$")
    def match_number(response, request):
        response.send(200, request.path_match[1])

    server.default("GET")(StaticFileHandler("web"))
    server.run()
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .errors import (
    StaticFileError,
    InvalidRootError,
    PathTraversalError,
    SymlinkRejectedError,
    NotFoundError,
    NotAFileError,
    OpenFailedError,
)
from .http import Request, Response, Router, HTTPStatus, ContentTypeRegistry
from .static import PathResolver, StreamingTransfer, TransferPlan
from .handlers import StaticFileHandler
from .server import HTTPServer

__all__ = [
    "__version__",
    "HTTPServer",
    "ServerConfig",
    "Router",
    "Request",
    "Response",
    "HTTPStatus",
    "ContentTypeRegistry",
    "PathResolver",
    "StreamingTransfer",
    "TransferPlan",
    "StaticFileHandler",
    "StaticFileError",
    "InvalidRootError",
    "PathTraversalError",
    "SymlinkRejectedError",
    "NotFoundError",
    "NotAFileError",
    "OpenFailedError",
]
