"""
=============================================================================
HTTP LAYER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py     Request dataclass, RequestParser (engine framing)   │
    │ response.py    Response sink: write() / flush() / send()           │
    │ router.py      Router: (method, regex) → handler, default handler  │
    │ mime_types.py  ContentTypeRegistry: extension → MIME type          │
    │ status_codes.py HTTPStatus with reason phrases                     │
    └─────────────────────────────────────────────────────────────────────┘

Handler signature, everywhere in this package:

    def handler(response: Response, request: Request) -> None

=============================================================================
"""

from .request import HTTPParseError, Request, RequestParser
from .response import Response, format_head, status_line
from .router import Handler, Route, RouteMatch, Router
from .status_codes import HTTPStatus
from .mime_types import CONTENT_TYPES, ContentTypeRegistry, content_type_for, lookup

__all__ = [
    # Requests
    "Request",
    "RequestParser",
    "HTTPParseError",

    # Responses
    "Response",
    "format_head",
    "status_line",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "Handler",

    # Status codes
    "HTTPStatus",

    # Content types
    "ContentTypeRegistry",
    "CONTENT_TYPES",
    "lookup",
    "content_type_for",
]
