"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this package writes, with their reason phrases.

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase (HTTPStatus.phrase)
              └───────── Status code  (int(HTTPStatus.NOT_FOUND))

Handlers are free to write any status line they like; this enum only
covers what the router, the static file handler and the engine produce.
=============================================================================
"""

from enum import IntEnum
from typing import Optional


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                            # Success
    BAD_REQUEST = 400                   # Malformed request or body
    FORBIDDEN = 403
    NOT_FOUND = 404                     # No such file / route
    METHOD_NOT_ALLOWED = 405
    PAYLOAD_TOO_LARGE = 413             # Request exceeds max_request_size
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503           # Worker queue full
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}


def reason_phrase(status: int) -> Optional[str]:
    """
    Get the reason phrase for any integer status.

    Returns None for codes outside the enum; the status line is then
    written without a phrase ("HTTP/1.1 299").
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return None
