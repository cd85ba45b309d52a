"""
=============================================================================
HTTP RESPONSE SINK
=============================================================================

Handlers do not return response objects. They write bytes to a Response
sink, which passes them to the connection verbatim:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    RESPONSE FLOW                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   handler(response, request)                                         │
    │        │                                                             │
    │        │  response.write(b"HTTP/1.1 200 OK\r\n...")                 │
    │        │  response.write(chunk) ; response.flush()                   │
    │        ▼                                                             │
    │   Response ──────► buffered socket writer ──────► client             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

This keeps large transfers incremental: a handler can write a header,
then stream a file block by block, flushing after each one, without ever
holding the whole body in memory.

The sink does not validate what handlers write. A handler that writes a
broken status line sends a broken status line.

=============================================================================
HEADER FORMAT
=============================================================================

    HTTP/1.1 <status> <reason>\r\n
    Content-Type: <mime>\r\n            ← omitted when the type is ""
    Content-Length: <n>\r\n
    \r\n
    <body>

=============================================================================
"""

from typing import BinaryIO, Dict, Optional, Union

from .status_codes import reason_phrase


def status_line(status: int, version: str = "HTTP/1.1") -> str:
    """
    Build the status line (without CRLF).

        >>> status_line(404)
        'HTTP/1.1 404 Not Found'
    """
    phrase = reason_phrase(status)
    if phrase:
        return f"{version} {int(status)} {phrase}"
    return f"{version} {int(status)}"


def format_head(
    status: int,
    content_length: int,
    content_type: str = "",
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """
    Serialize a response head.

    Args:
        status: Status code.
        content_length: Exact body length in bytes.
        content_type: MIME type; "" means no Content-Type header.
        headers: Extra headers, written between Content-Type and
                 Content-Length.

    Returns:
        Header bytes including the terminating blank line.
    """
    lines = [status_line(status)]
    if content_type:
        lines.append(f"Content-Type: {content_type}")
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    lines.append(f"Content-Length: {content_length}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


class Response:
    """
    Output sink for one request.

    Wraps a binary writer (a socket makefile("wb") in the bundled engine,
    a BytesIO in tests). Counts the bytes that pass through it so the
    engine can write an access log line.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.bytes_written = 0

    def write(self, data: Union[bytes, str]) -> None:
        """
        Write bytes to the client. Strings are encoded as UTF-8.

        Raises:
            OSError: If the peer went away.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.stream.write(data)
        self.bytes_written += len(data)

    def flush(self) -> None:
        """Push buffered bytes to the client."""
        self.stream.flush()

    def send(
        self,
        status: int,
        body: Union[bytes, str] = b"",
        content_type: str = "",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Write a complete response: head, then body.

        Example:
            response.send(200, "hello")
            # HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.write(format_head(status, len(body), content_type, headers))
        if body:
            self.write(body)
