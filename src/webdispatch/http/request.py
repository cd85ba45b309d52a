"""
=============================================================================
HTTP REQUEST
=============================================================================

The request object handed to route handlers, and the parser the bundled
engine uses to build it from a connection.

=============================================================================
REQUEST ANATOMY
=============================================================================

    POST /string?lang=en HTTP/1.1\r\n      ← Request line
    Host: localhost:8080\r\n               ← Headers (name: value)
    Content-Length: 5\r\n
    \r\n                                   ← Blank line
    hello                                  ← Body (Content-Length bytes)

becomes

    Request(
        method="POST",
        path="/string",                    # percent-decoded, no query
        query_string="lang=en",
        http_version="1.1",
        headers={"host": "localhost:8080", "content-length": "5"},
        body=<BytesIO b"hello">,           # a binary stream
        client_address=("127.0.0.1", 51234),
        path_match=None,                   # set by the router
    )

=============================================================================
WHY IS THE BODY A STREAM?
=============================================================================

Handlers read the body the way they need it: the echo handler reads it
whole, a JSON handler hands the stream to json.load(). The router never
touches the body, so routing costs the same for a 5-byte and a 5 MB POST.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional, Tuple
from urllib.parse import unquote
import io
import re


class HTTPParseError(Exception):
    """
    Raised when a request cannot be framed.

    Carries the status code the engine should answer with:

        400 Bad Request                - Malformed request line or headers
        413 Payload Too Large          - Request exceeds the size limit
        505 HTTP Version Not Supported - Not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Request:
    """
    A parsed HTTP request.

    Header names are stored lower-case (HTTP headers are case-insensitive),
    so lookups go through get_header() or use lower-case keys directly.

    path_match is filled in by the router: for a route registered as
    ^/match/([0-9]+)$ and the path /match/123, path_match[1] == "123".
    For the default handler it stays None.
    """

    method: str
    path: str
    http_version: str = "1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: BinaryIO = field(default_factory=io.BytesIO, repr=False)
    client_address: Tuple[str, int] = ("", 0)
    query_string: str = ""

    # Router-injected
    path_match: Optional["re.Match[str]"] = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # CLIENT
    # -------------------------------------------------------------------------

    @property
    def remote_address(self) -> str:
        """Client IP address."""
        return self.client_address[0]

    @property
    def remote_port(self) -> int:
        """Client port."""
        return self.client_address[1]

    # -------------------------------------------------------------------------
    # PATH CAPTURES
    # -------------------------------------------------------------------------

    @property
    def path_captures(self) -> Tuple[str, ...]:
        """
        Capture groups of the matched route pattern, in declaration order.

        Unmatched optional groups are returned as "".
        """
        if self.path_match is None:
            return ()
        return tuple(group or "" for group in self.path_match.groups())

    def capture(self, index: int) -> str:
        """
        Get a capture group, 1-indexed like re.Match.group().

        Raises:
            IndexError: If the route has no such group.
        """
        if index < 1:
            raise IndexError(f"Capture groups are 1-indexed, got {index}")
        return self.path_captures[index - 1]

    # -------------------------------------------------------------------------
    # HEADERS
    # -------------------------------------------------------------------------

    def get_header(self, name: str, default: str = "") -> str:
        """Get a header value (case-insensitive lookup)."""
        return self.headers.get(name.lower(), default)

    @property
    def content_length(self) -> int:
        """Content-Length as an integer, 0 if missing or invalid."""
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def is_keep_alive(self) -> bool:
        """
        Should the connection stay open after this request?

        HTTP/1.1 keeps alive unless "Connection: close";
        HTTP/1.0 closes unless "Connection: keep-alive".
        """
        connection = self.headers.get("connection", "").lower()
        if self.http_version == "1.1":
            return connection != "close"
        return connection == "keep-alive"

    # -------------------------------------------------------------------------
    # BODY
    # -------------------------------------------------------------------------

    def read_body(self) -> bytes:
        """Read whatever is left of the body stream."""
        return self.body.read()

    def text(self, encoding: str = "utf-8") -> str:
        """Read the remaining body and decode it."""
        return self.read_body().decode(encoding, errors="replace")


class RequestParser:
    """
    Reads one request at a time from a buffered binary stream.

    ==========================================================================
    PARSING ALGORITHM
    ==========================================================================

        rfile.readline()  ──►  "GET /path?x=1 HTTP/1.1"
              │                     │
              │                     ├── method  "GET"
              │                     ├── path    "/path"   (percent-decoded)
              │                     ├── query   "x=1"
              │                     └── version "1.1"
              ▼
        readline() until "\r\n"  ──►  headers (lower-cased names)
              │
              ▼
        read(Content-Length)     ──►  body (BytesIO)

    The path is percent-decoded here so that "%2e%2e" arrives at the
    path resolver as ".." and is rejected there like any other "..".

    ==========================================================================
    """

    # METHOD SP REQUEST-URI SP HTTP/x.y
    REQUEST_LINE_PATTERN = re.compile(r"^([!#$%&'*+.^_`|~0-9A-Za-z-]+) (\S+) HTTP/(\d\.\d)$")

    # field-name ":" OWS field-value OWS
    HEADER_PATTERN = re.compile(r"^([^:\s]+):[ \t]*(.*?)[ \t]*$")

    SUPPORTED_VERSIONS = ("1.0", "1.1")

    MAX_LINE_LENGTH = 8192
    MAX_HEADERS = 100

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        """
        Args:
            max_request_size: Largest accepted body, in bytes. Larger
                              requests are rejected with 413.
        """
        self.max_request_size = max_request_size

    def read_request(
        self,
        rfile: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> Optional[Request]:
        """
        Read and parse the next request from the stream.

        Returns:
            The parsed Request, or None if the peer closed the connection
            before sending a request line.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        request_line = self._readline(rfile)
        # Tolerate stray CRLFs between keep-alive requests (RFC 7230 3.5)
        while request_line == "":
            request_line = self._readline(rfile)
        if request_line is None:
            return None

        method, target, version = self._parse_request_line(request_line)
        path, _, query_string = target.partition("?")

        headers = self._parse_headers(rfile)

        return Request(
            method=method,
            path=unquote(path),
            http_version=version,
            headers=headers,
            body=io.BytesIO(self._read_body(rfile, headers)),
            client_address=client_address,
            query_string=query_string,
        )

    def _readline(self, rfile: BinaryIO) -> Optional[str]:
        """Read one CRLF-terminated line; None on EOF."""
        raw = rfile.readline(self.MAX_LINE_LENGTH + 1)
        if not raw:
            return None
        if len(raw) > self.MAX_LINE_LENGTH:
            raise HTTPParseError("Request line or header too long")
        return raw.decode("iso-8859-1").rstrip("\r\n")

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()
        if version not in self.SUPPORTED_VERSIONS:
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )
        return method, target, version

    def _parse_headers(self, rfile: BinaryIO) -> Dict[str, str]:
        """
        Parse header lines up to the blank line.

        Repeated headers are folded into one comma-separated value.
        """
        headers: Dict[str, str] = {}
        for _ in range(self.MAX_HEADERS + 1):
            line = self._readline(rfile)
            if line is None:
                raise HTTPParseError("Connection closed inside headers")
            if line == "":
                return headers

            match = self.HEADER_PATTERN.match(line)
            if not match:
                raise HTTPParseError(f"Malformed header line: {line!r}")

            name, value = match.groups()
            name = name.lower()
            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        raise HTTPParseError(f"Too many headers (max {self.MAX_HEADERS})")

    def _read_body(self, rfile: BinaryIO, headers: Dict[str, str]) -> bytes:
        if "transfer-encoding" in headers:
            raise HTTPParseError("Transfer-Encoding request bodies are not supported")

        try:
            length = int(headers.get("content-length", "0"))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")
        if length < 0:
            raise HTTPParseError("Invalid Content-Length header")
        if length > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {length} bytes",
                status_code=413,
            )

        body = rfile.read(length) if length else b""
        if len(body) < length:
            raise HTTPParseError(
                f"Incomplete body: expected {length} bytes, got {len(body)}"
            )
        return body
