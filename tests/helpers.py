"""
Shared test helpers: a recording output stream and request/response
builders.
"""

import io
import os
import sys
from typing import List, Optional, Tuple

import pytest

from webdispatch.http import Request


class RecordingSink:
    """
    Binary writer that records every write() and flush() call.

    events is a list of ("write", data) / ("flush", None) tuples in call
    order, so tests can check both write counts and write/flush ordering.
    """

    def __init__(self):
        self.events: List[Tuple[str, Optional[bytes]]] = []

    def write(self, data: bytes) -> int:
        self.events.append(("write", bytes(data)))
        return len(data)

    def flush(self) -> None:
        self.events.append(("flush", None))

    @property
    def writes(self) -> List[bytes]:
        return [data for kind, data in self.events if kind == "write"]

    @property
    def flush_count(self) -> int:
        return sum(1 for kind, _ in self.events if kind == "flush")

    @property
    def data(self) -> bytes:
        return b"".join(self.writes)


def split_response(raw: bytes) -> Tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


def make_request(
    method: str = "GET",
    path: str = "/",
    body: bytes = b"",
    headers: Optional[dict] = None,
    client_address: Tuple[str, int] = ("127.0.0.1", 50000),
) -> Request:
    """Build a request without going through the parser."""
    return Request(
        method=method,
        path=path,
        headers=dict(headers or {}),
        body=io.BytesIO(body),
        client_address=client_address,
    )


requires_symlinks = pytest.mark.skipif(
    not hasattr(os, "symlink") or sys.platform == "win32",
    reason="symlinks not available",
)
