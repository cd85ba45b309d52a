"""
=============================================================================
STREAMING TRANSFER
=============================================================================

Writes a resolved file to a response sink: one header write, then the
body, without ever holding more than one buffer of the file in memory.

=============================================================================
TRANSFER PLANS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  SMALL FILE  (length <= 131072)                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │   write(head)                                                        │
    │   write(whole file)                         2 writes total          │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  LARGE FILE  (length > 131072)                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │   write(head)                                                        │
    │   write(block 1)  flush()                   131072 bytes            │
    │   write(block 2)  flush()                   131072 bytes            │
    │   ...                                                                │
    │   write(block N)  flush()                   remainder               │
    │                                                                      │
    │   N = ceil(length / 131072)                                          │
    └─────────────────────────────────────────────────────────────────────┘

Both plans send a Content-Length header. The length is known up front
(it's a local file), so chunked transfer-encoding is never used; "chunked"
below only means "written in blocks".

Flushing after every block hands each 128 KB to the socket before the
next one is read, so a slow client slows the reader down instead of
letting data pile up in userspace.

=============================================================================
"""

from dataclasses import dataclass
import logging
import os
import stat
from pathlib import Path
from typing import BinaryIO, Union

from ..errors import OpenFailedError
from ..http.mime_types import ContentTypeRegistry, CONTENT_TYPES
from ..http.response import Response, format_head


logger = logging.getLogger(__name__)


# 128 KB: whole-body threshold and block size for large files
BUFFER_SIZE = 131072

_OPEN_FLAGS = os.O_RDONLY | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_BINARY", 0)


@dataclass(frozen=True)
class TransferPlan:
    """
    How a file of a given length will be written.

    Attributes:
        total_length: File length in bytes.
        buffer_size: Block size, also the whole-body threshold.
    """

    total_length: int
    buffer_size: int = BUFFER_SIZE

    def __post_init__(self):
        if self.total_length < 0:
            raise ValueError(f"total_length must be >= 0, got {self.total_length}")
        if self.buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {self.buffer_size}")

    @property
    def chunked(self) -> bool:
        """True if the body is written in blocks."""
        return self.total_length > self.buffer_size

    @property
    def block_count(self) -> int:
        """Number of body writes."""
        if not self.chunked:
            return 1
        return -(-self.total_length // self.buffer_size)


def plan_transfer(total_length: int, buffer_size: int = BUFFER_SIZE) -> TransferPlan:
    return TransferPlan(total_length=total_length, buffer_size=buffer_size)


class StreamingTransfer:
    """
    Sends files to response sinks.

    Usage:
        transfer = StreamingTransfer()
        path = resolver.resolve(request.path)
        transfer.send(response, path)              # 200
        transfer.send(response, not_found_page, 404)

    The content type comes from the registry; unknown extensions get no
    Content-Type header at all.
    """

    def __init__(
        self,
        buffer_size: int = BUFFER_SIZE,
        content_types: ContentTypeRegistry = CONTENT_TYPES,
    ):
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")
        self.buffer_size = buffer_size
        self.content_types = content_types

    def send(self, response: Response, path: Union[str, Path], status: int = 200) -> TransferPlan:
        """
        Write the head and body of a file.

        The file is opened before anything is written, so an
        OpenFailedError leaves the sink untouched and the caller can still
        answer with something else.

        Args:
            response: Output sink.
            path: A path returned by PathResolver.
            status: Status code for the head.

        Returns:
            The plan that was executed.

        Raises:
            OpenFailedError: The file could not be opened, or is no longer
                             a regular file.
            OSError: Reading the file or writing to the sink failed
                     mid-transfer (e.g. the client disconnected), or the
                     file shrank below the announced length.
        """
        with self._open(path) as f:
            plan = plan_transfer(os.fstat(f.fileno()).st_size, self.buffer_size)
            content_type = self.content_types.for_path(path)

            logger.debug(
                f"Sending {path} ({plan.total_length} bytes, "
                f"{'chunked' if plan.chunked else 'whole'})"
            )

            response.write(format_head(status, plan.total_length, content_type))

            if plan.chunked:
                self._copy_blocks(f, response, plan)
            else:
                data = f.read(plan.total_length)
                response.write(data)
                self._check_complete(plan.total_length - len(data))

        return plan

    def _open(self, path: Union[str, Path]) -> BinaryIO:
        """Open without following a final symlink and check the file type."""
        try:
            fd = os.open(path, _OPEN_FLAGS)
        except OSError as e:
            raise OpenFailedError(f"Failed opening file {str(path)!r}: {e}", path=str(path)) from e

        try:
            if not stat.S_ISREG(os.fstat(fd).st_mode):
                raise OpenFailedError(f"{str(path)!r} is no longer a regular file", path=str(path))
            return os.fdopen(fd, "rb")
        except BaseException:
            os.close(fd)
            raise

    def _copy_blocks(self, f: BinaryIO, response: Response, plan: TransferPlan) -> None:
        """
        Copy the file in buffer_size blocks, flushing after each.

        Reads are bounded by the bytes still owed, so the body never runs
        past the Content-Length already sent even if the file grows.
        """
        remaining = plan.total_length
        while remaining > 0:
            block = f.read(min(plan.buffer_size, remaining))
            if not block:
                break
            response.write(block)
            response.flush()
            remaining -= len(block)

        self._check_complete(remaining)

    def _check_complete(self, remaining: int) -> None:
        if remaining:
            logger.warning(f"File shrank during transfer, {remaining} bytes short")
            # The head is already out; the connection cannot be reused
            raise OSError(f"File truncated during transfer ({remaining} bytes short)")


def send_file(
    response: Response,
    path: Union[str, Path],
    status: int = 200,
    buffer_size: int = BUFFER_SIZE,
) -> TransferPlan:
    """Send a resolved file with a one-off StreamingTransfer."""
    return StreamingTransfer(buffer_size=buffer_size).send(response, path, status)
