"""
=============================================================================
STATIC FILE ERRORS
=============================================================================

Every way a file request can fail before (or while) bytes reach the client.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHERE EACH ERROR IS RAISED                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   PathResolver                        StreamingTransfer             │
    │   ────────────                        ─────────────────             │
    │   InvalidRootError   root missing     OpenFailedError  open() or   │
    │   PathTraversalError ".." segment                      fstat failed│
    │   NotFoundError      missing segment                                │
    │   SymlinkRejectedError  symlink seen                                │
    │   NotAFileError      directory etc.                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

All of them derive from StaticFileError, so the static handler needs a
single except clause to fall back to the next strategy (404 page, then a
synthesized 404 body).

None of these errors is fatal. They are request-scoped outcomes.
=============================================================================
"""

from typing import Optional


class StaticFileError(Exception):
    """
    Base class for file resolution and transfer failures.

    Attributes:
        path: The path that failed (request path or filesystem path).
        reason: Short machine-friendly reason, e.g. "path_traversal".
    """

    reason = "static_file_error"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class InvalidRootError(StaticFileError):
    """The configured web root cannot be canonicalized or is not a directory."""

    reason = "invalid_root"


class PathTraversalError(StaticFileError):
    """The request path contains a ".." segment (or another forbidden segment)."""

    reason = "path_traversal"


class SymlinkRejectedError(StaticFileError):
    """A component of the path is a symbolic link."""

    reason = "symlink_rejected"


class NotFoundError(StaticFileError):
    """A component of the path does not exist."""

    reason = "not_found"


class NotAFileError(StaticFileError):
    """The path resolved to something other than a regular file."""

    reason = "not_a_file"


class OpenFailedError(StaticFileError):
    """A validated file could not be opened (removed or swapped in between)."""

    reason = "open_failed"
