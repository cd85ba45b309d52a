"""
=============================================================================
PATH RESOLVER
=============================================================================

Turns (web root, request path) into a filesystem path that is safe to
open, or raises the reason it isn't.

=============================================================================
THE WALK
=============================================================================

    root = canonical("web")                     /srv/app/web
    request path = "/docs/./guide.html"

    ┌──────────────┬───────────────────────────────┬──────────────────────┐
    │ segment      │ accumulated path              │ checks               │
    ├──────────────┼───────────────────────────────┼──────────────────────┤
    │ "/"          │ /srv/app/web                  │ skipped              │
    │ "docs"       │ /srv/app/web/docs             │ exists? symlink?     │
    │ "."          │ /srv/app/web/docs             │ skipped              │
    │ "guide.html" │ /srv/app/web/docs/guide.html  │ exists? symlink?     │
    └──────────────┴───────────────────────────────┴──────────────────────┘
                                                     then: regular file?

Any ".." segment is rejected on sight, before the filesystem is touched
for that segment or anything after it. It does not matter whether the
".." would have stayed inside the root: "/docs/../index.html" is
rejected too.

=============================================================================
WHY NOT resolve() AND A PREFIX CHECK?
=============================================================================

The usual recipe is:

    full = (root / path).resolve()
    full.relative_to(root)          # ValueError → outside root

That follows symlinks silently. A symlink planted anywhere under the
root (web/docs → /etc) passes the prefix check as long as its target
path happens to start with the root, and a directory swapped for a
symlink between two requests is never noticed. Checking every component
with lstat semantics closes both holes. The price is that legitimate
symlinked layouts inside the web root are not served.

=============================================================================
INTERVIEW QUESTIONS
=============================================================================

Q: "Can %2e%2e get through?"
A: "Not here: the request parser percent-decodes the path, so it
   arrives as '..' and is rejected like a literal one."

Q: "Is there still a race?"
A: "Yes, between this check and open(). The transfer opens with
   O_NOFOLLOW and re-checks the file type on the open descriptor, so
   swapping the FINAL component for a symlink surfaces as
   OpenFailedError. O_NOFOLLOW only covers the last component: a parent
   directory swapped for a symlink after the walk is still followed."

=============================================================================
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Union

from ..errors import (
    InvalidRootError,
    NotAFileError,
    NotFoundError,
    PathTraversalError,
    SymlinkRejectedError,
)


logger = logging.getLogger(__name__)

# Characters that are never allowed inside a segment
_FORBIDDEN_CHARS = ("\\", "\x00")


class PathResolver:
    """
    Resolves request paths against one web root.

    The root is canonicalized on every call rather than once at
    construction, so a root that is created (or replaced) after startup
    is picked up, and a root that disappears is reported as
    InvalidRootError instead of stale paths.

    Usage:
        resolver = PathResolver("web")
        path = resolver.resolve("/index.html")   # Path("/srv/app/web/index.html")
        resolver.resolve("/../etc/passwd")       # PathTraversalError
    """

    def __init__(self, root_dir: Union[str, os.PathLike]):
        self.root_dir = root_dir

    def canonical_root(self) -> Path:
        """
        Canonicalize the root directory.

        Raises:
            InvalidRootError: If the root does not exist or is not a
                              directory.
        """
        try:
            root = Path(self.root_dir).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise InvalidRootError(
                f"Invalid web root directory {str(self.root_dir)!r}: {e}",
                path=os.fspath(self.root_dir),
            ) from e

        if not root.is_dir():
            raise InvalidRootError(
                f"Web root {str(root)!r} is not a directory",
                path=str(root),
            )
        return root

    def resolve(self, request_path: str) -> Path:
        """
        Resolve a request path to a regular file under the root.

        Args:
            request_path: Decoded URL path, e.g. "/css/site.css".

        Returns:
            Absolute path of an existing regular file inside the root,
            reached without crossing any symlink.

        Raises:
            InvalidRootError: Root cannot be canonicalized.
            PathTraversalError: A ".." (or forbidden) segment was found.
            NotFoundError: A segment does not exist.
            SymlinkRejectedError: A segment is a symbolic link.
            NotAFileError: The final path is not a regular file.
        """
        real_path = self.canonical_root()

        for segment in PurePosixPath(request_path).parts:
            # ─────────────────────────────────────────────────────────────
            # NO-OP SEGMENTS
            # ─────────────────────────────────────────────────────────────
            # POSIX keeps a leading "//" as its own root part
            if segment == "." or not segment.strip("/"):
                continue

            # ─────────────────────────────────────────────────────────────
            # UPWARD TRAVERSAL: never allowed
            # ─────────────────────────────────────────────────────────────
            if segment == "..":
                raise PathTraversalError(
                    f"'..' not allowed in path {request_path!r}",
                    path=request_path,
                )
            if any(char in segment for char in _FORBIDDEN_CHARS):
                raise PathTraversalError(
                    f"Forbidden character in path {request_path!r}",
                    path=request_path,
                )

            real_path = real_path / segment

            # ─────────────────────────────────────────────────────────────
            # PER-COMPONENT CHECKS
            # ─────────────────────────────────────────────────────────────
            # exists() follows links, so a dangling symlink reads as
            # missing; islink() then catches the live ones.
            if not os.path.exists(real_path):
                raise NotFoundError(f"Invalid path {str(real_path)!r}", path=str(real_path))
            if os.path.islink(real_path):
                raise SymlinkRejectedError(
                    f"Symlink {str(real_path)!r} not allowed",
                    path=str(real_path),
                )

        if not os.path.isfile(real_path):
            raise NotAFileError(f"{str(real_path)!r} is not a file", path=str(real_path))

        return real_path


def resolve_path(root_dir: Union[str, os.PathLike], request_path: str) -> Path:
    """Resolve a request path against a root in one call."""
    return PathResolver(root_dir).resolve(request_path)
