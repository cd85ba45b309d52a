"""
=============================================================================
CONTENT TYPE REGISTRY
=============================================================================

Maps file extensions to the MIME type sent in the Content-Type header.

=============================================================================
LOOKUP RULES
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                    EXTENSION → MIME TYPE                           │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   index.html    → ".html"   → text/html                            │
    │   logo.png      → ".png"    → image/png                            │
    │   archive.tar.gz→ ".gz"     → (unknown) ""                         │
    │   INDEX.HTML    → ".HTML"   → (unknown) ""   case-sensitive!       │
    │   .bashrc       → ""        → (unknown) ""   dot-files: no suffix  │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

An unknown extension is NOT an error. lookup() returns "" and the
response is written without a Content-Type header, leaving the client
to sniff the body.

The table is built once at import time and wrapped in a read-only
mapping, so worker threads can share it without locking.

=============================================================================
INTERVIEW INSIGHT
=============================================================================

Q: "Why not fall back to application/octet-stream?"
A: "Omitting the header and sending a wrong header are different
   things. A missing Content-Type lets the client decide; a wrong one
   can stop a browser from rendering or executing the resource."

=============================================================================
"""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional


# =============================================================================
# CONTENT TYPE TABLE
# =============================================================================
#
# Keys include the leading dot and are matched case-sensitively.
#
# =============================================================================

DEFAULT_CONTENT_TYPES: Dict[str, str] = {
    # -------------------------------------------------------------------------
    # TEXT
    # -------------------------------------------------------------------------
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",

    # -------------------------------------------------------------------------
    # DOCUMENTS
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
}


class ContentTypeRegistry:
    """
    Immutable extension → MIME type table.

    Usage:
        registry = ContentTypeRegistry()
        registry.lookup(".html")             # 'text/html'
        registry.lookup(".xyz")              # ''
        registry.for_path("web/logo.png")    # 'image/png'

    Extra entries can be layered on top of the defaults at construction
    time; there is no way to mutate a registry afterwards.
    """

    def __init__(
        self,
        types: Optional[Mapping[str, str]] = None,
        include_defaults: bool = True,
    ):
        table: Dict[str, str] = dict(DEFAULT_CONTENT_TYPES) if include_defaults else {}
        if types:
            for extension, mime_type in types.items():
                if not extension.startswith("."):
                    raise ValueError(f"Extension must start with '.': {extension!r}")
                table[extension] = mime_type
        self._types = MappingProxyType(table)

    @property
    def types(self) -> Mapping[str, str]:
        """Read-only view of the table."""
        return self._types

    def lookup(self, extension: str) -> str:
        """
        Get the MIME type for an extension (with leading dot).

        Returns "" when the extension is unknown. Never raises.
        """
        return self._types.get(extension, "")

    def for_path(self, path: "str | Path") -> str:
        """Get the MIME type for a file path, based on its last suffix."""
        _, extension = os.path.splitext(os.fspath(path))
        return self.lookup(extension)

    def __contains__(self, extension: object) -> bool:
        return extension in self._types

    def __len__(self) -> int:
        return len(self._types)


# Process-wide registry, read-only after import
CONTENT_TYPES = ContentTypeRegistry()


def lookup(extension: str) -> str:
    """Look up an extension in the process-wide registry."""
    return CONTENT_TYPES.lookup(extension)


def content_type_for(path: "str | Path") -> str:
    """
    Get the Content-Type value for a file path.

    Examples:
        >>> content_type_for("index.html")
        'text/html'
        >>> content_type_for("notes.unknown")
        ''
    """
    return CONTENT_TYPES.for_path(path)
