"""
Ready-made request handlers.

    StaticFileHandler - default GET handler serving a web root
    examples          - the example application's routes
"""

from .static import StaticFileHandler

__all__ = ["StaticFileHandler"]
