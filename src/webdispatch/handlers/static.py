"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Default GET handler that serves files from a web root.

=============================================================================
FALLBACK CHAIN
=============================================================================

    GET /docs/guide.html
        │
        ▼
    ┌──────────────────────────────┐   ok
    │ send_file("/docs/guide.html")│ ──────► 200 + file
    └──────────────┬───────────────┘
                   │ failed (any StaticFileError)
                   ▼
    ┌──────────────────────────────┐   ok
    │ send_file("/404.html", 404)  │ ──────► 404 + custom page
    └──────────────┬───────────────┘
                   │ failed
                   ▼
    404 text/plain  "/docs/guide.html" not found

Nothing is retried. Every failure is logged with its reason and the
next strategy takes over. Because the transfer opens the file before
writing the head, a failed attempt never leaves half a response behind.

"/" is served as "/index.html".

=============================================================================
"""

import logging
import os
from typing import Union

from ..errors import StaticFileError, InvalidRootError, OpenFailedError
from ..http.request import Request
from ..http.response import Response
from ..http.status_codes import HTTPStatus
from ..static.resolver import PathResolver
from ..static.transfer import BUFFER_SIZE, StreamingTransfer


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Serves files from root_dir, with a custom 404 page.

    Usage:
        static = StaticFileHandler("web")
        router.set_default("GET", static)

    The handler is stateless after construction and can be shared by
    every worker.
    """

    def __init__(
        self,
        root_dir: Union[str, os.PathLike],
        index_file: str = "index.html",
        not_found_page: str = "/404.html",
        buffer_size: int = BUFFER_SIZE,
    ):
        """
        Args:
            root_dir: Web root. It does not have to exist yet; requests
                      fail with InvalidRootError until it does.
            index_file: File served for "/".
            not_found_page: Request path of the custom 404 page, resolved
                            under the same root.
            buffer_size: Block size for large files.
        """
        self.resolver = PathResolver(root_dir)
        self.transfer = StreamingTransfer(buffer_size=buffer_size)
        self.index_file = index_file
        self.not_found_page = not_found_page

    def __call__(self, response: Response, request: Request) -> None:
        self.handle(response, request)

    def handle(self, response: Response, request: Request) -> None:
        """Serve the requested file, the 404 page, or a plain 404."""
        http_path = "/" + self.index_file if request.path == "/" else request.path

        if self.send_file(response, http_path):
            return
        if self.not_found_page and self.send_file(response, self.not_found_page, HTTPStatus.NOT_FOUND):
            return

        response.send(
            HTTPStatus.NOT_FOUND,
            f'"{http_path}" not found',
            content_type="text/plain",
        )

    def send_file(self, response: Response, http_path: str, status: int = HTTPStatus.OK) -> bool:
        """
        Resolve and send one file.

        Returns:
            True if the file was sent, False if it could not be resolved
            or opened. Nothing is written to the sink on False.
        """
        try:
            path = self.resolver.resolve(http_path)
            self.transfer.send(response, path, status)
        except (InvalidRootError, OpenFailedError) as e:
            logger.error(str(e))
            return False
        except StaticFileError as e:
            logger.warning(f"{e.reason}: {e}")
            return False
        return True
