"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Settings for the bundled server and the static file handler.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  STATIC FILES      web_root, index_file, not_found_page,            │
    │                    buffer_size                                      │
    │  REQUESTS          max_request_size, timeout                        │
    │  LOGGING           log_level                                        │
    └─────────────────────────────────────────────────────────────────────┘

There is deliberately no host/port/thread setting here: the server
listens where the embedding code tells it to (HTTPServer(port, workers)).

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the server and its static file handler.

    Development:
        ServerConfig(web_root="./web", log_level="DEBUG")

    From the environment:
        HTTP_WEB_ROOT=/srv/www HTTP_LOG_LEVEL=WARNING python -m webdispatch
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    web_root: str = "web"
    """Directory files are served from. Relative paths use the CWD."""

    index_file: str = "index.html"
    """File served for "/"."""

    not_found_page: str = "/404.html"
    """Request path of the custom 404 page ("" disables it)."""

    buffer_size: int = 131072
    """Whole-body threshold and block size for file transfers (128 KB)."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUESTS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest accepted request body in bytes."""

    timeout: Optional[float] = 30.0
    """Socket timeout in seconds; None blocks forever."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            HTTP_WEB_ROOT    Web root directory (default: web)
            HTTP_LOG_LEVEL   Logging level (default: INFO)
            HTTP_TIMEOUT     Socket timeout in seconds (default: 30)
        """
        return cls(
            web_root=os.getenv("HTTP_WEB_ROOT", "web"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value.
        """
        if not self.web_root:
            raise ValueError("web_root must not be empty")

        if not self.index_file or "/" in self.index_file:
            raise ValueError(f"index_file must be a plain file name, got {self.index_file!r}")

        if self.not_found_page and not self.not_found_page.startswith("/"):
            raise ValueError(f"not_found_page must start with '/', got {self.not_found_page!r}")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < 0:
            raise ValueError("max_request_size must be >= 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log_level: {self.log_level!r}")
