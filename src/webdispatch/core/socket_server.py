"""
=============================================================================
SOCKET SERVER
=============================================================================

The TCP accept loop. Every accepted socket is handed to a callback; the
HTTP server's callback queues it on the thread pool.

    bind() ──► listen() ──► ┌──────────────────────────┐
                            │ while running:           │
                            │   sock, addr = accept()  │──► handler(sock, addr)
                            │   (1 s timeout so that   │
                            │    shutdown() is seen)   │
                            └──────────────────────────┘

bind() and serve() are separate steps so that callers binding port 0
can read the real port from .address before the loop starts.
=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Dict, Optional, Tuple


logger = logging.getLogger(__name__)

ConnectionHandler = Callable[[socket.socket, Tuple[str, int]], None]


class SocketServer:
    """Listening TCP socket with a blocking accept loop."""

    def __init__(self, host: str = "0.0.0.0", port: int = 8080, backlog: int = 128):
        self.host = host
        self.port = port
        self.backlog = backlog
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._stopped = threading.Event()
        self._original_handlers: Dict[int, object] = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the requested pair before bind()."""
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return host, port
        return self.host, self.port

    def bind(self) -> None:
        """
        Create, bind and listen.

        Raises:
            OSError: If the address is unavailable.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        # Lets the accept loop notice shutdown()
        sock.settimeout(1.0)

        try:
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.host}:{self.port}: {e}")
            raise

        sock.listen(self.backlog)
        self._socket = sock
        self._running = True
        self._stopped.clear()
        host, port = self.address
        logger.info(f"Listening on {host}:{port}")

    def serve(self, handler: ConnectionHandler, install_signals: bool = False) -> None:
        """
        Run the accept loop until shutdown(). Blocks.

        Args:
            handler: Called with (socket, address) for every connection.
            install_signals: Turn SIGINT/SIGTERM into shutdown(). Only
                             possible from the main thread.
        """
        if self._socket is None:
            self.bind()
        if install_signals:
            self._setup_signals()

        try:
            while self._running:
                try:
                    client_socket, client_address = self._socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self._running:
                        logger.error(f"Accept error: {e}")
                    break

                logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
                handler(client_socket, client_address)
        finally:
            self._cleanup()

    def shutdown(self) -> None:
        """Stop the accept loop. Safe to call more than once, from any thread."""
        self._running = False

    def wait_stopped(self, timeout: Optional[float] = None) -> bool:
        """Wait until the listening socket is closed."""
        return self._stopped.wait(timeout)

    def _setup_signals(self) -> None:
        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _cleanup(self) -> None:
        for sig, original in self._original_handlers.items():
            signal.signal(sig, original)
        self._original_handlers.clear()

        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._running = False
        self._stopped.set()
        logger.info("Socket server stopped")
