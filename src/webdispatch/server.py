"""
=============================================================================
HTTP SERVER
=============================================================================

Hosts a Router on a socket: accepts connections, frames requests,
dispatches them and lets handlers write their responses straight to the
connection.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ──accept──► ThreadPool ──► _process_socket()          │
    │                                               │                      │
    │                                               ▼                      │
    │                              handle_connection(rfile, wfile, addr)   │
    │                              ┌──────────────────────────────────┐   │
    │                              │ loop:                             │   │
    │                              │   request = parser.read_request() │   │
    │                              │   router.dispatch(request,        │   │
    │                              │                   Response(wfile))│   │
    │                              │   flush, access log               │   │
    │                              │   keep-alive? else break          │   │
    │                              └──────────────────────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

handle_connection() works on any pair of binary streams, so tests drive
it with BytesIO and never open a socket.

=============================================================================
ERRORS AT THE CONNECTION BOUNDARY
=============================================================================

    Malformed request        → plain-text 400/413/505, connection closed
    No route, no default     → nothing written, connection closed
    Peer disconnect (OSError)→ logged at DEBUG, connection closed
    Anything else            → logged with traceback, connection closed

The worker thread survives all of them.
=============================================================================
"""

import logging
import socket
import threading
from typing import BinaryIO, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, ThreadPool
from .http import HTTPParseError, HTTPStatus, Request, RequestParser, Response, Router
from .http.response import format_head


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server around a Router.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(8080, 4)

        @server.get(r"^/match/([0-9]+)$")
        def match_number(response, request):
            response.send(200, request.path_match[1])

        server.default("GET")(StaticFileHandler("web"))

        server.run()

    =========================================================================
    """

    def __init__(
        self,
        port: int = 8080,
        workers: int = 4,
        config: Optional[ServerConfig] = None,
        host: str = "0.0.0.0",
    ):
        """
        Args:
            port: TCP port; 0 picks a free one (see .port after start()).
            workers: Number of worker threads.
            config: Server configuration. Uses defaults if not provided.
            host: Interface to bind.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(host=host, port=port)
        self._thread_pool = ThreadPool(workers=workers)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = Router()
        self._serve_thread: Optional[threading.Thread] = None

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    @property
    def router(self) -> Router:
        return self._router

    def route(self, pattern, method: str):
        """Register a handler for any method."""
        return self._router.route(pattern, method)

    def get(self, pattern):
        """Register a GET route."""
        return self._router.get(pattern)

    def post(self, pattern):
        """Register a POST route."""
        return self._router.post(pattern)

    def put(self, pattern):
        """Register a PUT route."""
        return self._router.put(pattern)

    def delete(self, pattern):
        """Register a DELETE route."""
        return self._router.delete(pattern)

    def default(self, method: str):
        """Register the default handler for a method."""
        return self._router.default(method)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def port(self) -> int:
        """Bound port (the configured one before start())."""
        return self._socket_server.address[1]

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def start(self) -> None:
        """
        Bind and serve on a background thread. Returns once the socket is
        listening.
        """
        self._thread_pool.start()
        self._socket_server.bind()
        self._serve_thread = threading.Thread(
            target=self._socket_server.serve,
            args=(self._handle_socket,),
            name="AcceptLoop",
            daemon=True,
        )
        self._serve_thread.start()

    def run(self) -> None:
        """
        Start the server and block until Ctrl+C / SIGTERM.
        """
        self._setup_logging()
        self._thread_pool.start()
        self._socket_server.bind()

        host, port = self._socket_server.address
        logger.info(f"Serving {self.config.web_root!r} on http://{host}:{port}")
        self._router.print_routes()

        try:
            self._socket_server.serve(self._handle_socket, install_signals=True)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._thread_pool.shutdown(wait=True, timeout=30.0)
            logger.info("Server stopped")

    def shutdown(self) -> None:
        """Stop accepting connections and stop the workers."""
        self._socket_server.shutdown()
        if self._serve_thread is not None:
            self._serve_thread.join(timeout=5.0)
            self._serve_thread = None
        self._thread_pool.shutdown(wait=True, timeout=5.0)

    def _setup_logging(self) -> None:
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("webdispatch").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_socket(self, sock: socket.socket, address: Tuple[str, int]) -> None:
        """Queue an accepted socket on the thread pool (accept thread)."""
        if not self._thread_pool.submit(self._process_socket, args=(sock, address)):
            logger.warning(f"Thread pool full, rejecting {address[0]}:{address[1]}")
            try:
                sock.sendall(format_head(HTTPStatus.SERVICE_UNAVAILABLE, 0))
            except OSError:
                logger.debug("Could not send 503 to rejected client")
            sock.close()

    def _process_socket(self, sock: socket.socket, address: Tuple[str, int]) -> None:
        """Serve one socket until it closes (worker thread)."""
        with sock:
            if self.config.timeout:
                sock.settimeout(self.config.timeout)
            rfile = sock.makefile("rb")
            wfile = sock.makefile("wb")
            try:
                self.handle_connection(rfile, wfile, address)
            finally:
                for stream in (wfile, rfile):
                    try:
                        stream.close()
                    except OSError:
                        logger.debug("Error closing connection stream", exc_info=True)

    def handle_connection(
        self,
        rfile: BinaryIO,
        wfile: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> int:
        """
        Serve requests from a pair of streams until the connection ends.

        Args:
            rfile: Buffered binary reader for the request side.
            wfile: Binary writer for the response side.
            client_address: (ip, port) of the peer.

        Returns:
            Number of requests dispatched to a handler.
        """
        handled = 0
        while True:
            try:
                request = self._parser.read_request(rfile, client_address)
            except HTTPParseError as e:
                logger.info(f"{client_address[0]} bad request: {e}")
                self._send_error(wfile, e.status_code, str(e))
                break
            except OSError as e:
                logger.debug(f"{client_address[0]} read failed: {e}")
                break

            if request is None:
                break

            if not self._dispatch(request, wfile):
                break
            handled += 1

            if not request.is_keep_alive:
                break

        return handled

    def _dispatch(self, request: Request, wfile: BinaryIO) -> bool:
        """Dispatch one request. Returns False if the connection must close."""
        response = Response(wfile)
        try:
            invoked = self._router.dispatch(request, response)
            response.flush()
        except OSError as e:
            logger.debug(f"{request.remote_address} disconnected during {request.method} {request.path}: {e}")
            return False
        except Exception:
            logger.exception(f"Handler failed for {request.method} {request.path}")
            return False

        if not invoked:
            logger.info(f'{request.remote_address} "{request.method} {request.path}" no handler')
            return False

        logger.info(f'{request.remote_address} "{request.method} {request.path}" {response.bytes_written}')
        return True

    def _send_error(self, wfile: BinaryIO, status: int, message: str) -> None:
        response = Response(wfile)
        try:
            response.send(status, message, content_type="text/plain")
            response.flush()
        except OSError:
            logger.debug("Could not send error response", exc_info=True)
