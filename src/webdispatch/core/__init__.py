"""
Transport layer for the bundled server.

    SocketServer  - TCP accept loop
    ThreadPool    - fixed pool of worker threads
"""

from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = ["SocketServer", "ThreadPool"]
