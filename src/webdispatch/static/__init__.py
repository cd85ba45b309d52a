"""
=============================================================================
STATIC FILE DELIVERY
=============================================================================

    PathResolver       - request path → safe regular file under the root
    StreamingTransfer  - head + body, in 128 KB blocks for large files

    resolver = PathResolver("web")
    transfer = StreamingTransfer()
    transfer.send(response, resolver.resolve("/index.html"))

=============================================================================
"""

from .resolver import PathResolver, resolve_path
from .transfer import BUFFER_SIZE, StreamingTransfer, TransferPlan, plan_transfer, send_file

__all__ = [
    "PathResolver",
    "resolve_path",
    "BUFFER_SIZE",
    "StreamingTransfer",
    "TransferPlan",
    "plan_transfer",
    "send_file",
]
