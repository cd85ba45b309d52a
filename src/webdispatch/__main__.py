"""
=============================================================================
COMMAND LINE ENTRY POINT
=============================================================================

Runs the example application on port 8080 with 4 worker threads.

    python -m webdispatch                          # serves ./web
    python -m webdispatch --web-root ./public
    python -m webdispatch --log-level DEBUG

Settings not given on the command line come from the environment
(HTTP_WEB_ROOT, HTTP_LOG_LEVEL, HTTP_TIMEOUT), then the defaults.
=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .handlers.examples import build_example_server


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="webdispatch",
        description="Example HTTP service: pattern routes plus static files",
    )
    parser.add_argument(
        "--web-root", "-r",
        help="Directory to serve files from (default: $HTTP_WEB_ROOT or ./web)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging verbosity (default: $HTTP_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)

    try:
        config = ServerConfig.from_env()
        if args.web_root:
            config.web_root = args.web_root
        if args.log_level:
            config.log_level = args.log_level

        server = build_example_server(config)
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
