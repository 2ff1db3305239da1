#!/usr/bin/env python
"""Main entry point for the Bear MCP server."""
import argparse
import logging
import signal
import sys
from pathlib import Path

from bear_mcp import __version__
from bear_mcp.config import LOG_LEVELS, config
from bear_mcp.observability import configure_logging
from bear_mcp.server.mcp_server import BearMcpServer


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Bear MCP Server")
    parser.add_argument(
        "--database-path",
        help="Bear database file (checked before the standard Bear locations)",
        type=str,
        default=None
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=list(LOG_LEVELS),
        default=None
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def update_config(args):
    """Update the global config with command line arguments."""
    if args.database_path:
        config.database_path = Path(args.database_path).expanduser()
    if args.log_level:
        config.log_level = args.log_level


def install_signal_handlers(server: BearMcpServer) -> None:
    """Close the database and exit cleanly on SIGINT/SIGTERM."""
    def handle_signal(signum, frame):
        logging.getLogger(__name__).info(
            f"Received {signal.Signals(signum).name}, shutting down"
        )
        server.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def main(argv=None):
    """Run the Bear MCP server."""
    # Parse arguments and update config
    args = parse_args(argv)
    update_config(args)

    # Configure logging (stderr, plus a rotating file when BEAR_MCP_LOG_DIR is set)
    log_level = config.get_logging_level()
    try:
        configure_logging(level=log_level, log_dir=config.log_dir)
    except OSError as e:
        # Fall back to stderr-only logging if the log directory is unusable
        configure_logging(level=log_level)
        logging.getLogger(__name__).warning(f"Failed to configure file logging: {e}")

    logger = logging.getLogger(__name__)

    # Create and run the MCP server
    try:
        logger.info(f"Starting Bear MCP server {__version__}")
        server = BearMcpServer()
        install_signal_handlers(server)
        server.run()
    except Exception as e:
        logger.error(f"Error running server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
