"""Observability utilities for the Bear MCP server.

Provides logging setup, structured log context and operation timing.

Stdout carries the MCP stdio transport, so every handler configured here
writes to stderr or to a rotating file, never to stdout.
"""
import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# Root of the package logger hierarchy
ROOT_LOGGER_NAME = "bear_mcp"

# Logging format with ISO 8601 timestamps
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Attribute name used to carry structured context on log records
CONTEXT_ATTR = "context"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends a record's structured context as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = getattr(record, CONTEXT_ATTR, None)
        if context:
            message = f"{message} {json.dumps(context, default=str, sort_keys=True)}"
        return message


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB per file
    backup_count: int = 5,
) -> Optional[Path]:
    """Configure stderr logging and, optionally, a rotating log file.

    Args:
        level: Logging level (default: INFO)
        log_dir: Directory for log files. No file logging when None.
        max_bytes: Maximum size per log file before rotation (default: 10 MB)
        backup_count: Number of rotated files to keep (default: 5)

    Returns:
        Path to the log file, or None if only stderr logging is enabled.

    Example:
        configure_logging(level=logging.DEBUG, log_dir="~/.bear-mcp/logs")
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    # FastMCP installs its own root handler; keep our records out of it
    root_logger.propagate = False

    formatter = StructuredFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Replace handlers from an earlier call instead of stacking them
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_path = Path(log_dir).expanduser()
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / "bear-mcp.log"
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    root_logger.info(f"Logging configured: {log_file} (max {max_bytes} bytes, {backup_count} backups)")
    return log_file


def log_context(**context) -> Dict[str, Any]:
    """Create a structured logging context.

    Args:
        **context: Key-value pairs to include in the context

    Returns:
        Dictionary suitable for the ``extra`` argument of a logging call

    Example:
        logger.info("Created note", extra=log_context(title=title, tags=tags))
    """
    return {CONTEXT_ATTR: context}


@contextmanager
def timed_operation(operation: str, **context):
    """Context manager for timing and logging operations.

    Args:
        operation: Name of the operation being performed
        **context: Additional context to include in log messages

    Yields:
        A dictionary where you can store result info (e.g., result_count)

    Example:
        with timed_operation('bear_search', term='test') as op:
            results = do_search()
            op['result_count'] = len(results)
    """
    correlation_id = str(uuid.uuid4())[:8]
    start_time = time.perf_counter()
    result_info: Dict[str, Any] = {'correlation_id': correlation_id}

    # Log start
    context_str = ', '.join(f'{k}={v}' for k, v in context.items())
    logger.debug(f"[{correlation_id}] START {operation} ({context_str})")

    error_msg = None
    success = True

    try:
        yield result_info
    except Exception as e:
        success = False
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000

        # Log completion
        result_str = ', '.join(f'{k}={v}' for k, v in result_info.items() if k != 'correlation_id')
        status = 'OK' if success else f'ERROR: {error_msg}'
        logger.debug(
            f"[{correlation_id}] END {operation} "
            f"({duration_ms:.2f}ms) [{status}] {result_str}"
        )
