"""Structured logging setup for notionedit."""

import structlog
from pathlib import Path
from typing import Any
import os


def configure_logging() -> None:
    """
    Configure structlog for JSON logging to ~/.cache/notionedit/logs/notionedit.log.

    Log level can be controlled via NOTIONEDIT_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see request payloads and every controller transition
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Notion request/response bodies, ignored messages, stale results
    - INFO: User actions, session transitions, save/fetch summaries
    - WARNING: Transient failures and retry scheduling
    - ERROR: Permanent failures, unexpected worker errors

    Example:
        # Enable debug logging
        export NOTIONEDIT_LOG_LEVEL=DEBUG
        notionedit edit 0123456789abcdef0123456789abcdef

        # View logs with jq for readability:
        tail -f ~/.cache/notionedit/logs/notionedit.log | jq .
    """
    # Ensure log directory exists
    log_dir = Path.home() / ".cache" / "notionedit" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "notionedit.log"

    # Get log level from environment variable (default to INFO)
    log_level = os.environ.get("NOTIONEDIT_LOG_LEVEL", "INFO").upper()

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    if log_level not in valid_levels:
        log_level = "INFO"

    # Log to a file: stdout belongs to the TUI
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("save_started", block_id="abc", attempt=0)
    """
    return structlog.get_logger(name)
