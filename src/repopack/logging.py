from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def _has_file_handler(filename: str | Path) -> bool:
    target = os.path.abspath(filename)
    handlers = [*logging.getLogger().handlers, *logging.getLogger("repopack").handlers]
    return any(isinstance(h, logging.FileHandler) and h.baseFilename == target for h in handlers)


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for the repopack package.

    The first call wins: stdlib handlers and the structlog pipeline are only
    configured once per process. Later calls simply return the logger, unless
    a log file is requested that no handler writes to yet, in which case a
    file handler is attached to the "repopack" logger.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.

    Returns:
        A structlog logger instance configured for the repopack package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=logging.INFO,
            handlers=handlers,
            format="%(message)s",
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        logging.getLogger("repopack").setLevel(logging.INFO)
        _LOGGING_CONFIGURED = True
    elif filename and not _has_file_handler(filename):
        handler = logging.FileHandler(str(filename), encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger("repopack").addHandler(handler)

    return structlog.get_logger("repopack")


logger = setup_logging()
