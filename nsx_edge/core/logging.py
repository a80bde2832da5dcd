"""
Centralized Logging Configuration.

All modules must use this logging setup. Do not create standalone loggers.

Two outputs:
    console         - stderr, human readable, WARNING by default
    diagnostic log  - JSON lines, DEBUG, only when NSX API diagnostics are on

Structured fields in every JSON log record:
    timestamp   - ISO 8601 UTC timestamp
    level       - Log level (debug, info, warning, error, critical)
    logger      - Module path (e.g., nsx_edge.policy.client)
    event       - Log message
    func_name   - Function that emitted the log
    lineno      - Line number in source file
    source      - Origin context, set explicitly (cli, api, policy, internal)

API traffic records additionally carry method, url, body, status_code and
response, so the diagnostic log holds every request and response of a run.

Usage:
    from nsx_edge.core.logging import get_logger, setup_logging

    # Console only
    setup_logging()

    # With the diagnostic log, truncated first
    setup_logging(debug_log=Path("nsx_api_debug.log"), truncate=True)

    logger = get_logger(__name__)
    log_with_source(logger, "api", "debug", "API request", method="GET", url=url)
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

VALID_SOURCES = frozenset({
    "cli",
    "api",
    "policy",
    "internal",
    "unknown",
})
"""
Recognized log source values — for documentation and validation.
Source is always set explicitly by the caller. Never guessed from logger names.
"""

QUIET_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def setup_logging(
    level: str = "WARNING",
    debug_log: Path | None = None,
    truncate: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        debug_log: Diagnostic log path. When set, every DEBUG record,
            including API traffic, is written there as JSON lines.
        truncate: Empty the diagnostic log before writing instead of
            appending to it.
    """
    console_level = getattr(logging, level.upper())
    shared_processors = _shared_processors()

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=shared_processors,
    )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    console_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=shared_processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug_log is not None else console_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if debug_log is not None:
        debug_log.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            filename=str(debug_log),
            mode="w" if truncate else "a",
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(json_formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name, typically __name__

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message with an explicit source.

    Args:
        logger: The logger instance
        source: Log source (cli, api, policy, internal)
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **kwargs: Additional context fields

    Raises:
        AttributeError: If level is not a valid log level

    Example:
        log_with_source(logger, "api", "debug", "API response", status_code=200)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
