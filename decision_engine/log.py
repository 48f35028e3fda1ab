"""
Logging setup.

Library modules log through :func:`get_logger`, which wraps a standard
library logger under the ``decision_engine`` namespace. That namespace carries
a NullHandler, so the library stays silent until a caller configures logging.
The CLI calls :func:`configure_logging` to route events to stderr.
"""

from __future__ import annotations

import logging
import sys

import structlog

_HANDLER_NAME = "decision_engine.stderr"

logging.getLogger("decision_engine").addHandler(logging.NullHandler())


def get_logger(name: str):
    """Return a structlog logger bound to the standard library logger ``name``."""
    return structlog.wrap_logger(logging.getLogger(name))


def configure_logging(level: str = "WARNING", fmt: str = "console") -> None:
    """
    Configure structlog on top of the standard logging module.
    
    Args:
        level: Level name for the ``decision_engine`` logger
        fmt: "console" for human-readable lines, "json" for JSON lines
    """
    if fmt not in ("console", "json"):
        raise ValueError(f"Unknown log format: {fmt}")
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if fmt == "json"
            else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    
    package_logger = logging.getLogger("decision_engine")
    package_logger.setLevel(level.upper())
    
    # rebind to the current sys.stderr
    for existing in [h for h in package_logger.handlers if h.get_name() == _HANDLER_NAME]:
        package_logger.removeHandler(existing)
    
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
