"""
Logging setup.

All modules log through structlog.get_logger().
Logs go to stderr so stdout stays reserved for the dry run report.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, cast

import structlog

_SENSITIVE_KEYS = ("password", "authorization", "auth", "secret", "token")


def redact_credentials(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask credential like values before rendering."""
    for key in list(event_dict.keys()):
        if any(fragment in str(key).lower() for fragment in _SENSITIVE_KEYS):
            event_dict[key] = "[REDACTED]"
    return event_dict


def setup_logging(level: str = "info") -> None:
    """Configure structlog once per process."""
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO

    processors = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
        structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=cast(Any, processors),
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
