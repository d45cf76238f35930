"""structlog configuration for the awssume CLI.

Logs go to stderr so they never mix with command output on stdout.

Environment Variables:
    AWSSUME_LOG_LEVEL: Logging level (default: WARNING)
    AWSSUME_LOG_FORMAT: "json" for JSON lines, anything else for console output
"""

import logging
import os
import sys
from typing import Optional

import structlog

LOG_LEVEL_ENV_VAR = "AWSSUME_LOG_LEVEL"
LOG_FORMAT_ENV_VAR = "AWSSUME_LOG_FORMAT"
DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Explicit level name; falls back to $AWSSUME_LOG_LEVEL, then WARNING
    """
    level_name = (level or os.getenv(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL)).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    use_json_logs = os.getenv(LOG_FORMAT_ENV_VAR, "console").lower() == "json"

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
            structlog.processors.JSONRenderer() if use_json_logs else structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
