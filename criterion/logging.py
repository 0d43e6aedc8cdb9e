"""
Structured logging for Criterion.

The engine itself only emits events; hosts decide where they go by calling
configure_logging() once at startup (or by configuring structlog
themselves).
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from criterion.config import EngineSettings


def add_library_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events emitted from criterion modules."""
    logger_name = event_dict.get("logger", "")
    if logger_name.startswith("criterion"):
        event_dict["library"] = "criterion"
    return event_dict


def configure_logging(
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    settings: Optional[EngineSettings] = None,
) -> None:
    """Configure structlog on top of the standard library logging module."""
    settings = settings or EngineSettings()
    level = (log_level or settings.log_level).upper()
    use_json = settings.log_json if json_logs is None else json_logs

    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()

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
            add_library_context,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
