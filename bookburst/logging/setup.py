import logging
import sys
from typing import Any, Dict, Optional

from bookburst.core.config import get_settings
from bookburst.logging.formatters import JSONFormatter, ColorizedFormatter
from bookburst.logging.filters import SensitiveDataFilter

__all__ = ["get_logger", "setup_logging"]

settings = get_settings()


def _build_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT == "json":
        return JSONFormatter()
    return ColorizedFormatter()


def _build_console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.setLevel(level)
    handler.addFilter(SensitiveDataFilter())
    return handler


def get_logger(name: str, extra: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Get a logger configured for the application.

    Loggers under the ``bookburst`` namespace propagate to the handler that
    ``setup_logging`` installs; anything else gets its own console handler.

    Args:
        name: Logger name
        extra: Extra fields attached to every message

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(log_level)

    if not name.startswith("bookburst") and not logger.handlers:
        logger.addHandler(_build_console_handler(log_level))
        logger.propagate = False

    if extra:
        return logging.LoggerAdapter(logger, extra)

    return logger


def setup_logging() -> None:
    """
    Configure logging for the application.

    Installs a single console handler on the ``bookburst`` logger and aligns
    the uvicorn loggers with the configured level.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    app_logger = logging.getLogger("bookburst")
    app_logger.setLevel(log_level)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.addHandler(_build_console_handler(log_level))
    app_logger.propagate = False

    logging.getLogger("uvicorn.access").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)
    # SQL echo is controlled by DB_ECHO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    app_logger.info(
        f"Logging configured with level {settings.LOG_LEVEL} ({settings.LOG_FORMAT})"
    )
