"""Structured logging utilities for xml-helper.

Every component logs through a ``CorrelationLogger`` so that records emitted
while parsing a document, building a schema and validating a tree can be tied
back to one request through their ``correlation_id`` and ``component`` fields.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

MS_PER_SECOND = 1000.0

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(component)s] %(message)s"


class _ComponentDefaultsFilter(logging.Filter):
    """Supply ``component``/``correlation_id`` for records from other loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name.split(".")[-1]
        if not hasattr(record, "correlation_id"):
            record.correlation_id = None
        return True


class CorrelationLogger:
    """Logger that automatically includes correlation ID and component information."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for request tracking
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split(".")[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def _log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]],
        exc_info: bool,
    ) -> None:
        self.logger.log(level, message, extra=self._get_extra(extra), exc_info=exc_info)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with correlation info."""
        self._log(logging.DEBUG, message, extra, False)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with correlation info."""
        self._log(logging.INFO, message, extra, False)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with correlation info."""
        self._log(logging.WARNING, message, extra, False)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log message at error level with the active traceback attached."""
        self._log(logging.ERROR, message, extra, True)

    def child(self, component: str) -> "CorrelationLogger":
        """Return a logger for a sub-component sharing this correlation ID."""
        return CorrelationLogger(self.logger.name, self.correlation_id, component)

    @contextmanager
    def timed(self, operation: str, **fields: Any) -> Iterator[Dict[str, Any]]:
        """Log ``operation`` completion with its duration at debug level.

        The yielded dict is merged into the completion record, so callers can
        attach counts gathered while the operation runs.
        """
        start_time = time.perf_counter()
        summary: Dict[str, Any] = dict(fields)
        try:
            yield summary
        finally:
            summary["processing_time_ms"] = (
                (time.perf_counter() - start_time) * MS_PER_SECOND
            )
            self.debug(f"{operation} finished", extra=summary)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(level: str = "WARNING") -> None:
    """Install a stderr handler on the package logger.

    Args:
        level: Level name such as ``"DEBUG"`` or ``"ERROR"``
    """
    package_logger = logging.getLogger("xml_helper")
    package_logger.setLevel(level)

    for handler in package_logger.handlers:
        if getattr(handler, "_xml_helper_handler", False):
            handler.setLevel(level)
            return

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ComponentDefaultsFilter())
    handler._xml_helper_handler = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
