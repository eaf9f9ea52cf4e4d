"""
Structured logging implementation.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pathlib import Path

from ddd_kernel.domain.interfaces.base import ILogger
from ddd_kernel.domain.models.configuration import KernelConfiguration

ROOT_LOGGER_NAME = "ddd_kernel"


class StructuredLogger:
    """Structured logger writing one JSON document per record."""

    def __init__(self, name: str, level: str = "INFO", log_file: Optional[str] = None,
                 component: Optional[str] = None):
        self.component = component or name.rsplit('.', 1)[-1]
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.propagate = False

        # Clear existing handlers
        self.logger.handlers.clear()

        formatter = StructuredFormatter()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message with context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        """Log critical message with context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra = {
            'context': context,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'component': context.pop('component', self.component)
        }
        self.logger.log(level, message, extra=extra)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': getattr(record, 'timestamp', datetime.now(timezone.utc).isoformat()),
            'level': record.levelname,
            'component': getattr(record, 'component', 'unknown'),
            'message': record.getMessage(),
            'logger': record.name
        }

        context = getattr(record, 'context', {})
        if context:
            log_data['context'] = context

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Context values may be events, ids or datetimes
        return json.dumps(log_data, ensure_ascii=False, default=str)


class LoggerFactory:
    """Factory for creating loggers with consistent configuration."""

    @staticmethod
    def create_logger(name: str, level: str = "INFO", log_file: Optional[str] = None) -> ILogger:
        """Create a structured logger instance."""
        return StructuredLogger(name, level, log_file)

    @staticmethod
    def create_component_logger(component_name: str, config: KernelConfiguration) -> ILogger:
        """Create a logger for a kernel component from the kernel configuration."""
        return StructuredLogger(
            f"{ROOT_LOGGER_NAME}.{component_name}", config.log_level, config.log_file,
            component=component_name
        )
