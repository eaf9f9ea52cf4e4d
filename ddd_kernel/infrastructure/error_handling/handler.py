"""
Error handler implementation with structured logging and fallback callbacks.
"""

import traceback
from typing import Dict, Any, Callable, Optional

from ddd_kernel.domain.interfaces.base import ILogger
from ddd_kernel.domain.exceptions import (
    DomainKernelError, ArgumentError, AggregateValidationError, UnhandledEventError,
    RegistryError, EventPublishError, ConfigurationError
)

FallbackHandler = Callable[[BaseException, Dict[str, Any]], None]


class ErrorHandler:
    """Logs errors with structured context and turns them into readable messages."""

    def __init__(self, logger: ILogger):
        self.logger = logger
        self._fallback_handlers: Dict[type, FallbackHandler] = {}

    def handle_error(self, error: BaseException, context: Dict[str, Any]) -> str:
        """Log the error, run its fallback if one is registered, and return a message."""
        self.log_error(error, context)
        self._execute_fallback(error, context)
        return self.create_user_message(error)

    def log_error(self, error: BaseException, context: Dict[str, Any]) -> None:
        error_context = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
            **context
        }

        if isinstance(error, DomainKernelError):
            error_context.update(error.context)

            if isinstance(error, ArgumentError):
                error_context.update({
                    'field': error.field,
                    'value': str(error.value) if error.value is not None else None
                })
            elif isinstance(error, AggregateValidationError):
                error_context['errors'] = [str(e) for e in error.errors]
            elif isinstance(error, UnhandledEventError):
                error_context['event_kind'] = error.event_kind
            elif isinstance(error, EventPublishError):
                error_context['failed_events'] = [event.id for event, _ in error.failures]

        if isinstance(error, (ArgumentError, AggregateValidationError)):
            self.logger.warning("Validation error occurred", **error_context)
        elif isinstance(error, (RegistryError, ConfigurationError)):
            self.logger.critical("Kernel setup error occurred", **error_context)
        elif isinstance(error, DomainKernelError):
            self.logger.error("Domain error occurred", **error_context)
        else:
            self.logger.error("Unexpected error occurred", **error_context)

    def create_user_message(self, error: BaseException) -> str:
        if isinstance(error, AggregateValidationError):
            lines = [f"Validation failed with {len(error.errors)} error(s):"]
            lines.extend(f"  - {e.message}" for e in error.errors)
            return "\n".join(lines)

        elif isinstance(error, ArgumentError):
            return f"Invalid argument: {error.message}"

        elif isinstance(error, UnhandledEventError):
            return f"Event not supported: {error.message}"

        elif isinstance(error, EventPublishError):
            return f"Event publishing failed: {error.message}"

        elif isinstance(error, (RegistryError, ConfigurationError)):
            return f"Kernel setup error: {error.message}"

        elif isinstance(error, DomainKernelError):
            return f"Domain error: {error.message}"

        else:
            return f"Unexpected error: {error}"

    def add_fallback_handler(self, error_type: type, handler: FallbackHandler) -> None:
        """Add a fallback callback for an error type (matched with isinstance)."""
        self._fallback_handlers[error_type] = handler

    def remove_fallback_handler(self, error_type: type) -> None:
        self._fallback_handlers.pop(error_type, None)

    def _execute_fallback(self, error: BaseException, context: Dict[str, Any]) -> None:
        handler = self._find_fallback(error)
        if handler is None:
            return
        try:
            handler(error, context)
        except Exception as fallback_error:
            self.logger.error(
                "Fallback handler failed",
                error_type=type(fallback_error).__name__,
                error_message=str(fallback_error),
                original_error=str(error)
            )

    def _find_fallback(self, error: BaseException) -> Optional[FallbackHandler]:
        # Most specific registered type wins
        for cls in type(error).__mro__:
            if cls in self._fallback_handlers:
                return self._fallback_handlers[cls]
        return None
