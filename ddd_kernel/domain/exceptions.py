"""
Domain exceptions and error hierarchy.
"""

from typing import Optional, Dict, Any, List, Sequence, Tuple


class DomainKernelError(Exception):
    """Base exception for domain kernel errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ArgumentError(DomainKernelError):
    """Base class for argument validation errors."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.field = field
        self.value = value


class ArgumentNotProvidedError(ArgumentError):
    """A required argument is empty or missing."""
    pass


class ArgumentInvalidError(ArgumentError):
    """An argument has the wrong shape or type."""
    pass


class ArgumentOutOfRangeError(ArgumentError):
    """An argument is outside its allowed range."""
    pass


class AggregateValidationError(DomainKernelError):
    """Raised when an object with accumulated validation errors is unwrapped."""

    def __init__(self, errors: Sequence[DomainKernelError],
                 context: Optional[Dict[str, Any]] = None):
        self.errors: List[DomainKernelError] = list(errors)
        summary = "; ".join(error.message for error in self.errors)
        super().__init__(f"{len(self.errors)} validation error(s): {summary}", context)


class UnhandledEventError(DomainKernelError):
    """An aggregate received an event kind it has no transition for."""

    def __init__(self, message: str, event_kind: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.event_kind = event_kind


class RegistryError(DomainKernelError):
    """Event, aggregate or handler registry misuse."""
    pass


class EventPublishError(DomainKernelError):
    """One or more event dispatches failed while publishing an aggregate's events."""

    def __init__(self, message: str, failures: Sequence[Tuple[Any, BaseException]] = (),
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.failures = list(failures)


class ConfigurationError(DomainKernelError):
    """Configuration related errors."""
    pass
