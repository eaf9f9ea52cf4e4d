"""
In-process asynchronous event bus.
"""

import asyncio
from typing import Any, List, Optional, Type, Union

from ddd_kernel.domain.events.base import Event
from ddd_kernel.domain.events.registry import HandlerRegistry
from ddd_kernel.domain.interfaces.base import IErrorHandler, ILogger
from ddd_kernel.domain.interfaces.event_bus import IEventHandler


class InMemoryAsyncEventBus:
    """Dispatches events to the handlers registered for their kind.

    All handlers for an event run concurrently and ``dispatch`` returns once
    every one of them has finished. A failing handler never stops the
    others; failures are reported through the error handler and, when
    ``raise_handler_errors`` is set, the first one is re-raised afterwards.
    """

    def __init__(self, registry: HandlerRegistry, logger: ILogger,
                 error_handler: Optional[IErrorHandler] = None,
                 raise_handler_errors: bool = True,
                 handler_timeout: Optional[float] = None,
                 name: str = "in-memory"):
        self.registry = registry
        self.logger = logger
        self.error_handler = error_handler
        self.raise_handler_errors = raise_handler_errors
        self.handler_timeout = handler_timeout
        self.name = name

    def add_subscriber(self, event: Union[str, Type[Event]], handler: IEventHandler[Any]) -> None:
        """Register a handler. Only possible until the registry is frozen."""
        self.registry.register(handler, [event])

    async def dispatch(self, event: Event) -> None:
        handlers = self.registry.handlers_for(event.kind)
        if not handlers:
            self.logger.debug(f"No handlers for event '{event.kind}'", bus=self.name, event_id=event.id)
            return

        results = await asyncio.gather(
            *(self._run_handler(handler, event) for handler in handlers),
            return_exceptions=True
        )

        errors: List[Exception] = []
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                errors.append(result)
                self._report(result, handler, event)
            elif isinstance(result, BaseException):
                raise result

        if errors and self.raise_handler_errors:
            raise errors[0]

    async def _run_handler(self, handler: IEventHandler[Any], event: Event) -> None:
        if self.handler_timeout is None:
            await handler.handle(event)
        else:
            await asyncio.wait_for(handler.handle(event), timeout=self.handler_timeout)

    def _report(self, error: Exception, handler: IEventHandler[Any], event: Event) -> None:
        context = {
            'bus': self.name,
            'handler': type(handler).__name__,
            'event_kind': event.kind,
            'event_id': event.id,
        }
        if self.error_handler is not None:
            self.error_handler.handle_error(error, context)
        else:
            self.logger.error(f"Event handler failed: {error}", **context)
