"""
Event bus and event handler interface definitions.
"""

from typing import Protocol, TypeVar, runtime_checkable

from ddd_kernel.domain.events.base import Event

E_contra = TypeVar('E_contra', bound=Event, contravariant=True)


@runtime_checkable
class IEventBus(Protocol):
    """Dispatches domain and integration events to their handlers."""

    async def dispatch(self, event: Event) -> None:
        """Dispatch an event. Failure and retry semantics belong to the implementation."""
        ...


@runtime_checkable
class IEventHandler(Protocol[E_contra]):
    """Processes one event."""

    async def handle(self, event: E_contra) -> None: ...
