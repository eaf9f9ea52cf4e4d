"""
Routes domain events to a bus based on their commit status.
"""

from ddd_kernel.domain.events.domain_event import DomainEvent
from ddd_kernel.domain.interfaces.event_bus import IEventBus


class EventBusRouter:
    """Sends uncommitted events to one bus and committed events to another.

    Uncommitted events feed local, pre-persistence consumers; committed
    events are the externally visible ones.
    """

    def __init__(self, uncommitted_event_bus: IEventBus, committed_event_bus: IEventBus):
        self.uncommitted_event_bus = uncommitted_event_bus
        self.committed_event_bus = committed_event_bus

    async def route(self, domain_event: DomainEvent) -> None:
        if domain_event.is_committed():
            await self.committed_event_bus.dispatch(domain_event)
        else:
            await self.uncommitted_event_bus.dispatch(domain_event)

    async def dispatch(self, event: DomainEvent) -> None:
        """Lets the router itself stand in as an ``IEventBus``."""
        await self.route(event)
