"""
Aggregate root: the event-sourcing core.

An aggregate changes state only by applying domain events. New events go
through ``apply_change``, which mutates state and appends to the ledger of
uncommitted events. Replaying a persisted stream goes through
``loads_from_history``, which mutates state but never touches the ledger.

The ledger only holds events produced since the last pull, clear
or publish. Callers only ever get copies of it.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, ClassVar, List, Mapping, Optional, Sequence, Tuple, Type

from ddd_kernel.domain.events.domain_event import DomainEvent
from ddd_kernel.domain.exceptions import EventPublishError, UnhandledEventError
from ddd_kernel.domain.interfaces.base import ILogger
from ddd_kernel.domain.interfaces.event_bus import IEventBus
from ddd_kernel.domain.models.entity import Entity

# Pure state transition: current props + event -> new props
Transition = Callable[[Mapping[str, Any], DomainEvent], Mapping[str, Any]]


class AggregateRoot(Entity):
    """Base class for event-sourced aggregates.

    Subclasses declare ``transitions``, a closed mapping from event kind to
    a pure transition function, and expose state-changing methods that
    build an event and pass it to ``apply_change``::

        class Account(AggregateRoot):
            transitions = {
                MoneyDeposited.kind: lambda props, e: {**props, 'balance': props['balance'] + e.amount},
            }

            def deposit(self, amount):
                self.apply_change(MoneyDeposited({'aggregate_id': self.id, 'amount': amount}))

    ``version`` is a plain counter. The kernel never increments it; the
    persistence layer owns optimistic concurrency.
    """

    transitions: ClassVar[Mapping[str, Transition]] = {}

    def __init__(self, id: Any, props: Any,
                 created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None,
                 version: int = 0) -> None:
        self._domain_events: List[DomainEvent] = []
        super().__init__(id, props, created_at, updated_at)
        self.version = version

    @property
    def domain_events(self) -> Tuple[DomainEvent, ...]:
        """Read-only view of the uncommitted events."""
        return tuple(self._domain_events)

    def apply(self, event: DomainEvent) -> None:
        """Mutate state for one event by dispatching on ``event.kind``."""
        transition = type(self).transitions.get(event.kind)
        if transition is None:
            raise UnhandledEventError(
                f"{type(self).__name__} has no transition for event '{event.kind}'",
                event_kind=event.kind,
                context={'aggregate_id': event.aggregate_id}
            )
        self._props = dict(transition(self.props, event))

    def apply_change(self, event: DomainEvent) -> None:
        """Apply a new event and record it in the ledger. For state-changing methods."""
        self.apply(event)
        self._domain_events.append(event)

    def loads_from_history(self, history: Sequence[DomainEvent],
                           creation_event_type: Type[DomainEvent]) -> None:
        """Replay a persisted stream, skipping the creation event.

        The creation event is accounted for by whatever built the aggregate.
        Replay never records events in the ledger.
        """
        for event in history:
            if isinstance(event, creation_event_type):
                continue
            self.apply(event)

    def pull_domain_events(self) -> List[DomainEvent]:
        """Return the ledger in insertion order and clear it."""
        domain_events = list(self._domain_events)
        self._domain_events = []
        return domain_events

    def commit_events(self) -> None:
        """Mark every ledger event committed without clearing or dispatching."""
        for event in self._domain_events:
            event.commit()

    def clear_events(self) -> None:
        self._domain_events = []

    async def publish_events(self, logger: ILogger, event_bus: IEventBus) -> None:
        """Commit and dispatch every ledger event concurrently, then clear the ledger.

        Every dispatch runs to completion even if others fail. Failed
        dispatches are reported together in an ``EventPublishError`` once the
        ledger has been cleared; committed status is not rolled back.
        """
        events = list(self._domain_events)
        results = await asyncio.gather(
            *(self._publish_event(event, logger, event_bus) for event in events),
            return_exceptions=True
        )
        self.clear_events()

        failures = []
        for event, result in zip(events, results):
            if isinstance(result, Exception):
                failures.append((event, result))
            elif isinstance(result, BaseException):
                raise result

        if failures:
            raise EventPublishError(
                f"{len(failures)} of {len(events)} event(s) failed to dispatch",
                failures=failures,
                context={'aggregate': type(self).__name__, 'aggregate_id': str(self.id)}
            )

    async def _publish_event(self, event: DomainEvent, logger: ILogger, event_bus: IEventBus) -> None:
        correlation_id = event.metadata.get('correlation_id') if event.metadata else None
        logger.debug(
            f'"{type(event).__name__}" event published for aggregate {type(self).__name__} : {self.id}',
            event_id=event.id,
            event_kind=event.kind,
            aggregate_id=event.aggregate_id,
            correlation_id=correlation_id
        )
        event.commit()
        await event_bus.dispatch(event)
