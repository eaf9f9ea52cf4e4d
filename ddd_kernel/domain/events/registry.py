"""
Explicit registries populated at process start.

Event factories, aggregate builders and event handlers are registered by
kind through plain method calls during setup, then looked up explicitly.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

from ddd_kernel.domain.events.base import Event
from ddd_kernel.domain.events.domain_event import DomainEvent
from ddd_kernel.domain.exceptions import RegistryError
from ddd_kernel.domain.interfaces.event_bus import IEventHandler
from ddd_kernel.domain.models.aggregate import AggregateRoot

EventFactory = Callable[[Mapping[str, Any]], DomainEvent]
AggregateBuilder = Callable[[DomainEvent], AggregateRoot]

WILDCARD = '*'


def _kind_of(event: Union[str, Type[Event]]) -> str:
    return event if isinstance(event, str) else event.kind


class EventRegistry:
    """Maps event kinds to factories that rebuild events from primitives."""

    def __init__(self) -> None:
        self._factories: Dict[str, EventFactory] = {}

    def register(self, event_class: Type[DomainEvent], factory: Optional[EventFactory] = None) -> None:
        kind = event_class.kind
        if kind in self._factories:
            raise RegistryError(f"Event kind '{kind}' is already registered", context={'kind': kind})
        self._factories[kind] = factory or event_class.from_primitives

    def is_registered(self, kind: str) -> bool:
        return kind in self._factories

    def kinds(self) -> List[str]:
        return list(self._factories)

    def from_primitives(self, kind: str, data: Mapping[str, Any]) -> DomainEvent:
        try:
            factory = self._factories[kind]
        except KeyError:
            raise RegistryError(f"Unknown event kind '{kind}'", context={'kind': kind}) from None
        return factory(data)


class AggregateRegistry:
    """Maps creation event kinds to aggregate builders."""

    def __init__(self) -> None:
        self._builders: Dict[str, Tuple[Type[DomainEvent], AggregateBuilder]] = {}

    def register(self, creation_event_class: Type[DomainEvent], builder: AggregateBuilder) -> None:
        kind = creation_event_class.kind
        if kind in self._builders:
            raise RegistryError(
                f"Creation event kind '{kind}' is already registered", context={'kind': kind}
            )
        self._builders[kind] = (creation_event_class, builder)

    def build_from_creation_event(self, event: DomainEvent) -> AggregateRoot:
        _, builder = self._lookup(event.kind)
        return builder(event)

    def rehydrate(self, history: Sequence[DomainEvent]) -> AggregateRoot:
        """Rebuild an aggregate from its full stream, creation event first."""
        if not history:
            raise RegistryError("Cannot rehydrate an aggregate from an empty history")

        creation_event_class, builder = self._lookup(history[0].kind)
        aggregate = builder(history[0])
        aggregate.loads_from_history(history, creation_event_class)
        return aggregate

    def _lookup(self, kind: str) -> Tuple[Type[DomainEvent], AggregateBuilder]:
        try:
            return self._builders[kind]
        except KeyError:
            raise RegistryError(
                f"No aggregate is built from event kind '{kind}'", context={'kind': kind}
            ) from None


class HandlerRegistry:
    """Process-wide event handler registry.

    Handlers are registered explicitly during bus setup, then the registry
    is frozen and stays immutable for the rest of the process.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[IEventHandler[Any]]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, handler: IEventHandler[Any],
                 events: Union[str, Iterable[Union[str, Type[Event]]]]) -> None:
        """Register ``handler`` for the given event classes or kinds, or ``'*'`` for all."""
        if self._frozen:
            raise RegistryError("Handler registry is frozen", context={'handler': type(handler).__name__})

        kinds = [events] if isinstance(events, str) else [_kind_of(event) for event in events]
        if not kinds:
            raise RegistryError("At least one event must be given", context={'handler': type(handler).__name__})
        for kind in kinds:
            self._handlers.setdefault(kind, []).append(handler)

    def freeze(self) -> None:
        self._frozen = True

    def handlers_for(self, kind: str) -> Tuple[IEventHandler[Any], ...]:
        """Handlers for ``kind`` followed by the wildcard handlers."""
        specific = self._handlers.get(kind, []) if kind != WILDCARD else []
        handlers: List[IEventHandler[Any]] = []
        seen = set()
        for handler in specific + self._handlers.get(WILDCARD, []):
            # A handler bound to a kind and to '*' runs once
            if id(handler) not in seen:
                seen.add(id(handler))
                handlers.append(handler)
        return tuple(handlers)
