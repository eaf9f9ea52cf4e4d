"""
Domain events: immutable facts recorded by aggregates.
"""

from typing import Any, Dict, Mapping, Type, TypeVar

from ddd_kernel.domain.exceptions import ArgumentNotProvidedError
from ddd_kernel.domain.events.base import Event, unpack_identifier
from ddd_kernel.domain.models.guard import is_empty

E = TypeVar('E', bound='DomainEvent')


class DomainEvent(Event):
    """Base class for domain events.

    Built from a properties mapping holding ``aggregate_id`` (an ``Id``
    value object, or its raw string when rehydrating), optionally ``id`` and
    ``metadata``, plus the event payload::

        class AccountOpened(DomainEvent):
            kind = 'account.opened'

            owner: str

            def get_primitives(self):
                return {'owner': self.owner}

        AccountOpened({'aggregate_id': account_id, 'owner': 'ada'})

    Unlike entities and value objects, malformed events raise immediately.
    ``committed`` is the only mutable state and only ever goes from False to True.
    """

    aggregate_id: str

    def __init__(self, props: Mapping[str, Any]) -> None:
        name = type(self).__name__
        if is_empty(props):
            raise ArgumentNotProvidedError(f"{name} props should not be empty", field='props')

        data = dict(props)
        aggregate_id = unpack_identifier(data.pop('aggregate_id', None), 'aggregate_id', name)
        event_id = data.pop('id', None)
        metadata = data.pop('metadata', None)

        super().__init__(event_id, metadata, data)
        object.__setattr__(self, 'aggregate_id', aggregate_id)
        object.__setattr__(self, '_committed', False)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(id={self.id!r}, aggregate_id={self.aggregate_id!r}, "
                f"committed={self._committed})")

    @classmethod
    def from_primitives(cls: Type[E], data: Mapping[str, Any]) -> E:
        """Rebuild an event from the output of ``to_primitives``."""
        return cls(dict(data))

    def to_primitives(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'aggregate_id': self.aggregate_id,
            'metadata': dict(self.metadata) if self.metadata is not None else None,
            **self.get_primitives(),
        }

    def is_committed(self) -> bool:
        return self._committed

    def commit(self) -> None:
        object.__setattr__(self, '_committed', True)
