"""
Integration events: messages meant for consumers outside the aggregate's boundary.
"""

from typing import Any, ClassVar, Dict, Mapping, Optional

from ddd_kernel.domain.exceptions import ArgumentInvalidError, ArgumentNotProvidedError
from ddd_kernel.domain.events.base import Event, unpack_identifier
from ddd_kernel.domain.models.guard import is_empty


class IntegrationEvent(Event):
    """Base class for integration events.

    Built from a mapping with ``id`` (an ``Id`` value object), optional
    ``metadata`` and optional ``key`` (a partitioning key for the transport).
    Subclasses must declare a ``version`` string for their schema.
    """

    version: ClassVar[str] = ''

    key: Optional[str]

    def __init__(self, props: Mapping[str, Any]) -> None:
        name = type(self).__name__
        if is_empty(props):
            raise ArgumentNotProvidedError(f"{name} props should not be empty", field='props')
        if not type(self).version:
            raise ArgumentNotProvidedError(f"{name} should declare a schema version", field='version')

        data = dict(props)
        if 'version' in data:
            raise ArgumentInvalidError(
                f"{name} payload field 'version' is reserved for the schema version", field='version'
            )
        event_id = unpack_identifier(data.pop('id', None), 'id', name)
        metadata = data.pop('metadata', None)
        key = data.pop('key', None)

        super().__init__(event_id, metadata, data)
        object.__setattr__(self, 'key', key)

    def to_primitives(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'key': self.key,
            'version': self.version,
            'metadata': dict(self.metadata) if self.metadata is not None else None,
            **self.get_primitives(),
        }
