"""
Common base for domain and integration events.
"""

import uuid
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from ddd_kernel.domain.exceptions import ArgumentInvalidError, ArgumentNotProvidedError
from ddd_kernel.domain.models.guard import is_empty
from ddd_kernel.domain.models.value_object import ValidValueObject, ValueObject

# Names a payload field may not take
RESERVED_FIELDS = frozenset({'kind', 'commit', 'is_committed', 'to_primitives', 'get_primitives',
                             'from_primitives', 'get_name', 'payload'})


def unpack_identifier(value: Any, field: str, owner: str) -> str:
    """Unwrap an identifier value object, failing fast when it is invalid."""
    if isinstance(value, ValidValueObject):
        return value.unpack()
    if isinstance(value, ValueObject):
        return value.force_unpack()
    if isinstance(value, str) and value:
        return value
    if is_empty(value):
        raise ArgumentNotProvidedError(f"{owner} {field} should be provided", field=field)
    raise ArgumentInvalidError(
        f"{owner} {field} should be an identifier value object", field=field, value=value
    )


class Event(ABC):
    """Immutable event record.

    Subclasses get an explicit ``kind`` tag, defaulting to the class name,
    used for routing and for registry lookups. Everything passed to the
    constructor beyond the base fields becomes a read-only payload attribute.
    """

    kind: ClassVar[str] = 'Event'

    id: str
    metadata: Optional[Mapping[str, Any]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if 'kind' not in cls.__dict__:
            cls.kind = cls.__name__

    def __init__(self, event_id: Optional[str], metadata: Optional[Mapping[str, Any]],
                 payload: Mapping[str, Any]) -> None:
        for name in payload:
            if name in RESERVED_FIELDS or name.startswith('_'):
                raise ArgumentInvalidError(
                    f"{type(self).__name__} payload field '{name}' is reserved", field=name
                )
        object.__setattr__(self, 'id', event_id or str(uuid.uuid4()))
        object.__setattr__(self, 'metadata', MappingProxyType(dict(metadata)) if metadata else None)
        object.__setattr__(self, '_payload_fields', tuple(payload))
        for name, value in payload.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    @classmethod
    def get_name(cls) -> str:
        return cls.kind

    @property
    def payload(self) -> Mapping[str, Any]:
        """Subclass-defined fields, as passed at construction."""
        fields: Tuple[str, ...] = self._payload_fields
        return MappingProxyType({name: getattr(self, name) for name in fields})

    @abstractmethod
    def get_primitives(self) -> Dict[str, Any]:
        """Event-specific payload in primitive form."""

    @abstractmethod
    def to_primitives(self) -> Dict[str, Any]: ...
