"""
Entities: identity-bearing domain objects with lifecycle timestamps.
"""

from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from ddd_kernel.domain.exceptions import (
    ArgumentInvalidError, ArgumentNotProvidedError, ArgumentOutOfRangeError
)
from ddd_kernel.domain.models.guard import is_empty
from ddd_kernel.domain.models.validation import ValidatedObject, ValidView, to_plain
from ddd_kernel.domain.models.value_object import Id, ValidValueObject, ValueObject

MAX_PROPS = 50

AggregateId = Id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _props_as_dict(props: Any) -> Optional[Dict[str, Any]]:
    if isinstance(props, Mapping):
        return dict(props)
    if is_dataclass(props) and not isinstance(props, type):
        return {f.name: getattr(props, f.name) for f in fields(props)}
    return None


class Entity(ValidatedObject['ValidEntity']):
    """Base class for entities.

    Construction never raises. Empty props, props that are not a mapping
    (or dataclass instance) and props with more than ``MAX_PROPS`` keys each
    record a distinct error, after which the ``validate`` hook adds the
    subclass rules.
    """

    def __init__(self, id: Union[Id, ValidValueObject[str], str], props: Any,
                 created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None) -> None:
        super().__init__()
        self._id = self._check_id(id)

        props_dict = self._check_props(props)
        now = _utcnow()
        self._created_at = created_at or now
        self._updated_at = updated_at or now
        self._props: Dict[str, Any] = props_dict or {}

        # Domain rules need a usable props mapping
        if props_dict:
            self.validate()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id})"

    @staticmethod
    def is_entity(obj: Any) -> bool:
        return isinstance(obj, (Entity, ValidEntity))

    @property
    def id(self) -> Id:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def props(self) -> Mapping[str, Any]:
        return MappingProxyType(self._props)

    def _replace_props(self, props: Mapping[str, Any]) -> None:
        """Swap in a new props mapping and bump ``updated_at``."""
        self._props = dict(props)
        self._updated_at = _utcnow()

    def _identity(self) -> Any:
        return self._id._unpack() if isinstance(self._id, ValueObject) else self._id

    def _check_id(self, id: Any) -> Any:
        if isinstance(id, ValidValueObject):
            id = id.draft
        elif isinstance(id, str):
            id = Id(id)

        if id is None:
            self.add_error(ArgumentNotProvidedError("Entity id should be provided", field='id'))
        elif isinstance(id, ValueObject) and not id.is_valid():
            self.add_error(ArgumentInvalidError(
                "Entity id is invalid", field='id', value=repr(id),
                context={'id_errors': len(id.errors)}
            ))
        return id

    def _check_props(self, props: Any) -> Optional[Dict[str, Any]]:
        props_dict = _props_as_dict(props)

        # Also catches dataclass instances without fields
        if is_empty(props) or props_dict == {}:
            self.add_error(ArgumentNotProvidedError("Entity props should not be empty", field='props'))

        if props_dict is None:
            self.add_error(ArgumentInvalidError(
                "Entity props should be a mapping", field='props', value=type(props).__name__
            ))
        elif len(props_dict) > MAX_PROPS:
            self.add_error(ArgumentOutOfRangeError(
                f"Entity props should not have more than {MAX_PROPS} properties",
                field='props', value=len(props_dict)
            ))
        return props_dict

    def _as_valid(self) -> 'ValidEntity':
        return ValidEntity(self)

    def _to_plain(self) -> Any:
        return MappingProxyType({
            'id': self._identity(),
            'created_at': self._created_at,
            'updated_at': self._updated_at,
            **to_plain(self._props),
        })


class ValidEntity(ValidView):
    """An entity that passed validation. Supports ``equals``, ``get_props_copy`` and ``to_object``."""

    def __init__(self, draft: Entity) -> None:
        super().__init__(draft)

    def __repr__(self) -> str:
        return f"Valid{self._draft!r}"

    @property
    def entity(self) -> Entity:
        return self._draft

    @property
    def id(self) -> Id:
        return self._draft.id

    def equals(self, other: Optional[Union[Entity, 'ValidEntity']]) -> bool:
        """Identity equality. Props are never compared."""
        if other is None:
            return False
        other_entity = other.entity if isinstance(other, ValidEntity) else other
        return self._draft._identity() == other_entity._identity()

    def __eq__(self, other: object) -> bool:
        # Drafts keep identity hashing, so '==' only compares views
        if not isinstance(other, ValidEntity):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self._draft._identity())

    def get_props_copy(self) -> Mapping[str, Any]:
        """Frozen snapshot of id, timestamps and all domain props."""
        entity = self._draft
        return MappingProxyType({
            'id': entity.id,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
            **entity.props,
        })

    def to_object(self) -> Mapping[str, Any]:
        """Frozen primitive projection, for serialization and logging."""
        return self._draft._to_plain()
