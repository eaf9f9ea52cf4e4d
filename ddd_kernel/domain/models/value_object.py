"""
Value objects: immutable, self-validating wrappers compared by value.
"""

import json
import uuid
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from ddd_kernel.domain.exceptions import (
    AggregateValidationError, ArgumentInvalidError, ArgumentNotProvidedError
)
from ddd_kernel.domain.models.guard import is_empty
from ddd_kernel.domain.models.validation import ValidatedObject, ValidView, to_plain

T = TypeVar('T')

# Scalars that are wrapped as a domain primitive ({"value": scalar})
PRIMITIVE_TYPES = (str, int, float, bool, Decimal, date)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    return str(obj)


class ValueObject(ValidatedObject['ValidValueObject[T]'], Generic[T]):
    """Base class for value objects.

    Pass either a scalar, which becomes a domain primitive with a single
    ``value`` field, or a mapping of fields for a composite value object.
    Invalid input never raises here; see ``validate`` in
    ``ddd_kernel.domain.models.validation``.
    """

    def __init__(self, props: Any) -> None:
        super().__init__()
        if isinstance(props, PRIMITIVE_TYPES):
            props = {'value': props}
        self._props: Mapping[str, Any] = (
            MappingProxyType(dict(props)) if isinstance(props, Mapping) else MappingProxyType({})
        )

        if self._check_props(props):
            self.validate()
        self._sealed = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_sealed', False):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._props)!r})"

    @staticmethod
    def is_value_object(obj: Any) -> bool:
        return isinstance(obj, (ValueObject, ValidValueObject))

    @property
    def props(self) -> Mapping[str, Any]:
        return self._props

    def is_domain_primitive(self) -> bool:
        return 'value' in self._props

    def force_unpack(self) -> T:
        """Return the unwrapped value or raise every accumulated error at once."""
        if self._errors:
            raise AggregateValidationError(self._errors)
        return self._unpack()

    def _check_props(self, props: Any) -> bool:
        """Baseline rules. Returns False when domain rules must be skipped."""
        if is_empty(props) or (self.is_domain_primitive() and is_empty(self._props['value'])):
            self.add_error(ArgumentNotProvidedError("Properties cannot be empty", field='props'))
            return False
        if not isinstance(props, Mapping):
            self.add_error(ArgumentInvalidError(
                "Properties should be a scalar or a mapping",
                field='props', value=type(props).__name__
            ))
            return False
        return True

    def _unpack(self) -> T:
        if self.is_domain_primitive():
            return self._props['value']
        return to_plain(self._props)

    def _serialize(self) -> str:
        return json.dumps(to_plain(self._props), default=_json_default)

    def _as_valid(self) -> 'ValidValueObject[T]':
        return ValidValueObject(self)

    def _to_plain(self) -> Any:
        return self._unpack()


class ValidValueObject(ValidView, Generic[T]):
    """A value object that passed validation. Supports ``unpack`` and ``equals``."""

    def __init__(self, draft: ValueObject[T]) -> None:
        super().__init__(draft)

    def __repr__(self) -> str:
        return f"Valid{self._draft!r}"

    @property
    def props(self) -> Mapping[str, Any]:
        return self._draft.props

    def unpack(self) -> T:
        """Scalar for a domain primitive, frozen plain mapping for a composite."""
        return self._draft._unpack()

    def equals(self, other: Optional[Union[ValueObject[Any], 'ValidValueObject[Any]']]) -> bool:
        if other is None:
            return False
        other_draft = other.draft if isinstance(other, ValidValueObject) else other
        return self._draft._serialize() == other_draft._serialize()

    def __eq__(self, other: object) -> bool:
        # Drafts keep identity hashing, so '==' only compares views
        if not isinstance(other, ValidValueObject):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self._draft._serialize())

    def __str__(self) -> str:
        return str(self.unpack())


class Id(ValueObject[str]):
    """Opaque string identifier."""

    def __init__(self, value: str) -> None:
        super().__init__(value)

    def validate(self) -> None:
        if not isinstance(self.props['value'], str):
            self.add_error(ArgumentInvalidError(
                f"{type(self).__name__} value should be a string",
                field='value', value=self.props['value']
            ))

    def __str__(self) -> str:
        return str(self.props.get('value', ''))


class UUIDId(Id):
    """Identifier holding a canonical UUID string."""

    @classmethod
    def generate(cls) -> 'UUIDId':
        return cls(str(uuid.uuid4()))

    def validate(self) -> None:
        super().validate()
        if self._errors:
            return
        try:
            uuid.UUID(self.props['value'])
        except ValueError:
            self.add_error(ArgumentInvalidError(
                f"{type(self).__name__} value is not a valid UUID",
                field='value', value=self.props['value']
            ))
