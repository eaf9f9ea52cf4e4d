"""
Deferred validation substrate shared by value objects and entities.

Drafts accumulate errors while they are constructed instead of raising.
The only way to reach the comparison and unwrap operations is through
``validate(draft)``, which returns either ``Valid`` wrapping the validated
view of the draft or ``Invalid`` carrying every accumulated error.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, List, Mapping, NoReturn, Tuple, TypeVar, Union

from ddd_kernel.domain.exceptions import AggregateValidationError, DomainKernelError

V = TypeVar('V')


class ValidatedObject(Generic[V], ABC):
    """Base class for objects with construction-time error accumulation."""

    def __init__(self) -> None:
        self._errors: List[DomainKernelError] = []

    @property
    def errors(self) -> Tuple[DomainKernelError, ...]:
        """Errors accumulated so far, in the order they were recorded."""
        return tuple(self._errors)

    def add_error(self, error: DomainKernelError) -> None:
        """Record a validation failure without raising."""
        self._errors.append(error)

    def is_valid(self) -> bool:
        return not self._errors

    @abstractmethod
    def validate(self) -> None:
        """Domain rules, run at the end of construction. Call ``add_error`` on failure."""

    @abstractmethod
    def _as_valid(self) -> V:
        """Build the validated view. Only called when no errors exist."""

    @abstractmethod
    def _to_plain(self) -> Any:
        """Primitive projection used when this object is nested in another one."""


class ValidView(ABC):
    """Validated view over a draft. Exposes the operations drafts do not have."""

    def __init__(self, draft: ValidatedObject[Any]) -> None:
        self._draft = draft

    @property
    def draft(self) -> ValidatedObject[Any]:
        return self._draft


@dataclass(frozen=True)
class Valid(Generic[V]):
    """Successful validation result."""

    value: V

    def is_valid(self) -> bool:
        return True

    def unwrap(self) -> V:
        return self.value


@dataclass(frozen=True)
class Invalid:
    """Failed validation result with the full list of violations."""

    errors: Tuple[DomainKernelError, ...]

    def is_valid(self) -> bool:
        return False

    def raise_for_errors(self) -> NoReturn:
        raise AggregateValidationError(self.errors)

    def unwrap(self) -> NoReturn:
        self.raise_for_errors()


ValidationResult = Union[Valid[V], Invalid]


def validate(draft: ValidatedObject[V]) -> 'ValidationResult[V]':
    """Convert a draft into its validated view, or report why it cannot be."""
    if draft.is_valid():
        return Valid(draft._as_valid())
    return Invalid(draft.errors)


def to_plain(value: Any) -> Any:
    """Recursively unwrap value objects and entities into a frozen primitive structure."""
    if isinstance(value, ValidView):
        return value.draft._to_plain()
    if isinstance(value, ValidatedObject):
        return value._to_plain()
    if isinstance(value, Mapping):
        return MappingProxyType({key: to_plain(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(to_plain(item) for item in value)
    return value
