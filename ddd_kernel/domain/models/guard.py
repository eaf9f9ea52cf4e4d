"""
Emptiness guards shared by value objects, entities and events.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, TypeVar

T = TypeVar('T')


def is_empty(value: Any) -> bool:
    """Check whether a value counts as "not provided".

    Numbers, booleans and dates are never empty. ``None`` and ``""`` are.
    A container is empty when it has no items or when every item is itself
    empty.
    """
    if isinstance(value, (bool, int, float, Decimal, date)):
        return False
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, Mapping):
        return len(value) == 0
    if isinstance(value, (list, tuple, set, frozenset)):
        if len(value) == 0:
            return True
        return all(is_empty(item) for item in value)
    return False


def is_defined_and_not_empty(value: Optional[str]) -> bool:
    """Check that a string is neither ``None`` nor ``""``."""
    return value is not None and value != ""


def optional_from(factory: Callable[[Any], T], value: Any = None) -> Optional[T]:
    """Build ``factory(value)`` or return ``None`` when the value is empty."""
    if is_empty(value) or not is_defined_and_not_empty(value):
        return None
    return factory(value)
