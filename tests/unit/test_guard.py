"""
Unit tests for the emptiness guards.
"""

import pytest
from datetime import date
from decimal import Decimal

from ddd_kernel.domain.models.guard import is_defined_and_not_empty, is_empty, optional_from

from bank_account import Email


@pytest.mark.parametrize("value", [None, "", {}, [], (), ["", None], [[], {}]])
def test_empty_values(value):
    assert is_empty(value)


@pytest.mark.parametrize("value", [0, 0.0, False, Decimal("0"), date(2024, 1, 1), " ", {'a': None}, ["", "x"]])
def test_non_empty_values(value):
    assert not is_empty(value)


def test_is_defined_and_not_empty():
    assert is_defined_and_not_empty("x")
    assert not is_defined_and_not_empty("")
    assert not is_defined_and_not_empty(None)


def test_optional_from_builds_value():
    email = optional_from(Email, "ada@example.com")
    assert isinstance(email, Email)


@pytest.mark.parametrize("value", [None, ""])
def test_optional_from_returns_none_for_missing_value(value):
    assert optional_from(Email, value) is None
