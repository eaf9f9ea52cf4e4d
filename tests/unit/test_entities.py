"""
Unit tests for entities.
"""

import pytest
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType

from ddd_kernel.domain.exceptions import (
    ArgumentInvalidError, ArgumentNotProvidedError, ArgumentOutOfRangeError
)
from ddd_kernel.domain.models.entity import MAX_PROPS, Entity, ValidEntity
from ddd_kernel.domain.models.validation import Invalid, validate
from ddd_kernel.domain.models.value_object import Id

from bank_account import Email, Money


class Customer(Entity):
    """Entity with a single domain rule."""

    def validate(self):
        if 'name' in self.props and not self.props['name']:
            self.add_error(ArgumentInvalidError("Customer name cannot be blank", field='name'))

    def rename(self, name: str) -> None:
        self._replace_props({**self.props, 'name': name})


@dataclass
class CustomerProps:
    name: str
    email: Email


@dataclass
class NoProps:
    pass


class TestEntityConstruction:
    """Test entity construction and deferred validation."""

    def test_well_formed_entity_is_valid(self):
        customer = Customer(Id("c-1"), {'name': "Ada", 'email': Email("ada@example.com")})

        assert customer.is_valid()
        assert str(customer.id) == "c-1"

    def test_timestamps_default_to_now(self):
        before = datetime.now(timezone.utc)
        customer = Customer(Id("c-1"), {'name': "Ada"})
        after = datetime.now(timezone.utc)

        assert before <= customer.created_at <= after
        assert customer.created_at == customer.updated_at

    def test_explicit_timestamps_are_kept(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        updated = datetime(2024, 2, 1, tzinfo=timezone.utc)

        customer = Customer(Id("c-1"), {'name': "Ada"}, created_at=created, updated_at=updated)

        assert customer.created_at == created
        assert customer.updated_at == updated

    def test_empty_props_are_not_provided(self):
        customer = Customer(Id("c-1"), {})

        assert customer.is_valid() is False
        assert isinstance(customer.errors[0], ArgumentNotProvidedError)

    def test_non_mapping_props_are_invalid(self):
        customer = Customer(Id("c-1"), "Ada")

        assert customer.is_valid() is False
        assert [type(e) for e in customer.errors] == [ArgumentInvalidError]

    def test_none_props_record_both_errors(self):
        customer = Customer(Id("c-1"), None)
        assert [type(e) for e in customer.errors] == [ArgumentNotProvidedError, ArgumentInvalidError]

    def test_too_many_props_are_out_of_range(self):
        props = {f"field_{i}": i for i in range(MAX_PROPS + 1)}

        customer = Customer(Id("c-1"), props)

        assert customer.is_valid() is False
        assert isinstance(customer.errors[0], ArgumentOutOfRangeError)
        assert isinstance(validate(customer), Invalid)

    def test_exactly_max_props_is_valid(self):
        props = {f"field_{i}": i for i in range(MAX_PROPS)}
        assert Customer(Id("c-1"), props).is_valid()

    def test_domain_rule_is_deferred(self):
        customer = Customer(Id("c-1"), {'name': ""})

        assert customer.is_valid() is False
        assert customer.errors[0].field == 'name'

    def test_dataclass_props_are_accepted(self):
        customer = Customer(Id("c-1"), CustomerProps(name="Ada", email=Email("ada@example.com")))

        assert customer.is_valid()
        assert customer.props['name'] == "Ada"

    def test_dataclass_props_without_fields_are_not_provided(self):
        customer = Customer(Id("c-1"), NoProps())

        assert customer.is_valid() is False
        assert [type(e) for e in customer.errors] == [ArgumentNotProvidedError]

    def test_invalid_id_is_recorded(self):
        customer = Customer(Id(""), {'name': "Ada"})

        assert customer.is_valid() is False
        assert customer.errors[0].field == 'id'

    def test_string_id_is_wrapped(self):
        customer = Customer("c-1", {'name': "Ada"})
        assert isinstance(customer.id, Id)

    def test_invalid_entity_exposes_no_valid_operations(self):
        customer = Customer(Id("c-1"), {f"f{i}": i for i in range(MAX_PROPS + 1)})

        assert not hasattr(customer, 'equals')
        assert not hasattr(customer, 'get_props_copy')
        assert not hasattr(customer, 'to_object')

    def test_is_entity(self):
        customer = Customer(Id("c-1"), {'name': "Ada"})
        assert Entity.is_entity(customer)
        assert Entity.is_entity(validate(customer).unwrap())
        assert not Entity.is_entity({'name': "Ada"})


class TestValidEntity:
    """Test operations available after validation."""

    def test_equals_compares_identity_only(self):
        a = validate(Customer(Id("c-1"), {'name': "Ada"})).unwrap()
        b = validate(Customer(Id("c-1"), {'name': "Grace"})).unwrap()
        c = validate(Customer(Id("c-2"), {'name': "Ada"})).unwrap()

        assert a.equals(b)
        assert a == b
        assert not a.equals(c)
        assert a.equals(None) is False

    def test_equals_accepts_draft(self):
        a = validate(Customer(Id("c-1"), {'name': "Ada"})).unwrap()
        assert a.equals(Customer(Id("c-1"), {'name': "Grace"}))

    def test_view_is_not_equal_to_draft(self):
        customer = Customer(Id("c-1"), {'name': "Ada"})
        view = validate(customer).unwrap()

        assert view != customer
        assert len({view, validate(customer).unwrap()}) == 1

    def test_get_props_copy_is_frozen_snapshot(self):
        email = Email("ada@example.com")
        customer = validate(Customer(Id("c-1"), {'name': "Ada", 'email': email})).unwrap()

        copy = customer.get_props_copy()

        assert isinstance(copy, MappingProxyType)
        assert set(copy) == {'id', 'created_at', 'updated_at', 'name', 'email'}
        assert copy['email'] is email
        with pytest.raises(TypeError):
            copy['name'] = "Grace"

    def test_to_object_unwraps_nested_objects(self):
        inner = Customer(Id("c-9"), {'name': "Inner"})
        customer = validate(Customer(Id("c-1"), {
            'name': "Ada",
            'email': Email("ada@example.com"),
            'balance': Money({'amount': 3, 'currency': "EUR"}),
            'referrer': inner,
        })).unwrap()

        plain = customer.to_object()

        assert plain['id'] == "c-1"
        assert plain['email'] == "ada@example.com"
        assert dict(plain['balance']) == {'amount': 3, 'currency': "EUR"}
        assert plain['referrer']['id'] == "c-9"
        assert plain['referrer']['name'] == "Inner"

    def test_replace_props_bumps_updated_at(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        customer = Customer(Id("c-1"), {'name': "Ada"}, created_at=created, updated_at=created)

        customer.rename("Grace")

        assert customer.props['name'] == "Grace"
        assert customer.updated_at > created
        assert customer.created_at == created

    def test_view_wraps_same_entity(self):
        customer = Customer(Id("c-1"), {'name': "Ada"})
        view = validate(customer).unwrap()

        assert isinstance(view, ValidEntity)
        assert view.entity is customer
        assert view.id is customer.id
