"""
tests/test_registry.py
Unit tests for endpointgen.registry.TypeRegistry.

Tests cover:
- Names derived for anonymous structs through sequence, pointer and map
  layers and through struct fields
- Named types, predeclared scalars and common library types
- Collision detection
- Deterministic ordering of the declaration list
"""

from __future__ import annotations

from typing import Dict, List

import pytest

from endpointgen.models import NamingConfig
from endpointgen.registry import TypeRegistry, register_all
from endpointgen.types import (
    INT,
    STRING,
    TIME,
    UUID,
    TypeDescriptor,
    TypeKind,
    array_of,
    chan_of,
    map_of,
    pointer_to,
    scalar,
    slice_of,
    struct_of,
)
from endpointgen.validators import ValidationError


ADDRESS: TypeDescriptor = struct_of([("street", STRING), ("city", STRING)])
USER: TypeDescriptor = struct_of(
    [("id", UUID), ("created_at", TIME), ("address", ADDRESS)],
    name="User",
)


def _names(registry: TypeRegistry) -> List[str]:
    return [tn.name for tn in registry.sorted()]


class TestAnonymousNaming:
    def test_struct_takes_the_hint(self) -> None:
        registry = TypeRegistry()
        registry.register_as(ADDRESS, "GetAddressResponse")
        assert registry.all() == {ADDRESS: "GetAddressResponse"}

    @pytest.mark.parametrize(
        "wrapped, expected",
        [
            (slice_of(ADDRESS), "ResponseItem"),
            (array_of(ADDRESS, 2), "ResponseItem"),
            (chan_of(ADDRESS), "ResponseItem"),
            (pointer_to(ADDRESS), "Response"),
            (slice_of(slice_of(ADDRESS)), "ResponseItemItem"),
            (slice_of(pointer_to(ADDRESS)), "ResponseItem"),
            (map_of(STRING, ADDRESS), "ResponseValue"),
        ],
    )
    def test_wrapper_layers(self, wrapped: TypeDescriptor, expected: str) -> None:
        registry = TypeRegistry()
        registry.register_as(wrapped, "Response")
        assert registry.name_of(ADDRESS) == expected

    def test_map_key(self) -> None:
        key = struct_of([("a", INT)])
        registry = TypeRegistry()
        registry.register_as(map_of(key, STRING), "Index")
        assert registry.name_of(key) == "IndexKey"

    def test_field_names_are_appended(self) -> None:
        outer = struct_of([("address", ADDRESS), ("history", slice_of(ADDRESS))])
        registry = TypeRegistry()
        registry.register_as(outer, "GetUserResponse")
        assert registry.name_of(outer) == "GetUserResponse"
        assert registry.name_of(ADDRESS) == "GetUserResponseAddress", (
            "the first position an anonymous struct is reached at names it"
        )

    def test_configured_suffixes(self) -> None:
        registry = TypeRegistry(NamingConfig(item_suffix="elem"))
        registry.register_as(slice_of(ADDRESS), "List")
        assert registry.name_of(ADDRESS) == "ListElem"

    def test_empty_hint_rejected(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            TypeRegistry().register_as(ADDRESS, "")
        assert excinfo.value.code == "EMPTY_TYPE_NAME"

    def test_register_anonymous_without_hint_rejected(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            TypeRegistry().register(slice_of(ADDRESS))
        assert excinfo.value.code == "ANONYMOUS_TYPE"

    @pytest.mark.parametrize(
        "root",
        [
            map_of(STRING, ADDRESS),
            map_of(ADDRESS, STRING),
            pointer_to(map_of(STRING, slice_of(ADDRESS))),
        ],
    )
    def test_register_rejects_nested_anonymous_struct_immediately(
        self, root: TypeDescriptor
    ) -> None:
        registry = TypeRegistry()
        with pytest.raises(ValidationError) as excinfo:
            registry.register(root)
        assert excinfo.value.code == "ANONYMOUS_TYPE"
        assert len(registry) == 0

    def test_register_accepts_anonymous_struct_behind_named_type(self) -> None:
        registry = TypeRegistry()
        registry.register(map_of(STRING, USER))
        assert _names(registry) == ["User", "UserAddress"]


class TestNamedTypes:
    def test_named_struct_keeps_its_name(self) -> None:
        registry = TypeRegistry()
        registry.register_as(slice_of(USER), "ListUsersResponse")
        assert registry.all() == {USER: "User", ADDRESS: "UserAddress"}

    def test_register_named_type(self) -> None:
        registry = TypeRegistry()
        registry.register(USER)
        assert _names(registry) == ["User", "UserAddress"]

    def test_predeclared_and_common_types_are_not_declared(self) -> None:
        registry = TypeRegistry()
        registry.register_as(struct_of([("a", INT), ("b", UUID), ("c", TIME)]), "Row")
        assert _names(registry) == ["Row"]

    def test_common_types_are_configurable(self) -> None:
        email = scalar(TypeKind.STRING, "Email")
        row = struct_of([("email", email)])

        default = TypeRegistry()
        default.register_as(row, "Row")
        assert _names(default) == ["Email", "Row"]

        configured = TypeRegistry(NamingConfig(common_types=["Time", "UUID", "Email"]))
        configured.register_as(row, "Row")
        assert _names(configured) == ["Row"]

    def test_named_scalar_is_declared(self) -> None:
        email = scalar(TypeKind.STRING, "Email")
        registry = TypeRegistry()
        registry.register_as(struct_of([("email", email)]), "Contact")
        assert registry.name_of(email) == "Email"

    def test_named_container_names_its_parts(self) -> None:
        users = slice_of(ADDRESS)
        named = TypeDescriptor(kind=users.kind, name="Addresses", elem=users.elem)
        registry = TypeRegistry()
        registry.register(named)
        assert registry.all() == {named: "Addresses", ADDRESS: "AddressesItem"}


class TestCollisions:
    def test_two_types_one_name(self) -> None:
        registry = TypeRegistry()
        registry.register_as(struct_of([("a", INT)]), "Thing")
        registry.register_as(struct_of([("b", INT)]), "Thing")
        with pytest.raises(ValidationError) as excinfo:
            registry.all()
        assert excinfo.value.code == "DUPLICATE_TYPE_NAME"

    def test_anonymous_collides_with_named(self) -> None:
        registry = TypeRegistry()
        registry.register(USER)
        registry.register_as(struct_of([("x", INT)]), "User")
        with pytest.raises(ValidationError):
            registry.sorted()

    def test_same_type_twice_is_fine(self) -> None:
        registry = TypeRegistry()
        registry.register_as(ADDRESS, "Address")
        registry.register_as(slice_of(ADDRESS), "Other")
        assert registry.all() == {ADDRESS: "Address"}


class TestOrderingAndReferences:
    def test_sorted_is_deterministic(self) -> None:
        roots = [
            (struct_of([("z", INT)]), "Zed"),
            (slice_of(struct_of([("a", INT)])), "Alpha"),
            (USER, ""),
        ]
        first = register_all(TypeRegistry(), roots).sorted()
        second = register_all(TypeRegistry(), list(reversed(roots))).sorted()
        assert [tn.name for tn in first] == ["AlphaItem", "User", "UserAddress", "Zed"]
        assert first == second

    def test_sorted_types_report_their_name(self) -> None:
        registry = TypeRegistry()
        registry.register_as(ADDRESS, "Home")
        (tn,) = registry.sorted()
        assert tn.type.name == "Home"
        assert tn.type.fields == ADDRESS.fields

    def test_structs_filter(self) -> None:
        email = scalar(TypeKind.STRING, "Email")
        registry = TypeRegistry()
        registry.register_as(struct_of([("email", email)]), "Contact")
        assert [tn.name for tn in registry.structs()] == ["Contact"]
        assert len(registry) == 2

    def test_reference(self) -> None:
        registry = TypeRegistry()
        registry.register_as(slice_of(pointer_to(ADDRESS)), "GetUserResponse")
        assert registry.reference(slice_of(pointer_to(ADDRESS))) == "[]*GetUserResponseItem"
        assert registry.reference(map_of(STRING, UUID)) == "map[string]UUID"

    def test_registering_again_rewalks(self) -> None:
        registry = TypeRegistry()
        registry.register_as(ADDRESS, "Home")
        assert len(registry) == 1
        registry.register(USER)
        names: Dict[TypeDescriptor, str] = registry.all()
        assert names[USER] == "User"
        assert names[ADDRESS] == "Home"
