"""
tests/test_models.py
Unit tests for endpointgen.models.

Tests cover:
- Group registration: pattern checks, case-insensitive uniqueness and
  the list being left unchanged on rejection
- Endpoint base path computation
- Endpoint registration through the HTTP verb helpers
- Naming configuration defaults
"""

from __future__ import annotations

from typing import List

import pytest
from pydantic import ValidationError as PydanticValidationError

from endpointgen.models import (
    API,
    Auth,
    Endpoint,
    EndpointGroup,
    HTTPMethod,
    NamingConfig,
    Param,
    join_url_path,
)
from endpointgen.types import INT64, STRING, UUID, struct_of
from endpointgen.validators import ValidationError


# ===========================================================================
# API.group
# ===========================================================================


class TestRegisterGroup:
    """Tests for API.group."""

    @pytest.mark.parametrize(
        "name, prefix",
        [("Users", "users"), ("", ""), ("a", "B1"), ("Projects2", "p")],
    )
    def test_valid_patterns_register_and_echo(self, api: API, name: str, prefix: str) -> None:
        group = api.group(name, prefix)
        assert group.name == name
        assert group.prefix == prefix
        assert group.endpoints == []
        assert api.endpoint_groups == [group]

    @pytest.mark.parametrize("bad", ["1abc", "a-b", "Ω", "a b", "_a", "a_b"])
    def test_invalid_name_rejected(self, api: API, bad: str) -> None:
        with pytest.raises(ValidationError) as excinfo:
            api.group(bad, "ok")
        assert excinfo.value.code == "INVALID_GROUP_NAME"
        assert api.endpoint_groups == [], "rejected group must not be appended"

    @pytest.mark.parametrize("bad", ["1abc", "a-b", "Ω", "/users"])
    def test_invalid_prefix_rejected(self, api: API, bad: str) -> None:
        with pytest.raises(ValidationError) as excinfo:
            api.group("Ok", bad)
        assert excinfo.value.code == "INVALID_GROUP_PREFIX"
        assert api.endpoint_groups == []

    def test_trailing_newline_rejected(self, api: API) -> None:
        with pytest.raises(ValidationError):
            api.group("Users\n", "users")

    def test_duplicate_name_is_case_insensitive(self, api: API) -> None:
        api.group("Foo", "foo")
        with pytest.raises(ValidationError) as excinfo:
            api.group("foo", "bar")
        assert excinfo.value.code == "DUPLICATE_GROUP_NAME"
        assert [g.name for g in api.endpoint_groups] == ["Foo"]

    def test_duplicate_prefix_is_case_insensitive(self, api: API) -> None:
        api.group("Foo", "foo")
        with pytest.raises(ValidationError) as excinfo:
            api.group("Bar", "FOO")
        assert excinfo.value.code == "DUPLICATE_GROUP_PREFIX"
        assert len(api.endpoint_groups) == 1

    def test_two_empty_names_collide(self, api: API) -> None:
        api.group("", "a")
        with pytest.raises(ValidationError):
            api.group("", "b")

    def test_registration_order_preserved(self, api: API) -> None:
        names: List[str] = ["Zeta", "Alpha", "Mid"]
        for name in names:
            api.group(name, name.lower())
        assert [g.name for g in api.endpoint_groups] == names


# ===========================================================================
# API.endpoint_base_path
# ===========================================================================


class TestEndpointBasePath:
    @pytest.mark.parametrize(
        "base_path, version, expected",
        [
            ("api", "v1", "/api/v1"),
            ("/api", "v1", "/api/v1"),
            ("/api/", "", "/api"),
            ("", "", "/"),
            ("", "v2", "/v2"),
            ("//api//", "/v1/", "/api/v1"),
            ("/api/v0", "../v1", "/api/v1"),
        ],
    )
    def test_base_path(self, base_path: str, version: str, expected: str) -> None:
        api = API(base_path=base_path, version=version)
        assert api.endpoint_base_path() == expected

    def test_always_absolute(self) -> None:
        for base in ("", "a", "/a", "a/b/"):
            assert API(base_path=base).endpoint_base_path().startswith("/")

    def test_join_url_path(self) -> None:
        assert join_url_path() == ""
        assert join_url_path("", "") == ""
        assert join_url_path("/api/v1", "users", "/{id}") == "/api/v1/users/{id}"
        assert join_url_path("/api/v1/users", "/") == "/api/v1/users"


class TestAPIModel:
    def test_resolved_package_name_from_path(self) -> None:
        api = API(package_path="example.com/private/admin")
        assert api.resolved_package_name == "admin"

    def test_explicit_package_name_wins(self) -> None:
        api = API(package_name="consoleapi", package_path="example.com/admin")
        assert api.resolved_package_name == "consoleapi"

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            API.model_validate({"version": "v1", "unknown": True})

    def test_auth_is_opaque(self) -> None:
        class CookieAuth:
            def is_authenticated(self, request: object, cookie_auth: bool, key_auth: bool) -> object:
                return request

        auth = CookieAuth()
        api = API(auth=auth)
        assert api.auth is auth
        assert isinstance(auth, Auth)


# ===========================================================================
# Endpoint registration
# ===========================================================================


class TestEndpointRegistration:
    def test_get_registers_full_endpoint(
        self, users_group: EndpointGroup, get_user_endpoint: Endpoint
    ) -> None:
        full = users_group.get("/{id}", get_user_endpoint)
        assert full.method == HTTPMethod.GET
        assert full.path == "/{id}"
        assert full.endpoint is get_user_endpoint
        assert users_group.endpoints == [full]

    @pytest.mark.parametrize(
        "verb, method",
        [
            ("post", HTTPMethod.POST),
            ("put", HTTPMethod.PUT),
            ("patch", HTTPMethod.PATCH),
        ],
    )
    def test_body_verbs(self, users_group: EndpointGroup, verb: str, method: HTTPMethod) -> None:
        endpoint = Endpoint(
            name="Update user",
            description="Updates a user.",
            handler_name="UpdateUser",
            client_name="updateUser",
            request=struct_of([("email", STRING)]),
        )
        full = getattr(users_group, verb)("/", endpoint)
        assert full.method == method

    def test_delete(self, users_group: EndpointGroup) -> None:
        endpoint = Endpoint(
            name="Delete user",
            description="Deletes a user.",
            handler_name="DeleteUser",
            client_name="deleteUser",
            path_params=[Param(name="id", type=UUID)],
        )
        assert users_group.delete("/{id}", endpoint).method == HTTPMethod.DELETE

    def test_add_endpoint_by_method_name(
        self, users_group: EndpointGroup, get_user_endpoint: Endpoint
    ) -> None:
        full = users_group.add_endpoint("/{id}", "get", get_user_endpoint)
        assert full.method is HTTPMethod.GET

    def test_add_endpoint_unknown_method(
        self, users_group: EndpointGroup, get_user_endpoint: Endpoint
    ) -> None:
        with pytest.raises(ValidationError) as excinfo:
            users_group.add_endpoint("/{id}", "TRACE", get_user_endpoint)
        assert excinfo.value.code == "INVALID_METHOD"
        assert users_group.endpoints == []

    def test_duplicate_route_leaves_group_unchanged(
        self,
        users_group: EndpointGroup,
        get_user_endpoint: Endpoint,
    ) -> None:
        users_group.get("/{id}", get_user_endpoint)
        clash = get_user_endpoint.model_copy(
            update={"handler_name": "GetUserAgain", "client_name": "getUserAgain"}
        )
        with pytest.raises(ValidationError) as excinfo:
            users_group.get("/{id}", clash)
        assert excinfo.value.code == "DUPLICATE_ROUTE"
        assert len(users_group.endpoints) == 1

    @pytest.mark.parametrize(
        "first, second",
        [
            ("/list", "/list/"),
            ("/list/", "/list"),
            ("/list", "//list"),
            ("", "/"),
            ("/a/../list", "/list"),
        ],
    )
    def test_duplicate_route_after_path_cleaning(
        self,
        users_group: EndpointGroup,
        list_users_endpoint: Endpoint,
        first: str,
        second: str,
    ) -> None:
        users_group.get(first, list_users_endpoint)
        clash = list_users_endpoint.model_copy(
            update={"handler_name": "ListUsersAgain", "client_name": "listUsersAgain"}
        )
        with pytest.raises(ValidationError) as excinfo:
            users_group.get(second, clash)
        assert excinfo.value.code == "DUPLICATE_ROUTE"
        assert excinfo.value.context["route"] == join_url_path("/", second)
        assert [e.path for e in users_group.endpoints] == [first]

    def test_same_path_different_method_allowed(
        self,
        users_group: EndpointGroup,
        get_user_endpoint: Endpoint,
    ) -> None:
        users_group.get("/{id}", get_user_endpoint)
        delete = Endpoint(
            name="Delete user",
            description="Deletes a user.",
            handler_name="DeleteUser",
            client_name="deleteUser",
            path_params=[Param(name="id", type=UUID)],
        )
        users_group.delete("/{id}", delete)
        assert len(users_group.endpoints) == 2

    def test_same_handler_in_other_group_allowed(
        self, api: API, get_user_endpoint: Endpoint
    ) -> None:
        api.group("Users", "users").get("/{id}", get_user_endpoint)
        api.group("Admins", "admins").get("/{id}", get_user_endpoint)
        assert [len(g.endpoints) for g in api.endpoint_groups] == [1, 1]

    def test_invalid_endpoint_not_appended(self, users_group: EndpointGroup) -> None:
        endpoint = Endpoint(
            name="Broken",
            description="",
            handler_name="Broken",
            client_name="broken",
        )
        with pytest.raises(ValidationError):
            users_group.get("/", endpoint)
        assert users_group.endpoints == []


class TestNamingConfig:
    def test_defaults(self) -> None:
        config = NamingConfig()
        assert config.item_suffix == "item"
        assert config.key_suffix == "key"
        assert config.value_suffix == "value"
        assert config.common_types == ["Time", "UUID"]

    def test_empty_suffix_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            NamingConfig(item_suffix="")

    def test_param_requires_descriptor(self) -> None:
        with pytest.raises(PydanticValidationError):
            Param(name="id", type="int64")
        assert Param(name="id", type=INT64).type == INT64
