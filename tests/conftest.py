"""
tests/conftest.py
Shared fixtures for the endpointgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict

import pytest
import yaml

from endpointgen.models import API, Endpoint, EndpointGroup, Param
from endpointgen.types import INT32, STRING, UUID, struct_of


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
API_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "api_example.yaml"


# ---------------------------------------------------------------------------
# Raw declaration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_api_dict() -> Dict[str, Any]:
    """Load the reference api_example.yaml once per session and return as dict."""
    assert API_EXAMPLE_PATH.exists(), (
        f"Reference declaration not found at {API_EXAMPLE_PATH}. "
        "Make sure api_example.yaml is in the project root."
    )
    with open(API_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def api_dict(raw_api_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_api_dict)


@pytest.fixture()
def api_yaml_path(api_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the declaration dict to a temporary YAML file and return its path."""
    path = tmp_path / "api.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(api_dict, fh, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return path


@pytest.fixture()
def minimal_api_dict() -> Dict[str, Any]:
    """Smallest useful declaration: one group, one endpoint, no named types."""
    return {
        "api": {
            "version": "v1",
            "base_path": "/api",
            "package_path": "example.com/minimal",
            "auth": "token",
        },
        "groups": [
            {
                "name": "Items",
                "prefix": "items",
                "endpoints": [
                    {
                        "method": "GET",
                        "path": "/{id}",
                        "name": "Get item",
                        "description": "Fetches one item.",
                        "handler_name": "GetItem",
                        "client_name": "getItem",
                        "path_params": [{"name": "id", "type": "int64"}],
                        "response": {"fields": {"id": "int64", "title": "string"}},
                    }
                ],
            }
        ],
    }


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def api() -> API:
    """An empty API rooted at /api/v1."""
    return API(base_path="/api", version="v1", package_path="example.com/admin")


@pytest.fixture()
def users_group(api: API) -> EndpointGroup:
    return api.group("Users", "users")


@pytest.fixture()
def get_user_endpoint() -> Endpoint:
    """A valid GET endpoint with one path parameter and an anonymous response."""
    return Endpoint(
        name="Get user",
        description="Fetches one user.",
        handler_name="GetUser",
        client_name="getUser",
        path_params=[Param(name="id", type=UUID)],
        response=struct_of([("id", UUID), ("email", STRING)]),
    )


@pytest.fixture()
def list_users_endpoint() -> Endpoint:
    return Endpoint(
        name="List users",
        description="Lists users.",
        handler_name="ListUsers",
        client_name="listUsers",
        query_params=[Param(name="limit", type=INT32)],
    )


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Provide a clean output directory inside tmp_path."""
    out = tmp_path / "generated_output"
    out.mkdir(parents=True, exist_ok=True)
    return out
