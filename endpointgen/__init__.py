# File: endpointgen/__init__.py
"""
endpointgen — API Endpoint Metadata & Type Naming
==================================================

Declarative model for versioned HTTP APIs and the machinery that turns it
into the symbol set a code emitter needs: validated endpoint groups, routes,
handler names and deterministic names for every request/response type.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ SymbolResolver │────▶│   ResolvedAPI    │
    │   (cli.py)   │     │ (generator.py) │     │  (to_dict/JSON)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
                    ┌────────────┼────────────┐
                    ▼            ▼            ▼
             ┌──────────┐ ┌───────────┐ ┌───────────┐
             │  models  │ │ registry  │ │  naming   │
             │validators│ │ typelist  │ │  types    │
             └──────────┘ └───────────┘ └───────────┘

Usage::

    # As a library
    from endpointgen import API, Endpoint, SymbolResolver, slice_of, describe

    api = API(base_path="/api", version="v1", package_path="example.com/admin")
    users = api.group("Users", "users")
    users.get("/", Endpoint(
        name="List users",
        description="Lists every user.",
        handler_name="ListUsers",
        client_name="listUsers",
        response=slice_of(describe(User)),
    ))
    resolved = SymbolResolver().resolve(api)

    # From the command line
    python -m endpointgen --declaration api.yaml --output symbols.json

Public API:
    - API / EndpointGroup / Endpoint — Declaration models
    - TypeDescriptor & factories     — Type classifier
    - compound_type_name / with_name — Naming engine
    - TypeRegistry                   — Type declaration naming
    - SymbolResolver / ResolvedAPI   — Resolution orchestrator
    - validate_api                   — Lint entry point
"""

from __future__ import annotations

__version__: str = "0.1.0"

from endpointgen.models import (
    API,
    Auth,
    Endpoint,
    EndpointGroup,
    FullEndpoint,
    HTTPMethod,
    NamingConfig,
    Param,
    join_url_path,
)
from endpointgen.types import (
    ANY,
    BOOL,
    FLOAT32,
    FLOAT64,
    INT,
    INT32,
    INT64,
    STRING,
    TIME,
    UINT8,
    UUID,
    TypeDescriptor,
    TypeKind,
    array_of,
    chan_of,
    get_elementary_type,
    is_nillable_type,
    map_of,
    parse_type_expr,
    pointer_to,
    slice_of,
    struct_of,
)
from endpointgen.naming import capitalize, compound_type_name, uncapitalize, with_name
from endpointgen.typelist import TypeAndName, filter_types, map_to_list
from endpointgen.registry import TypeRegistry
from endpointgen.introspect import describe
from endpointgen.validators import ValidationError, ValidationResult, validate_api
from endpointgen.generator import (
    ResolvedAPI,
    SymbolResolver,
    load_api_file,
    parse_raw_api,
    resolve_file,
)

__all__ = [
    "__version__",
    # Models
    "API",
    "Auth",
    "Endpoint",
    "EndpointGroup",
    "FullEndpoint",
    "HTTPMethod",
    "NamingConfig",
    "Param",
    "join_url_path",
    # Types
    "ANY",
    "BOOL",
    "FLOAT32",
    "FLOAT64",
    "INT",
    "INT32",
    "INT64",
    "STRING",
    "TIME",
    "UINT8",
    "UUID",
    "TypeDescriptor",
    "TypeKind",
    "array_of",
    "chan_of",
    "get_elementary_type",
    "is_nillable_type",
    "map_of",
    "parse_type_expr",
    "pointer_to",
    "slice_of",
    "struct_of",
    # Naming & collections
    "capitalize",
    "uncapitalize",
    "compound_type_name",
    "with_name",
    "TypeAndName",
    "map_to_list",
    "filter_types",
    "TypeRegistry",
    "describe",
    # Validation
    "ValidationError",
    "ValidationResult",
    "validate_api",
    # Resolution
    "ResolvedAPI",
    "SymbolResolver",
    "load_api_file",
    "parse_raw_api",
    "resolve_file",
]
