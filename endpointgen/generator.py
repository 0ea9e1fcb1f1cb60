# File: endpointgen/generator.py
"""
endpointgen - Declaration Loader & Symbol Resolver
===================================================

Connects every phase together:

    Declaration file → API model → Type registry → Resolved symbol table

Workflow::

    1. Load the declaration from JSON/YAML (``load_api_file``).
    2. Build ``API`` + ``NamingConfig`` (``parse_raw_api``).  Groups and
       endpoints are registered through the model, so every
       construction-time check runs here.
    3. ``SymbolResolver.resolve`` walks groups and endpoints in order,
       registers request/response/parameter types, and names everything.
    4. The resulting ``ResolvedAPI`` is handed to the emission stage, or
       dumped as JSON by the CLI.

Declaration format (YAML)::

    api:
      version: v1
      base_path: /api
      package_path: example.com/admin
    config:
      item_suffix: item
    types:
      User:
        fields:
          id: UUID
          email: string
    groups:
      - name: Users
        prefix: users
        endpoints:
          - method: GET
            path: /{id}
            name: Get user
            description: Fetch one user.
            handler_name: GetUser
            client_name: getUser
            path_params: [{name: id, type: UUID}]
            response: User

Error handling strategy:
    - Declaration mistakes raise ``ValidationError`` at the call that
      introduces them; nothing is resolved from a half-built API.
    - File and syntax problems, and sections of the wrong shape (a list
      where a mapping belongs, a number where a path belongs), raise
      ``FileNotFoundError`` / ``ValueError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from endpointgen.models import (
    API,
    Endpoint,
    EndpointGroup,
    FullEndpoint,
    NamingConfig,
    Param,
    join_url_path,
)
from endpointgen.naming import capitalize, compound_type_name, uncapitalize, with_name
from endpointgen.registry import TypeRegistry
from endpointgen.types import (
    TypeDescriptor,
    TypeKind,
    is_nillable_type,
    parse_type_expr,
    struct_of,
)
from endpointgen.utils import Timer
from endpointgen.validators import ValidationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.generator")


# ---------------------------------------------------------------------------
# Resolved symbol table
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ResolvedParam:
    name: str
    type: str


@dataclass(slots=True)
class ResolvedField:
    name: str
    type: str
    nillable: bool


@dataclass(slots=True)
class ResolvedType:
    """A type declaration the emission stage has to produce."""

    name: str
    kind: str
    underlying: str = ""
    fields: List[ResolvedField] = field(default_factory=list)


@dataclass(slots=True)
class ResolvedEndpoint:
    name: str
    description: str
    method: str
    path: str
    handler_name: str
    client_name: str
    request_type: str = ""
    request_nillable: bool = False
    response_type: str = ""
    response_nillable: bool = False
    path_params: List[ResolvedParam] = field(default_factory=list)
    query_params: List[ResolvedParam] = field(default_factory=list)
    no_cookie_auth: bool = False
    no_api_auth: bool = False
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ResolvedGroup:
    name: str
    prefix: str
    service_name: str
    handler_name: str
    route_prefix: str
    endpoints: List[ResolvedEndpoint] = field(default_factory=list)


@dataclass(slots=True)
class RouteEntry:
    method: str
    path: str
    group: str
    handler_name: str


@dataclass(slots=True)
class ResolvedAPI:
    """
    Final symbol set for one API, consumed by the emission templates.

    ``to_dict`` is stable: identical declarations produce identical output.
    ``auth`` is carried through untouched and left out of ``to_dict``.
    """

    package_name: str
    package_path: str
    version: str
    description: str
    base_path: str
    auth: Any = None
    groups: List[ResolvedGroup] = field(default_factory=list)
    types: List[ResolvedType] = field(default_factory=list)
    routes: List[RouteEntry] = field(default_factory=list)

    def type_named(self, name: str) -> Optional[ResolvedType]:
        for t in self.types:
            if t.name == name:
                return t
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_name": self.package_name,
            "package_path": self.package_path,
            "version": self.version,
            "description": self.description,
            "base_path": self.base_path,
            "groups": [_group_dict(g) for g in self.groups],
            "types": [
                {
                    "name": t.name,
                    "kind": t.kind,
                    "underlying": t.underlying,
                    "fields": [
                        {"name": f.name, "type": f.type, "nillable": f.nillable}
                        for f in t.fields
                    ],
                }
                for t in self.types
            ],
            "routes": [
                {
                    "method": r.method,
                    "path": r.path,
                    "group": r.group,
                    "handler_name": r.handler_name,
                }
                for r in self.routes
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    def summary(self) -> str:
        endpoint_count: int = sum(len(g.endpoints) for g in self.groups)
        lines: List[str] = [
            f"{'=' * 50}",
            "  endpointgen — Resolution Report",
            f"{'=' * 50}",
            f"  Package:    {self.package_name or '-'}",
            f"  Base path:  {self.base_path}",
            f"  Groups:     {len(self.groups)}",
            f"  Endpoints:  {endpoint_count}",
            f"  Types:      {len(self.types)}",
            f"{'─' * 50}",
        ]
        for route in self.routes:
            lines.append(f"    {route.method:<7s} {route.path}  → {route.handler_name}")
        lines.append(f"{'=' * 50}")
        return "\n".join(lines)


def _params_dict(params: List[ResolvedParam]) -> List[Dict[str, str]]:
    return [{"name": p.name, "type": p.type} for p in params]


def _group_dict(group: ResolvedGroup) -> Dict[str, Any]:
    return {
        "name": group.name,
        "prefix": group.prefix,
        "service_name": group.service_name,
        "handler_name": group.handler_name,
        "route_prefix": group.route_prefix,
        "endpoints": [
            {
                "name": e.name,
                "description": e.description,
                "method": e.method,
                "path": e.path,
                "handler_name": e.handler_name,
                "client_name": e.client_name,
                "request_type": e.request_type,
                "request_nillable": e.request_nillable,
                "response_type": e.response_type,
                "response_nillable": e.response_nillable,
                "path_params": _params_dict(e.path_params),
                "query_params": _params_dict(e.query_params),
                "no_cookie_auth": e.no_cookie_auth,
                "no_api_auth": e.no_api_auth,
                "settings": e.settings,
            }
            for e in group.endpoints
        ],
    }


# ---------------------------------------------------------------------------
# Declaration loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_api_file(path: Path) -> Dict[str, Any]:
    """
    Load an API declaration file (JSON or YAML).

    Dispatches on the file extension; unknown extensions are tried as JSON
    first, then YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Declaration file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Declaration path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def _expect_mapping(value: Any, context: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(
            f"Invalid declaration at {context}: expected a mapping, "
            f"got {type(value).__name__}"
        )
    return value


def _expect_list(value: Any, context: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(
            f"Invalid declaration at {context}: expected a list, "
            f"got {type(value).__name__}"
        )
    return value


def _expect_str(value: Any, context: str) -> str:
    if not isinstance(value, str):
        raise ValueError(
            f"Invalid declaration at {context}: expected a string, "
            f"got {type(value).__name__}"
        )
    return value


class _TypeTable:
    """Named types of a declaration, resolved on first use."""

    __slots__ = ("_raw", "_resolved", "_resolving")

    def __init__(self, raw: Mapping[str, Any]) -> None:
        self._raw: Dict[str, Any] = dict(raw)
        self._resolved: Dict[str, TypeDescriptor] = {}
        self._resolving: Set[str] = set()

    def resolve_all(self) -> Dict[str, TypeDescriptor]:
        for name in self._raw:
            self.lookup(_expect_str(name, "types"))
        return dict(self._resolved)

    def lookup(self, name: str) -> Optional[TypeDescriptor]:
        if name in self._resolved:
            return self._resolved[name]
        if name not in self._raw:
            return None
        if name in self._resolving:
            raise ValidationError(
                "RECURSIVE_TYPE",
                f"type {name!r} refers to itself; recursive types are not supported",
                {"type": name},
            )

        self._resolving.add(name)
        try:
            t: TypeDescriptor = with_name(self.build(self._raw[name], name), name)
        finally:
            self._resolving.discard(name)
        self._resolved[name] = t
        return t

    def build(self, spec: Any, context: str) -> TypeDescriptor:
        """Build a descriptor from a type spelling or a struct mapping."""
        if isinstance(spec, str):
            try:
                return parse_type_expr(spec, resolve=self.lookup)
            except ValidationError:
                raise
            except ValueError as exc:
                raise ValidationError(
                    "INVALID_TYPE_EXPR",
                    f"{context}: {exc}",
                    {"where": context, "expr": spec},
                ) from exc

        if isinstance(spec, dict):
            kind: str = spec.get("kind", TypeKind.STRUCT.value)
            if kind != TypeKind.STRUCT.value:
                raise ValidationError(
                    "INVALID_TYPE_SPEC",
                    f"{context}: only struct types can be declared as mappings, got kind {kind!r}",
                    {"where": context},
                )
            raw_fields: Any = spec.get("fields") or []
            pairs: List[Tuple[Any, Any]]
            if isinstance(raw_fields, dict):
                pairs = list(raw_fields.items())
            else:
                pairs = []
                for i, f in enumerate(_expect_list(raw_fields, f"{context}.fields")):
                    f = _expect_mapping(f, f"{context}.fields[{i}]")
                    pairs.append((f.get("name", ""), f.get("type")))
            fields: List[Tuple[str, TypeDescriptor]] = [
                (
                    _expect_str(n, f"{context}.fields"),
                    self.build(ft, f"{context}.{n}"),
                )
                for n, ft in pairs
            ]
            struct_name: str = _expect_str(spec.get("name", ""), f"{context}.name")
            try:
                return struct_of(fields, name=struct_name)
            except ValidationError:
                raise
            except ValueError as exc:
                raise ValidationError(
                    "INVALID_TYPE_SPEC", f"{context}: {exc}", {"where": context}
                ) from exc

        raise ValidationError(
            "INVALID_TYPE_SPEC",
            f"{context}: expected a type expression or a struct mapping, "
            f"got {type(spec).__name__}",
            {"where": context},
        )


def _parse_params(
    table: _TypeTable,
    raw: Any,
    context: str,
) -> List[Param]:
    params: List[Param] = []
    for index, item in enumerate(_expect_list(raw, context)):
        p: Dict[str, Any] = _expect_mapping(item, f"{context}[{index}]")
        params.append(
            Param(
                name=p.get("name", ""),
                type=table.build(p.get("type"), f"{context}.{p.get('name', '')}"),
            )
        )
    return params


def _parse_endpoint(table: _TypeTable, raw: Dict[str, Any], context: str) -> Endpoint:
    request: Optional[TypeDescriptor] = None
    response: Optional[TypeDescriptor] = None
    if raw.get("request") is not None:
        request = table.build(raw["request"], f"{context}.request")
    if raw.get("response") is not None:
        response = table.build(raw["response"], f"{context}.response")

    return Endpoint(
        name=raw.get("name", ""),
        description=raw.get("description", ""),
        handler_name=raw.get("handler_name", ""),
        client_name=raw.get("client_name", ""),
        request=request,
        response=response,
        path_params=_parse_params(table, raw.get("path_params"), f"{context}.path_params"),
        query_params=_parse_params(table, raw.get("query_params"), f"{context}.query_params"),
        no_cookie_auth=raw.get("no_cookie_auth", False),
        no_api_auth=raw.get("no_api_auth", False),
        settings=raw.get("settings") or {},
    )


def parse_raw_api(raw: Dict[str, Any]) -> Tuple[API, NamingConfig]:
    """
    Parse a raw dictionary (from JSON/YAML) into a fully registered API.

    Expected top-level keys: ``api`` (metadata), ``config`` (naming
    configuration, optional), ``types`` (named types, optional) and
    ``groups``.

    Raises:
        ValidationError: The declaration is invalid.
        ValueError: The metadata or configuration do not fit the models, or
            a section does not have the expected shape.
    """
    raw = _expect_mapping(raw, "top level")
    try:
        config: NamingConfig = NamingConfig.model_validate(raw.get("config") or {})
    except PydanticValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    try:
        api: API = API.model_validate(raw.get("api") or {})
    except PydanticValidationError as exc:
        raise ValueError(f"API metadata validation failed: {exc}") from exc

    table: _TypeTable = _TypeTable(_expect_mapping(raw.get("types") or {}, "types"))
    named_types: Dict[str, TypeDescriptor] = table.resolve_all()
    logger.info("Declaration defines %d named types.", len(named_types))

    for g_index, item in enumerate(_expect_list(raw.get("groups"), "groups")):
        group_data: Dict[str, Any] = _expect_mapping(item, f"groups[{g_index}]")
        group: EndpointGroup = api.group(
            _expect_str(group_data.get("name", ""), f"groups[{g_index}].name"),
            _expect_str(group_data.get("prefix", ""), f"groups[{g_index}].prefix"),
        )
        raw_endpoints: List[Any] = _expect_list(
            group_data.get("endpoints"), f"groups[{g_index}].endpoints"
        )
        for index, ep_item in enumerate(raw_endpoints):
            context: str = f"groups.{group.name or '<default>'}.endpoints[{index}]"
            ep_data: Dict[str, Any] = _expect_mapping(ep_item, context)
            try:
                endpoint: Endpoint = _parse_endpoint(table, ep_data, context)
            except PydanticValidationError as exc:
                raise ValueError(f"{context}: {exc}") from exc
            group.add_endpoint(
                _expect_str(ep_data.get("path", ""), f"{context}.path"),
                _expect_str(ep_data.get("method", "GET"), f"{context}.method"),
                endpoint,
            )

    return api, config


# ---------------------------------------------------------------------------
# SymbolResolver (resolution orchestrator)
# ---------------------------------------------------------------------------


class SymbolResolver:
    """
    Turns a declared ``API`` into a ``ResolvedAPI``.

    Usage::

        resolver = SymbolResolver(NamingConfig())
        resolved = resolver.resolve(api)
        print(resolved.summary())

    Anonymous request and response types are named after the group and the
    handler: ``<Group><Handler>Request`` / ``<Group><Handler>Response``.
    The resolver is reusable and keeps no state between calls.
    """

    def __init__(self, config: Optional[NamingConfig] = None) -> None:
        self._config: NamingConfig = config or NamingConfig()

    def _type_base(self, group: EndpointGroup, full: FullEndpoint) -> str:
        return compound_type_name(capitalize(group.name), full.endpoint.handler_name)

    def _register(self, api: API, registry: TypeRegistry) -> None:
        for group in api.endpoint_groups:
            for full in group.endpoints:
                ep: Endpoint = full.endpoint
                base: str = self._type_base(group, full)
                if ep.request is not None:
                    registry.register_as(
                        ep.request, compound_type_name(base, self._config.request_suffix)
                    )
                if ep.response is not None:
                    registry.register_as(
                        ep.response, compound_type_name(base, self._config.response_suffix)
                    )
                for param in [*ep.path_params, *ep.query_params]:
                    registry.register_as(param.type, compound_type_name(base, param.name))

    def resolve(self, api: API) -> ResolvedAPI:
        """
        Resolve every group, endpoint and type of *api*.

        Raises:
            ValidationError: Two different types claim the same name.
        """
        with Timer("resolve") as timer:
            registry: TypeRegistry = TypeRegistry(self._config)
            self._register(api, registry)

            base_path: str = api.endpoint_base_path()
            resolved: ResolvedAPI = ResolvedAPI(
                package_name=api.resolved_package_name,
                package_path=api.package_path,
                version=api.version,
                description=api.description,
                base_path=base_path,
                auth=api.auth,
            )

            for group in api.endpoint_groups:
                rgroup: ResolvedGroup = self._resolve_group(group, base_path, registry)
                resolved.groups.append(rgroup)
                resolved.routes.extend(
                    RouteEntry(
                        method=e.method,
                        path=e.path,
                        group=group.name,
                        handler_name=e.handler_name,
                    )
                    for e in rgroup.endpoints
                )

            resolved.types = [self._resolve_type(tn.type, tn.name, registry) for tn in registry.sorted()]

        logger.info(
            "Resolved %d groups, %d routes and %d types in %.3fs.",
            len(resolved.groups),
            len(resolved.routes),
            len(resolved.types),
            timer.elapsed,
        )
        return resolved

    def _resolve_group(
        self,
        group: EndpointGroup,
        base_path: str,
        registry: TypeRegistry,
    ) -> ResolvedGroup:
        route_prefix: str = "/" + join_url_path(base_path, group.prefix).lstrip("/")
        rgroup: ResolvedGroup = ResolvedGroup(
            name=group.name,
            prefix=group.prefix,
            service_name=compound_type_name(capitalize(group.name), self._config.service_suffix),
            handler_name=compound_type_name(uncapitalize(group.name), self._config.handler_suffix),
            route_prefix=route_prefix,
        )

        for full in group.endpoints:
            ep: Endpoint = full.endpoint
            rendpoint: ResolvedEndpoint = ResolvedEndpoint(
                name=ep.name,
                description=ep.description,
                method=full.method.value,
                path="/" + join_url_path(route_prefix, full.path).lstrip("/"),
                handler_name=ep.handler_name,
                client_name=ep.client_name,
                path_params=[ResolvedParam(p.name, registry.reference(p.type)) for p in ep.path_params],
                query_params=[ResolvedParam(p.name, registry.reference(p.type)) for p in ep.query_params],
                no_cookie_auth=ep.no_cookie_auth,
                no_api_auth=ep.no_api_auth,
                settings=dict(ep.settings),
            )
            if ep.request is not None:
                rendpoint.request_type = registry.reference(ep.request)
                rendpoint.request_nillable = is_nillable_type(ep.request)
            if ep.response is not None:
                rendpoint.response_type = registry.reference(ep.response)
                rendpoint.response_nillable = is_nillable_type(ep.response)
            rgroup.endpoints.append(rendpoint)

        return rgroup

    def _resolve_type(
        self,
        t: TypeDescriptor,
        name: str,
        registry: TypeRegistry,
    ) -> ResolvedType:
        if t.kind == TypeKind.STRUCT:
            return ResolvedType(
                name=name,
                kind=t.kind.value,
                fields=[
                    ResolvedField(
                        name=f.name,
                        type=registry.reference(f.type),
                        nillable=is_nillable_type(f.type),
                    )
                    for f in t.fields
                ],
            )
        return ResolvedType(
            name=name,
            kind=t.kind.value,
            underlying=registry.reference(with_name(t, "")),
        )


def resolve_file(path: Path) -> ResolvedAPI:
    """Load, build and resolve a declaration file in one call."""
    api, config = parse_raw_api(load_api_file(path))
    return SymbolResolver(config).resolve(api)


__all__: List[str] = [
    "ResolvedParam",
    "ResolvedField",
    "ResolvedType",
    "ResolvedEndpoint",
    "ResolvedGroup",
    "RouteEntry",
    "ResolvedAPI",
    "load_api_file",
    "parse_raw_api",
    "SymbolResolver",
    "resolve_file",
]
