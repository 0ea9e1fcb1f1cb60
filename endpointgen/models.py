# File: endpointgen/models.py
"""
endpointgen - API Metadata Models
==================================
Pydantic V2 models an API author uses to declare an API: the ``API`` itself,
its ordered ``EndpointGroup`` list, and the endpoints registered on each
group.  These models are the single source of truth for the resolution
pipeline: Declaration → Validation → Symbol Resolution.

Lifecycle: an ``API`` is built once, groups are added only through
``API.group``, endpoints only through the HTTP-verb methods of
``EndpointGroup``.  Every registration validates first and appends last, so
a rejected call leaves the model unchanged.  Registration is not safe to run
concurrently on the same ``API``; finish the declaration before handing it
to other threads.
"""

from __future__ import annotations

import logging
import posixpath
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, computed_field

from endpointgen.types import TypeDescriptor
from endpointgen.validators import (
    ValidationError,
    check_endpoint,
    check_endpoint_unique,
    check_group,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.models")


class HTTPMethod(str, Enum):
    """HTTP verbs an endpoint can be registered under."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@runtime_checkable
class Auth(Protocol):
    """
    Authorization capability attached to an API.

    The resolver never calls it; it is handed through to the emission stage
    as it is.
    """

    def is_authenticated(
        self,
        request: Any,
        cookie_auth: bool,
        key_auth: bool,
    ) -> Any: ...


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

_MULTI_SLASH_RE: re.Pattern[str] = re.compile(r"/{2,}")


def join_url_path(*elems: str) -> str:
    """
    Join path elements with ``/`` and clean the result.

    Empty elements are ignored, repeated separators collapse, ``.`` and
    ``..`` are resolved and the trailing separator is dropped.  Returns ``""``
    when every element is empty.
    """
    joined: str = "/".join(e for e in elems if e)
    if not joined:
        return ""
    return posixpath.normpath(_MULTI_SLASH_RE.sub("/", joined))


# ---------------------------------------------------------------------------
# Naming configuration
# ---------------------------------------------------------------------------


class NamingConfig(BaseModel):
    """Suffixes and exclusions used when naming generated symbols."""

    model_config = _SHARED_CONFIG

    request_suffix: str = Field(default="request", min_length=1)
    response_suffix: str = Field(default="response", min_length=1)
    item_suffix: str = Field(
        default="item",
        min_length=1,
        description="Appended for every sequence layer around an anonymous type.",
    )
    key_suffix: str = Field(default="key", min_length=1)
    value_suffix: str = Field(default="value", min_length=1)
    service_suffix: str = Field(default="service", min_length=1)
    handler_suffix: str = Field(default="handler", min_length=1)
    common_types: List[str] = Field(
        default_factory=lambda: ["Time", "UUID"],
        description="Named types provided by a runtime library; never declared.",
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class Param(BaseModel):
    """A path or query parameter."""

    model_config = _SHARED_CONFIG

    name: str
    type: InstanceOf[TypeDescriptor]


class Endpoint(BaseModel):
    """
    One API operation, before it is bound to a path and method.

    ``handler_name`` is the exported server-side symbol (``GetUser``),
    ``client_name`` the client function symbol (``getUser``).  Both are
    checked when the endpoint is registered on a group.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(default="", description="Short human-readable name.")
    description: str = Field(default="", description="What the endpoint does.")
    handler_name: str = Field(default="")
    client_name: str = Field(default="")
    request: Optional[InstanceOf[TypeDescriptor]] = None
    response: Optional[InstanceOf[TypeDescriptor]] = None
    path_params: List[Param] = Field(default_factory=list)
    query_params: List[Param] = Field(default_factory=list)
    no_cookie_auth: bool = Field(default=False, description="Skip cookie authentication.")
    no_api_auth: bool = Field(default=False, description="Skip API-key authentication.")
    settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form options handed through to emission.",
    )


class FullEndpoint(BaseModel):
    """An endpoint bound to a route path and HTTP method inside a group."""

    model_config = _SHARED_CONFIG

    path: str
    method: HTTPMethod
    endpoint: Endpoint

    def __repr__(self) -> str:
        return f"<FullEndpoint {self.method.value} {self.path} → {self.endpoint.handler_name}>"


class EndpointGroup(BaseModel):
    """
    A named bucket of endpoints sharing a route prefix.

    Create groups with ``API.group``; constructing one directly skips the
    name/prefix checks.
    """

    model_config = _SHARED_CONFIG

    name: str
    prefix: str
    endpoints: List[FullEndpoint] = Field(default_factory=list)

    def get(self, path: str, endpoint: Endpoint) -> FullEndpoint:
        return self._add_endpoint(path, HTTPMethod.GET, endpoint)

    def post(self, path: str, endpoint: Endpoint) -> FullEndpoint:
        return self._add_endpoint(path, HTTPMethod.POST, endpoint)

    def put(self, path: str, endpoint: Endpoint) -> FullEndpoint:
        return self._add_endpoint(path, HTTPMethod.PUT, endpoint)

    def patch(self, path: str, endpoint: Endpoint) -> FullEndpoint:
        return self._add_endpoint(path, HTTPMethod.PATCH, endpoint)

    def delete(self, path: str, endpoint: Endpoint) -> FullEndpoint:
        return self._add_endpoint(path, HTTPMethod.DELETE, endpoint)

    def add_endpoint(self, path: str, method: str, endpoint: Endpoint) -> FullEndpoint:
        """Register *endpoint* under a method given by name (``"get"``, ``"POST"``...)."""
        try:
            verb: HTTPMethod = HTTPMethod(method.upper())
        except ValueError:
            raise ValidationError(
                "INVALID_METHOD",
                f"unsupported HTTP method {method!r}",
                {"method": method},
            ) from None
        return self._add_endpoint(path, verb, endpoint)

    def _add_endpoint(self, path: str, method: HTTPMethod, endpoint: Endpoint) -> FullEndpoint:
        check_endpoint(path, method.value, endpoint)
        check_endpoint_unique(path, method, endpoint, self.endpoints)

        full: FullEndpoint = FullEndpoint(path=path, method=method, endpoint=endpoint)
        self.endpoints.append(full)
        logger.debug("Group '%s': registered %r.", self.name, full)
        return full

    def __repr__(self) -> str:
        return f"<EndpointGroup {self.name!r} prefix={self.prefix!r} ({len(self.endpoints)} endpoints)>"


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


class API(BaseModel):
    """
    One versioned, independently generated API surface.

    ``version`` is appended to ``base_path``: with ``base_path="/api"`` and
    ``version="v1"`` every endpoint path begins with ``/api/v1``.  An empty
    version does not appear in the paths.  ``base_path`` does not need a
    leading ``/``.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    version: str = Field(default="", description="API version path segment.")
    description: str = Field(default="")
    package_name: str = Field(
        default="",
        description="Package name for the generated code (defaults to the last "
        "segment of package_path).",
    )
    package_path: str = Field(
        default="",
        description="Import path of the package that will use the generated code.",
    )
    base_path: str = Field(default="", description="Base path for all endpoints, e.g. '/api'.")
    auth: Optional[Any] = Field(default=None, description="Opaque authorization capability.")
    endpoint_groups: List[EndpointGroup] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def resolved_package_name(self) -> str:
        if self.package_name:
            return self.package_name
        return self.package_path.rstrip("/").rsplit("/", 1)[-1]

    def group(self, name: str, prefix: str) -> EndpointGroup:
        """
        Add a new endpoint group.

        *name* and *prefix* must match ``^([A-Za-z][0-9A-Za-z]*)?$`` and be
        case-insensitively unique among the groups of this API.

        Raises:
            ValidationError: the group list is left unchanged.
        """
        check_group(name, prefix, self.endpoint_groups)

        group: EndpointGroup = EndpointGroup(name=name, prefix=prefix)
        self.endpoint_groups.append(group)
        logger.debug("API: registered group %r.", group)
        return group

    def endpoint_base_path(self) -> str:
        """Absolute path every endpoint of this API starts with."""
        return "/" + join_url_path(self.base_path, self.version).lstrip("/")

    def __repr__(self) -> str:
        return (
            f"<API {self.endpoint_base_path()} "
            f"({len(self.endpoint_groups)} groups)>"
        )


__all__: List[str] = [
    "HTTPMethod",
    "Auth",
    "NamingConfig",
    "Param",
    "Endpoint",
    "FullEndpoint",
    "EndpointGroup",
    "API",
    "join_url_path",
]

logger.debug("endpointgen.models loaded — %d public symbols.", len(__all__))
