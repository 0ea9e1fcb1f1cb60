# File: endpointgen/validators.py
"""
endpointgen - Declaration Validators
=====================================
Two layers of checking for API declarations:

1. **Construction-time checks** (``check_group``, ``check_endpoint``,
   ``check_endpoint_unique``).  They run inside the mutating calls of
   ``API`` / ``EndpointGroup`` *before* anything is appended and raise
   ``ValidationError`` on the first problem.  A failed call therefore
   never leaves a half-registered group or endpoint behind.

2. **Lint pass** (``validate_api``).  Runs over a finished ``API`` and
   collects non-fatal findings into a ``ValidationResult`` — things that are
   legal but probably not what the author meant.

Usage by downstream modules:
    from endpointgen.validators import ValidationError, validate_api
    report = validate_api(api)
    if not report.is_valid:
        raise SystemExit(report.format_report())
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional, Set

from endpointgen.types import (
    SCALAR_KINDS,
    TypeDescriptor,
    TypeKind,
    get_elementary_type,
    is_nillable_type,
)

if TYPE_CHECKING:
    from endpointgen.models import API, Endpoint, EndpointGroup, FullEndpoint, Param

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.validators")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ValidationError(ValueError):
    """
    Raised when a declaration is invalid.

    These are author errors: fix the declaration, re-running will not help.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": self.context}


class Finding:
    """Lightweight lint finding (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``Finding`` instances produced by ``validate_api``."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[Finding] = []

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(Finding("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(Finding("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self._items if f.is_error]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self._items if not f.is_error]

    @property
    def is_valid(self) -> bool:
        return not any(f.is_error for f in self._items)

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary()]
        for item in self._items:
            prefix: str = "✗" if item.is_error else "⚠"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Group names and prefixes are empty, or ASCII letters/digits not starting
# with a digit.
GROUP_NAME_AND_PREFIX_RE: re.Pattern[str] = re.compile(r"^([A-Za-z][0-9A-Za-z]*)?$")
HANDLER_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Z]\w*$", re.ASCII)
CLIENT_NAME_RE: re.Pattern[str] = re.compile(r"^[a-z]\w*$", re.ASCII)
PARAM_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_]\w*$", re.ASCII)
_PATH_PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"\{([^{}/]*)\}")

# Kinds that cannot be a request or response body.
_INVALID_BODY_KINDS: FrozenSet[TypeKind] = frozenset(
    {
        TypeKind.CHAN,
        TypeKind.FUNC,
        TypeKind.INTERFACE,
        TypeKind.MAP,
        TypeKind.POINTER,
    }
)

_BODY_METHODS: FrozenSet[str] = frozenset({"POST", "PUT", "PATCH"})


# ---------------------------------------------------------------------------
# Construction-time checks
# ---------------------------------------------------------------------------


def check_group(name: str, prefix: str, existing: Iterable["EndpointGroup"]) -> None:
    """
    Validate a new group against the pattern and the groups already present.

    Name and prefix uniqueness is case-insensitive even though the pattern
    accepts both cases.
    """
    if not GROUP_NAME_AND_PREFIX_RE.fullmatch(name):
        raise ValidationError(
            "INVALID_GROUP_NAME",
            f"invalid name for API Endpoint Group. name must fulfill the regular "
            f"expression {GROUP_NAME_AND_PREFIX_RE.pattern!r}, got {name!r}",
            {"name": name},
        )
    if not GROUP_NAME_AND_PREFIX_RE.fullmatch(prefix):
        raise ValidationError(
            "INVALID_GROUP_PREFIX",
            f"invalid prefix for API Endpoint Group {name!r}. prefix must fulfill the "
            f"regular expression {GROUP_NAME_AND_PREFIX_RE.pattern!r}, got {prefix!r}",
            {"name": name, "prefix": prefix},
        )

    folded_name: str = name.casefold()
    folded_prefix: str = prefix.casefold()
    for group in existing:
        if group.name.casefold() == folded_name:
            raise ValidationError(
                "DUPLICATE_GROUP_NAME",
                f"name has to be case-insensitive unique across all the groups. name={name!r}",
                {"name": name, "existing": group.name},
            )
        if group.prefix.casefold() == folded_prefix:
            raise ValidationError(
                "DUPLICATE_GROUP_PREFIX",
                f"prefix has to be case-insensitive unique across all the groups. "
                f"prefix={prefix!r}",
                {"prefix": prefix, "existing": group.prefix},
            )


def path_placeholders(path: str) -> List[str]:
    """Return the ``{name}`` placeholders of a route path, in order."""
    return _PATH_PLACEHOLDER_RE.findall(path)


def _check_body(endpoint: "Endpoint", label: str, body: Optional[TypeDescriptor]) -> None:
    if body is None:
        return
    if body.kind in _INVALID_BODY_KINDS:
        raise ValidationError(
            "INVALID_BODY_TYPE",
            f"{label} of endpoint {endpoint.handler_name!r} cannot be of kind "
            f"{body.kind.value!r}",
            {"endpoint": endpoint.handler_name, "kind": body.kind.value},
        )


def _check_params(
    endpoint: "Endpoint",
    label: str,
    params: Iterable["Param"],
    seen: Set[str],
) -> None:
    for param in params:
        ctx: Dict[str, Any] = {"endpoint": endpoint.handler_name, "param": param.name}
        if not PARAM_NAME_RE.fullmatch(param.name):
            raise ValidationError(
                "INVALID_PARAM_NAME",
                f"{label} parameter name {param.name!r} of endpoint "
                f"{endpoint.handler_name!r} must fulfill {PARAM_NAME_RE.pattern!r}",
                ctx,
            )
        if param.name in seen:
            raise ValidationError(
                "DUPLICATE_PARAM_NAME",
                f"parameter {param.name!r} is declared more than once on endpoint "
                f"{endpoint.handler_name!r}",
                ctx,
            )
        seen.add(param.name)

        elementary: TypeDescriptor = get_elementary_type(param.type)
        if elementary.kind not in SCALAR_KINDS or is_nillable_type(param.type):
            raise ValidationError(
                "INVALID_PARAM_TYPE",
                f"{label} parameter {param.name!r} of endpoint {endpoint.handler_name!r} "
                f"must be a scalar type, got {param.type}",
                ctx,
            )


def check_endpoint(path: str, method: str, endpoint: "Endpoint") -> None:
    """Validate a single endpoint and its binding to *path* and *method*."""
    if not endpoint.name:
        raise ValidationError("EMPTY_ENDPOINT_NAME", "Name cannot be empty")
    if not endpoint.description:
        raise ValidationError(
            "EMPTY_ENDPOINT_DESCRIPTION",
            f"Description of endpoint {endpoint.name!r} cannot be empty",
            {"endpoint": endpoint.name},
        )
    if not HANDLER_NAME_RE.fullmatch(endpoint.handler_name):
        raise ValidationError(
            "INVALID_HANDLER_NAME",
            f"handler_name doesn't match the regular expression "
            f"{HANDLER_NAME_RE.pattern!r}, got {endpoint.handler_name!r}",
            {"endpoint": endpoint.name},
        )
    if not CLIENT_NAME_RE.fullmatch(endpoint.client_name):
        raise ValidationError(
            "INVALID_CLIENT_NAME",
            f"client_name doesn't match the regular expression "
            f"{CLIENT_NAME_RE.pattern!r}, got {endpoint.client_name!r}",
            {"endpoint": endpoint.name},
        )

    _check_body(endpoint, "Request", endpoint.request)
    _check_body(endpoint, "Response", endpoint.response)
    if endpoint.request is not None and method not in _BODY_METHODS:
        raise ValidationError(
            "REQUEST_BODY_NOT_ALLOWED",
            f"{method} endpoint {endpoint.handler_name!r} cannot have a request body",
            {"endpoint": endpoint.handler_name, "method": method},
        )

    seen: Set[str] = set()
    _check_params(endpoint, "path", endpoint.path_params, seen)
    _check_params(endpoint, "query", endpoint.query_params, seen)

    placeholders: List[str] = path_placeholders(path)
    declared: Set[str] = {p.name for p in endpoint.path_params}
    for placeholder in placeholders:
        if placeholder not in declared:
            raise ValidationError(
                "UNDECLARED_PATH_PARAM",
                f"path {path!r} of endpoint {endpoint.handler_name!r} has placeholder "
                f"{{{placeholder}}} with no matching path parameter",
                {"endpoint": endpoint.handler_name, "path": path},
            )
    for name in declared:
        if name not in placeholders:
            raise ValidationError(
                "UNUSED_PATH_PARAM",
                f"path parameter {name!r} of endpoint {endpoint.handler_name!r} does not "
                f"appear in path {path!r}",
                {"endpoint": endpoint.handler_name, "path": path},
            )


def check_endpoint_unique(
    path: str,
    method: str,
    endpoint: "Endpoint",
    existing: Iterable["FullEndpoint"],
) -> None:
    """
    Reject route, handler-name and client-name clashes within one group.

    Routes are compared after path cleaning, so ``/list`` and ``/list/`` are
    the same route.
    """
    from endpointgen.models import join_url_path

    route: str = join_url_path("/", path)
    for other in existing:
        if other.method == method and join_url_path("/", other.path) == route:
            raise ValidationError(
                "DUPLICATE_ROUTE",
                f"an endpoint is already registered for {method} {route!r} "
                f"(as {other.path!r})",
                {"path": path, "route": route, "method": method},
            )
        if other.endpoint.handler_name == endpoint.handler_name:
            raise ValidationError(
                "DUPLICATE_HANDLER_NAME",
                f"handler_name {endpoint.handler_name!r} is already used in the group",
                {"handler_name": endpoint.handler_name},
            )
        if other.endpoint.client_name == endpoint.client_name:
            raise ValidationError(
                "DUPLICATE_CLIENT_NAME",
                f"client_name {endpoint.client_name!r} is already used in the group",
                {"client_name": endpoint.client_name},
            )


# ---------------------------------------------------------------------------
# Lint pass
# ---------------------------------------------------------------------------


def validate_api(api: "API") -> ValidationResult:
    """
    Collect non-fatal findings about a finished API declaration.

    Everything checked here is legal at construction time.
    """
    result: ValidationResult = ValidationResult()

    if not api.endpoint_groups:
        result.add_error("NO_GROUPS", "API declares no endpoint groups.")

    if not api.resolved_package_name:
        result.add_warning(
            "NO_PACKAGE_NAME",
            "Neither package_name nor package_path is set; generated code has no package.",
        )

    for group in api.endpoint_groups:
        if not group.endpoints:
            result.add_warning(
                "EMPTY_GROUP",
                f"Group {group.name!r} has no endpoints.",
                {"group": group.name},
            )
        if api.auth is None:
            for full in group.endpoints:
                ep = full.endpoint
                if not (ep.no_cookie_auth and ep.no_api_auth):
                    result.add_warning(
                        "AUTH_NOT_CONFIGURED",
                        f"Endpoint {group.name}.{ep.handler_name} requires authentication "
                        f"but the API has no auth capability.",
                        {"group": group.name, "endpoint": ep.handler_name},
                    )

    logger.info("API validation finished: %s", result.summary())
    return result


__all__: List[str] = [
    "ValidationError",
    "Finding",
    "ValidationResult",
    "GROUP_NAME_AND_PREFIX_RE",
    "HANDLER_NAME_RE",
    "CLIENT_NAME_RE",
    "PARAM_NAME_RE",
    "check_group",
    "check_endpoint",
    "check_endpoint_unique",
    "path_placeholders",
    "validate_api",
]
