# File: endpointgen/registry.py
"""
endpointgen - Type Registry
============================
Collects every type that needs a declaration in the generated code and
decides the name each one is declared under.

Named types keep their own name.  Anonymous structs get a name built from
the place they are first reached::

    register_as(<[]struct{ address struct{...} }>, "GetUserResponse")

    struct                 → GetUserResponseItem
    its ``address`` field  → GetUserResponseItemAddress

Naming rules while walking from a registered root towards the leaves:

- every sequence layer (slice, array, chan) appends ``item``;
- pointer layers append nothing;
- map keys append ``key``, map values append ``value``;
- struct fields append the field name.

A name can only belong to one type.  If two different descriptors end up
with the same name the registry raises ``ValidationError`` rather than
renaming one of them behind the author's back.

The walk order is the registration order, and struct fields are walked in
declaration order, so the names assigned are the same on every run.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from endpointgen.models import NamingConfig
from endpointgen.naming import compound_type_name, with_name
from endpointgen.typelist import TypeAndName, filter_types, map_to_list
from endpointgen.types import (
    SEQUENCE_KINDS,
    TypeDescriptor,
    TypeKind,
    is_predeclared,
)
from endpointgen.validators import ValidationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.registry")


class TypeRegistry:
    """
    Registry of the types reachable from an API's endpoints.

    Usage::

        registry = TypeRegistry()
        registry.register_as(endpoint.response, "GetUserResponse")
        for tn in registry.sorted():
            emit_declaration(tn.type, tn.name)
    """

    def __init__(self, config: Optional[NamingConfig] = None) -> None:
        self._config: NamingConfig = config or NamingConfig()
        self._common: FrozenSet[str] = frozenset(self._config.common_types)
        self._roots: List[Tuple[TypeDescriptor, str]] = []
        self._names: Dict[TypeDescriptor, str] = {}
        self._owners: Dict[str, TypeDescriptor] = {}
        self._walked: bool = False

    # -- Registration -------------------------------------------------------

    def register(self, t: TypeDescriptor) -> None:
        """
        Register a named type.

        Raises ``ValidationError`` (``ANONYMOUS_TYPE``) right away when an
        anonymous struct can be reached from *t* without passing a named
        type first.
        """
        unnamed: Optional[TypeDescriptor] = self._unnamed_struct(t)
        if unnamed is not None:
            raise ValidationError(
                "ANONYMOUS_TYPE",
                f"registering an anonymous type is not supported, use register_as: {t}",
                {"struct": str(unnamed)},
            )
        self._roots.append((t, ""))
        self._walked = False

    def register_as(self, t: TypeDescriptor, name: str) -> None:
        """Register *t*; an anonymous struct inside it is named *name*."""
        if not name:
            raise ValidationError("EMPTY_TYPE_NAME", f"empty name hint for {t}")
        self._roots.append((t, name))
        self._walked = False

    # -- Queries ------------------------------------------------------------

    def all(self) -> Dict[TypeDescriptor, str]:
        """Every declarable type mapped to its name."""
        self._walk()
        return dict(self._names)

    def name_of(self, t: TypeDescriptor) -> str:
        """Declared name of *t*, or ``""`` when it is not a declaration."""
        self._walk()
        return self._names.get(t, "")

    def sorted(self) -> List[TypeAndName]:
        """Declarations sorted by name, each type reporting its assigned name."""
        self._walk()
        return [
            TypeAndName(type=with_name(tn.type, tn.name), name=tn.name)
            for tn in map_to_list(self._names)
        ]

    def structs(self) -> List[TypeAndName]:
        return filter_types(self.sorted(), lambda tn: tn.type.kind == TypeKind.STRUCT)

    def reference(self, t: TypeDescriptor) -> str:
        """Spell *t* using the assigned names, e.g. ``[]*GetUserResponseItem``."""
        self._walk()
        return t.spelling(lambda d: self._names.get(d, ""))

    def __len__(self) -> int:
        self._walk()
        return len(self._names)

    # -- Walking ------------------------------------------------------------

    def _walk(self) -> None:
        if self._walked:
            return
        self._names.clear()
        self._owners.clear()
        for root, hint in self._roots:
            self._visit(root, hint)
        self._walked = True
        logger.debug("Type registry resolved %d declarations.", len(self._names))

    def _is_declaration(self, t: TypeDescriptor) -> bool:
        if t.kind == TypeKind.STRUCT:
            return True
        if not t.name or is_predeclared(t) or t.name in self._common:
            return False
        return t.kind not in (TypeKind.INTERFACE, TypeKind.FUNC)

    def _unnamed_struct(self, t: TypeDescriptor) -> Optional[TypeDescriptor]:
        if t.name and self._is_declaration(t):
            return None
        if t.kind == TypeKind.STRUCT:
            return t
        if t.kind in SEQUENCE_KINDS or t.kind in (TypeKind.POINTER, TypeKind.MAP):
            for part in (t.key, t.elem):
                if part is None:
                    continue
                found: Optional[TypeDescriptor] = self._unnamed_struct(part)
                if found is not None:
                    return found
        return None

    def _visit(self, t: TypeDescriptor, hint: str) -> None:
        if t.name and self._is_declaration(t):
            if self._names.get(t) == t.name:
                return
            self._claim(t, t.name)
            if t.kind == TypeKind.STRUCT:
                self._visit_fields(t, t.name)
            else:
                # Parts of a named container are named after it.
                self._visit_parts(t, t.name)
            return

        if t.kind == TypeKind.STRUCT:
            if t in self._names:
                return
            if not hint:
                raise ValidationError(
                    "ANONYMOUS_TYPE",
                    f"anonymous struct reached without a name to derive from: {t}",
                )
            self._claim(t, hint)
            self._visit_fields(t, hint)
            return

        self._visit_parts(t, hint)

    def _visit_parts(self, t: TypeDescriptor, hint: str) -> None:
        if t.elem is None:
            return
        if t.kind in SEQUENCE_KINDS:
            self._visit(t.elem, _hint(hint, self._config.item_suffix))
        elif t.kind == TypeKind.POINTER:
            self._visit(t.elem, hint)
        elif t.kind == TypeKind.MAP:
            if t.key is not None:
                self._visit(t.key, _hint(hint, self._config.key_suffix))
            self._visit(t.elem, _hint(hint, self._config.value_suffix))

    def _visit_fields(self, t: TypeDescriptor, name: str) -> None:
        for f in t.fields:
            self._visit(f.type, compound_type_name(name, f.name))

    def _claim(self, t: TypeDescriptor, name: str) -> None:
        owner: Optional[TypeDescriptor] = self._owners.get(name)
        if owner is not None and owner != t:
            raise ValidationError(
                "DUPLICATE_TYPE_NAME",
                f"type name {name!r} is used by two different types: {owner} and {t}",
                {"name": name},
            )
        if t in self._names:
            return
        self._names[t] = name
        self._owners[name] = t


def _hint(hint: str, suffix: str) -> str:
    return compound_type_name(hint, suffix) if hint else ""


def register_all(
    registry: TypeRegistry,
    roots: Iterable[Tuple[TypeDescriptor, str]],
) -> TypeRegistry:
    """Register ``(type, name_hint)`` pairs in order and return the registry."""
    for t, hint in roots:
        if hint:
            registry.register_as(t, hint)
        else:
            registry.register(t)
    return registry


__all__: List[str] = ["TypeRegistry", "register_all"]
