# File: endpointgen/types.py
"""
endpointgen - Type Descriptors & Classifier
============================================
Immutable descriptors for the data types that flow through endpoints
(requests, responses, parameters, struct fields), plus the two structural
questions every later stage asks about them:

- ``get_elementary_type`` — what is the innermost payload type?
- ``is_nillable_type`` — can an instance be absent?

Descriptors form a tagged union over ``TypeKind``.  They are frozen,
slotted dataclasses so they can be used as dictionary keys by the type
registry; two descriptors are the same type exactly when they compare
equal.

Descriptors can be spelled and parsed in a compact Go-like notation::

    *User            pointer to User
    []string         slice of string
    [16]uint8        array of 16 uint8
    chan Event       channel of Event
    map[string]int   map from string to int
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.types")


class TypeKind(str, Enum):
    """Structural kinds a type descriptor can have."""

    # Scalars
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"

    # Compound / indirect
    ARRAY = "array"
    CHAN = "chan"
    FUNC = "func"
    INTERFACE = "interface"
    MAP = "map"
    POINTER = "pointer"
    SLICE = "slice"
    STRUCT = "struct"


SCALAR_KINDS: FrozenSet[TypeKind] = frozenset(
    {TypeKind.BOOL, TypeKind.INT, TypeKind.UINT, TypeKind.FLOAT, TypeKind.STRING}
)

# Layers stripped by get_elementary_type.
_WRAPPER_KINDS: FrozenSet[TypeKind] = frozenset(
    {TypeKind.ARRAY, TypeKind.CHAN, TypeKind.POINTER, TypeKind.SLICE}
)

_NILLABLE_KINDS: FrozenSet[TypeKind] = frozenset(
    {
        TypeKind.CHAN,
        TypeKind.INTERFACE,
        TypeKind.MAP,
        TypeKind.POINTER,
        TypeKind.SLICE,
    }
)

SEQUENCE_KINDS: FrozenSet[TypeKind] = frozenset(
    {TypeKind.ARRAY, TypeKind.CHAN, TypeKind.SLICE}
)


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A single named member of a struct type."""

    name: str
    type: "TypeDescriptor"


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """
    Structural description of a data type.

    ``elem`` is set for array, chan, pointer, slice and map (the value type);
    ``key`` only for map; ``length`` only for array; ``fields`` only for
    struct.  ``name`` is the declared name, empty for anonymous types.
    """

    kind: TypeKind
    name: str = ""
    elem: Optional["TypeDescriptor"] = None
    key: Optional["TypeDescriptor"] = None
    length: int = 0
    fields: Tuple[FieldDescriptor, ...] = ()

    @property
    def is_anonymous(self) -> bool:
        return not self.name

    def field(self, name: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def spelling(self, namer: Optional[Callable[["TypeDescriptor"], str]] = None) -> str:
        """
        Render the type in Go-like notation.

        *namer* may return a name for any descriptor (including anonymous
        ones); an empty return falls back to the structural spelling.
        """
        if namer is not None:
            assigned: str = namer(self)
            if assigned:
                return assigned
        if self.name:
            return self.name

        if self.kind == TypeKind.POINTER:
            return "*" + _elem(self).spelling(namer)
        if self.kind == TypeKind.SLICE:
            return "[]" + _elem(self).spelling(namer)
        if self.kind == TypeKind.ARRAY:
            return f"[{self.length}]" + _elem(self).spelling(namer)
        if self.kind == TypeKind.CHAN:
            return "chan " + _elem(self).spelling(namer)
        if self.kind == TypeKind.MAP:
            key: TypeDescriptor = self.key if self.key is not None else ANY
            return f"map[{key.spelling(namer)}]{_elem(self).spelling(namer)}"
        if self.kind == TypeKind.STRUCT:
            inner: str = "; ".join(
                f"{f.name} {f.type.spelling(namer)}" for f in self.fields
            )
            return "struct { " + inner + " }" if inner else "struct {}"
        if self.kind == TypeKind.INTERFACE:
            return "interface {}"
        if self.kind == TypeKind.FUNC:
            return "func()"
        return self.kind.value

    def __str__(self) -> str:
        return self.spelling()


def _elem(t: TypeDescriptor) -> TypeDescriptor:
    return t.elem if t.elem is not None else ANY


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def scalar(kind: TypeKind, name: str = "") -> TypeDescriptor:
    if kind not in SCALAR_KINDS:
        raise ValueError(f"{kind!r} is not a scalar kind.")
    return TypeDescriptor(kind=kind, name=name)


def pointer_to(t: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(kind=TypeKind.POINTER, elem=t)


def slice_of(t: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(kind=TypeKind.SLICE, elem=t)


def array_of(t: TypeDescriptor, length: int) -> TypeDescriptor:
    if length < 0:
        raise ValueError(f"Array length must be >= 0, got {length}.")
    return TypeDescriptor(kind=TypeKind.ARRAY, elem=t, length=length)


def chan_of(t: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(kind=TypeKind.CHAN, elem=t)


def map_of(key: TypeDescriptor, value: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(kind=TypeKind.MAP, key=key, elem=value)


def struct_of(
    fields: Iterable[Tuple[str, TypeDescriptor]] = (),
    name: str = "",
) -> TypeDescriptor:
    """Build a struct descriptor from ``(field_name, type)`` pairs, in order."""
    members: Tuple[FieldDescriptor, ...] = tuple(
        FieldDescriptor(name=n, type=t) for n, t in fields
    )
    seen: set = set()
    for m in members:
        if m.name in seen:
            raise ValueError(f"Duplicate struct field '{m.name}'.")
        seen.add(m.name)
    return TypeDescriptor(kind=TypeKind.STRUCT, name=name, fields=members)


# ---------------------------------------------------------------------------
# Predeclared types
# ---------------------------------------------------------------------------

BOOL: TypeDescriptor = scalar(TypeKind.BOOL, "bool")
INT: TypeDescriptor = scalar(TypeKind.INT, "int")
INT8: TypeDescriptor = scalar(TypeKind.INT, "int8")
INT16: TypeDescriptor = scalar(TypeKind.INT, "int16")
INT32: TypeDescriptor = scalar(TypeKind.INT, "int32")
INT64: TypeDescriptor = scalar(TypeKind.INT, "int64")
UINT: TypeDescriptor = scalar(TypeKind.UINT, "uint")
UINT8: TypeDescriptor = scalar(TypeKind.UINT, "uint8")
UINT16: TypeDescriptor = scalar(TypeKind.UINT, "uint16")
UINT32: TypeDescriptor = scalar(TypeKind.UINT, "uint32")
UINT64: TypeDescriptor = scalar(TypeKind.UINT, "uint64")
FLOAT32: TypeDescriptor = scalar(TypeKind.FLOAT, "float32")
FLOAT64: TypeDescriptor = scalar(TypeKind.FLOAT, "float64")
STRING: TypeDescriptor = scalar(TypeKind.STRING, "string")
ANY: TypeDescriptor = TypeDescriptor(kind=TypeKind.INTERFACE)

# Well-known library types, carried as named strings on the wire.
TIME: TypeDescriptor = scalar(TypeKind.STRING, "Time")
UUID: TypeDescriptor = scalar(TypeKind.STRING, "UUID")

PREDECLARED: Dict[str, TypeDescriptor] = {
    "bool": BOOL,
    "int": INT,
    "int8": INT8,
    "int16": INT16,
    "int32": INT32,
    "int64": INT64,
    "uint": UINT,
    "uint8": UINT8,
    "byte": UINT8,
    "uint16": UINT16,
    "uint32": UINT32,
    "uint64": UINT64,
    "float32": FLOAT32,
    "float64": FLOAT64,
    "string": STRING,
    "any": ANY,
    "Time": TIME,
    "UUID": UUID,
}


def is_predeclared(t: TypeDescriptor) -> bool:
    """True for the built-in descriptors in ``PREDECLARED``."""
    return bool(t.name) and PREDECLARED.get(t.name) == t


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


def get_elementary_type(t: TypeDescriptor) -> TypeDescriptor:
    """Strip array, chan, pointer and slice layers until none remain."""
    while t.kind in _WRAPPER_KINDS:
        t = _elem(t)
    return t


def is_nillable_type(t: TypeDescriptor) -> bool:
    """Return whether instances of the given type can be nil."""
    return t.kind in _NILLABLE_KINDS


# ---------------------------------------------------------------------------
# Spelling parser
# ---------------------------------------------------------------------------

_IDENT_RE: re.Pattern[str] = re.compile(r"[A-Za-z_][0-9A-Za-z_]*")
_ARRAY_RE: re.Pattern[str] = re.compile(r"\[(\d+)\]")


def parse_type_expr(
    text: str,
    lookup: Optional[Mapping[str, TypeDescriptor]] = None,
    resolve: Optional[Callable[[str], Optional[TypeDescriptor]]] = None,
) -> TypeDescriptor:
    """
    Parse a Go-like type spelling.

    Identifiers are resolved against *lookup*, then the *resolve* callback,
    then ``PREDECLARED``.  Unknown identifiers and trailing input raise
    ``ValueError``.
    """
    parser: _ExprParser = _ExprParser(text, lookup or {}, resolve)
    result: TypeDescriptor = parser.parse()
    logger.debug("Parsed type expression %r → %s", text, result)
    return result


class _ExprParser:
    __slots__ = ("_text", "_pos", "_lookup", "_resolve")

    def __init__(
        self,
        text: str,
        lookup: Mapping[str, TypeDescriptor],
        resolve: Optional[Callable[[str], Optional[TypeDescriptor]]],
    ) -> None:
        self._text: str = text
        self._pos: int = 0
        self._lookup: Mapping[str, TypeDescriptor] = lookup
        self._resolve = resolve

    def parse(self) -> TypeDescriptor:
        t: TypeDescriptor = self._type()
        self._skip_spaces()
        if self._pos != len(self._text):
            raise ValueError(
                f"Unexpected input at offset {self._pos} in type expression {self._text!r}."
            )
        return t

    def _skip_spaces(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos] == " ":
            self._pos += 1

    def _startswith(self, token: str) -> bool:
        return self._text.startswith(token, self._pos)

    def _type(self) -> TypeDescriptor:
        self._skip_spaces()
        if self._startswith("*"):
            self._pos += 1
            return pointer_to(self._type())
        if self._startswith("[]"):
            self._pos += 2
            return slice_of(self._type())
        if self._startswith("["):
            match = _ARRAY_RE.match(self._text, self._pos)
            if match is None:
                raise ValueError(f"Malformed array length in type expression {self._text!r}.")
            self._pos = match.end()
            return array_of(self._type(), int(match.group(1)))
        if self._startswith("chan "):
            self._pos += len("chan ")
            return chan_of(self._type())
        if self._startswith("map["):
            self._pos += len("map[")
            key: TypeDescriptor = self._type()
            self._skip_spaces()
            if not self._startswith("]"):
                raise ValueError(f"Missing ']' after map key in type expression {self._text!r}.")
            self._pos += 1
            return map_of(key, self._type())
        return self._identifier()

    def _identifier(self) -> TypeDescriptor:
        match = _IDENT_RE.match(self._text, self._pos)
        if match is None:
            raise ValueError(f"Expected a type name at offset {self._pos} in {self._text!r}.")
        self._pos = match.end()
        ident: str = match.group(0)

        if ident in self._lookup:
            return self._lookup[ident]
        if self._resolve is not None:
            found: Optional[TypeDescriptor] = self._resolve(ident)
            if found is not None:
                return found
        if ident in PREDECLARED:
            return PREDECLARED[ident]
        raise ValueError(f"Unknown type name '{ident}' in type expression {self._text!r}.")


__all__: List[str] = [
    "TypeKind",
    "SCALAR_KINDS",
    "SEQUENCE_KINDS",
    "FieldDescriptor",
    "TypeDescriptor",
    "scalar",
    "pointer_to",
    "slice_of",
    "array_of",
    "chan_of",
    "map_of",
    "struct_of",
    "BOOL",
    "INT",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "FLOAT32",
    "FLOAT64",
    "STRING",
    "ANY",
    "TIME",
    "UUID",
    "PREDECLARED",
    "is_predeclared",
    "get_elementary_type",
    "is_nillable_type",
    "parse_type_expr",
]
