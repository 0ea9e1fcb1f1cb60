# File: endpointgen/introspect.py
"""
endpointgen - Type Introspection
=================================
Builds ``TypeDescriptor`` graphs from ordinary Python annotations so that
API authors can declare request and response shapes with the classes they
already have::

    class User(BaseModel):
        id: UUID
        email: str
        tags: List[str] = []
        manager: Optional["User"] = None   # rejected: recursive

    describe(List[User])   # → []User

Mapping rules:

=====================================  ===========================
Annotation                             Descriptor
=====================================  ===========================
``bool`` / ``int`` / ``float`` /       ``bool`` / ``int64`` /
``str``                                ``float64`` / ``string``
``bytes``                              ``[]uint8``
``datetime``, ``date``                 ``Time``
``uuid.UUID``                          ``UUID``
``Optional[X]``                        ``*X``
``List/Set/FrozenSet/Sequence[X]``,    ``[]X``
``Tuple[X, ...]``
``Tuple[X, X, X]``                     ``[3]X``
``Dict/Mapping[K, V]``                 ``map[K]V``
``Any``, ``object``, other unions      ``interface {}``
pydantic model / dataclass             named struct
=====================================  ===========================

Descriptors are built once per declaration; nothing here runs at request
time.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import logging
import types as pytypes
import typing
import uuid
from typing import Any, Dict, List, Set, Tuple

from pydantic import BaseModel

from endpointgen.types import (
    ANY,
    BOOL,
    FLOAT64,
    INT64,
    STRING,
    TIME,
    UINT8,
    UUID,
    TypeDescriptor,
    array_of,
    map_of,
    pointer_to,
    slice_of,
    struct_of,
)
from endpointgen.validators import ValidationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.introspect")

_SCALARS: Dict[Any, TypeDescriptor] = {
    bool: BOOL,
    int: INT64,
    float: FLOAT64,
    str: STRING,
    datetime.datetime: TIME,
    datetime.date: TIME,
    uuid.UUID: UUID,
}

_SEQUENCE_ORIGINS: Tuple[Any, ...] = (
    list,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
)

_MAPPING_ORIGINS: Tuple[Any, ...] = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def describe(annotation: Any) -> TypeDescriptor:
    """
    Build a descriptor for a Python annotation.

    Raises:
        ValidationError: for recursive classes and annotations with no
            descriptor equivalent.
    """
    return _Describer().describe(annotation)


class _Describer:
    __slots__ = ("_in_progress", "_done")

    def __init__(self) -> None:
        self._in_progress: Set[type] = set()
        self._done: Dict[type, TypeDescriptor] = {}

    def describe(self, annotation: Any) -> TypeDescriptor:
        if annotation is Any or annotation is object:
            return ANY
        if annotation is None or annotation is type(None):
            raise ValidationError(
                "UNSUPPORTED_ANNOTATION",
                "None is only supported inside Optional[...]",
            )
        if annotation in _SCALARS:
            return _SCALARS[annotation]
        if annotation is bytes or annotation is bytearray:
            return slice_of(UINT8)

        origin: Any = typing.get_origin(annotation)
        if origin is not None:
            return self._generic(annotation, origin, typing.get_args(annotation))

        if isinstance(annotation, type):
            if issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation):
                return self._struct(annotation)
            if annotation in (list, set, frozenset, tuple):
                return slice_of(ANY)
            if annotation is dict:
                return map_of(STRING, ANY)

        raise ValidationError(
            "UNSUPPORTED_ANNOTATION",
            f"cannot describe annotation {annotation!r}",
            {"annotation": repr(annotation)},
        )

    def _generic(self, annotation: Any, origin: Any, args: Tuple[Any, ...]) -> TypeDescriptor:
        if origin is typing.Union or origin is pytypes.UnionType:
            members: List[Any] = [a for a in args if a is not type(None)]
            if len(members) == 1 and len(members) != len(args):
                return pointer_to(self.describe(members[0]))
            return ANY

        if origin is typing.Annotated:
            return self.describe(args[0])

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return slice_of(self.describe(args[0]))
            if args and all(a == args[0] for a in args):
                return array_of(self.describe(args[0]), len(args))
            raise ValidationError(
                "UNSUPPORTED_ANNOTATION",
                f"heterogeneous tuples have no descriptor: {annotation!r}",
                {"annotation": repr(annotation)},
            )

        if origin in _SEQUENCE_ORIGINS:
            return slice_of(self.describe(args[0]) if args else ANY)

        if origin in _MAPPING_ORIGINS:
            if len(args) == 2:
                return map_of(self.describe(args[0]), self.describe(args[1]))
            return map_of(STRING, ANY)

        raise ValidationError(
            "UNSUPPORTED_ANNOTATION",
            f"cannot describe generic annotation {annotation!r}",
            {"annotation": repr(annotation)},
        )

    def _struct(self, cls: type) -> TypeDescriptor:
        if cls in self._done:
            return self._done[cls]
        if cls in self._in_progress:
            raise ValidationError(
                "RECURSIVE_TYPE",
                f"{cls.__name__} refers to itself; recursive types are not supported",
                {"type": cls.__name__},
            )

        self._in_progress.add(cls)
        try:
            fields: List[Tuple[str, TypeDescriptor]] = [
                (name, self.describe(annotation))
                for name, annotation in _class_fields(cls)
            ]
        finally:
            self._in_progress.discard(cls)

        descriptor: TypeDescriptor = struct_of(fields, name=cls.__name__)
        self._done[cls] = descriptor
        logger.debug("Described %s as %s.", cls.__qualname__, descriptor)
        return descriptor


def _class_fields(cls: type) -> List[Tuple[str, Any]]:
    """Return ``(wire_name, annotation)`` pairs of a model or dataclass."""
    if issubclass(cls, BaseModel):
        return [
            (info.alias or name, info.annotation)
            for name, info in cls.model_fields.items()
        ]
    hints: Dict[str, Any] = typing.get_type_hints(cls, include_extras=True)
    return [(f.name, hints[f.name]) for f in dataclasses.fields(cls)]


__all__: List[str] = ["describe"]
