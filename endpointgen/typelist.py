# File: endpointgen/typelist.py
"""
endpointgen - Type Collection Utilities
========================================
Turns the registry's ``{type: name}`` mapping into the ordered sequence the
emission stage iterates, so that generated output is identical from run to
run regardless of how the mapping was populated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping

from endpointgen.types import TypeDescriptor


@dataclass(frozen=True, slots=True)
class TypeAndName:
    """A type paired with the name it will be declared under."""

    type: TypeDescriptor
    name: str


def map_to_list(types_and_names: Mapping[TypeDescriptor, str]) -> List[TypeAndName]:
    """Return the mapping as a list sorted by name (stable, code point order)."""
    items: List[TypeAndName] = [
        TypeAndName(type=t, name=n) for t, n in types_and_names.items()
    ]
    return sorted(items, key=lambda tn: tn.name)


def filter_types(
    types: Iterable[TypeAndName],
    keep: Callable[[TypeAndName], bool],
) -> List[TypeAndName]:
    """Return the elements of *types* that satisfy *keep*, in their original order."""
    return [t for t in types if keep(t)]


__all__: List[str] = ["TypeAndName", "map_to_list", "filter_types"]
