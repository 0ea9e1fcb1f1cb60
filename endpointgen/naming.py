# File: endpointgen/naming.py
"""
endpointgen - Naming Engine
============================
String helpers that turn contextual name fragments into the identifiers
used for generated symbols.

Only the first code point of a string changes case; the rest is kept
verbatim, so acronyms and already-cased fragments survive::

    >>> compound_type_name("getUser", "response", "items")
    'getUserResponseItems'
    >>> compound_type_name("", "uuid")
    'Uuid'

The case transforms are cached with ``@lru_cache(maxsize=None)``.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import replace
from typing import Dict, List

from endpointgen.types import TypeDescriptor

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.naming")


# ---------------------------------------------------------------------------
# Case transforms
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def capitalize(s: str) -> str:
    """
    Title-case the first code point of *s*.

    Mappings that would expand one code point into several (``ß`` → ``Ss``)
    are not applied.
    """
    if not s:
        return s
    first: str = s[0].title()
    if len(first) != 1:
        return s
    return first + s[1:]


# U+0130 is the only code point whose full lower-case mapping expands
# ("i" + combining dot above); its simple mapping is a plain "i".
_SIMPLE_LOWER: Dict[str, str] = {"İ": "i"}


@functools.lru_cache(maxsize=None)
def uncapitalize(s: str) -> str:
    """Lower-case the first code point of *s* using the simple case mapping."""
    if not s:
        return s
    first: str = _SIMPLE_LOWER.get(s[0]) or s[0].lower()
    if len(first) != 1:
        return s
    return first + s[1:]


def compound_type_name(base: str, *parts: str) -> str:
    """
    Compose a name from *base* and *parts*.

    *base* is kept as it is; each part is capitalized.
    """
    return base + "".join(capitalize(part) for part in parts)


# ---------------------------------------------------------------------------
# Named type wrapper
# ---------------------------------------------------------------------------


def with_name(t: TypeDescriptor, name: str) -> TypeDescriptor:
    """
    Return *t* reporting *name* as its name.

    Kind, element, key, length and fields are shared with *t*; only the
    name differs.  Used to give anonymous types a stable name taken from
    the place they are used.
    """
    if t.name == name:
        return t
    logger.debug("Naming %s as '%s'.", t, name)
    return replace(t, name=name)


__all__: List[str] = [
    "capitalize",
    "uncapitalize",
    "compound_type_name",
    "with_name",
]
