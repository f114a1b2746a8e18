"""
Type Classifier — Map declared member types to rendering strategies.

The classification table is keyed by type identity and fixed at
construction. Capability types (Renderable, exceptions) are recognised by
subclassing since they are open families rather than single types.
"""

from __future__ import annotations

import collections
import collections.abc
import types
import typing
from decimal import Decimal
from fractions import Fraction
from typing import Any, Union

from stache.ir.enums import SectionShape, TypeClassification
from stache.runtime import Char, Renderable

NoneType = type(None)

_ITERABLE_ORIGINS = frozenset({
    list,
    tuple,
    set,
    frozenset,
    collections.deque,
    collections.abc.Iterable,
    collections.abc.Iterator,
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
})


def optional_inner(declared_type: Any) -> Any:
    """
    Inner type of an Optional declaration, or None if it is not one.

    `X | None` and `Optional[X]` give X; a union of several non-None
    types gives that union without None.
    """
    if typing.get_origin(declared_type) not in (Union, types.UnionType):
        return None
    args = typing.get_args(declared_type)
    if NoneType not in args:
        return None
    rest = tuple(arg for arg in args if arg is not NoneType)
    if len(rest) == 1:
        return rest[0]
    return Union[rest]


def element_type(declared_type: Any) -> Any:
    """Element type of an iterable declaration, or None if it is not one."""
    if declared_type in (str, bytes):
        return None
    origin = typing.get_origin(declared_type)
    if origin is None:
        # Bare list, tuple, ... without parameters
        if declared_type in _ITERABLE_ORIGINS:
            return Any
        return None
    if origin not in _ITERABLE_ORIGINS:
        return None
    args = typing.get_args(declared_type)
    if not args:
        return Any
    if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
        # Fixed-size heterogeneous tuple
        distinct = tuple(dict.fromkeys(args))
        return distinct[0] if len(distinct) == 1 else Union[distinct]
    return args[0]


class TypeClassifier:
    """Classify declared types for variable rendering and section shapes."""

    def __init__(self) -> None:
        table = {
            int: TypeClassification.NUMERIC,
            float: TypeClassification.NUMERIC,
            complex: TypeClassification.NUMERIC,
            Decimal: TypeClassification.NUMERIC,
            Fraction: TypeClassification.NUMERIC,
            bool: TypeClassification.BOOLEAN,
            Char: TypeClassification.CHARACTER,
            str: TypeClassification.STRING,
        }
        self._table = types.MappingProxyType(table)

    def classify(self, declared_type: Any) -> TypeClassification:
        """Classification of a type; Optional wrappers are looked through."""
        inner = optional_inner(declared_type)
        if inner is not None:
            declared_type = inner

        try:
            found = self._table.get(declared_type)
        except TypeError:
            # Unhashable annotation objects
            found = None
        if found is not None:
            return found

        if isinstance(declared_type, type) and typing.get_origin(declared_type) is None:
            if issubclass(declared_type, Renderable):
                return TypeClassification.RENDERABLE
            if issubclass(declared_type, BaseException):
                return TypeClassification.EXCEPTION
        return TypeClassification.OBJECT

    def is_optional(self, declared_type: Any) -> bool:
        return optional_inner(declared_type) is not None

    def section_shape(self, declared_type: Any) -> tuple[SectionShape, Any]:
        """
        Control flow for a section over a member of this type.

        Returns:
            The shape and the type bound inside the section body: the
            element type for iterations, the inner type for optionals,
            the type itself otherwise.
        """
        inner = optional_inner(declared_type)
        if inner is not None:
            # None and False both close a boolean section
            if inner is bool:
                return SectionShape.GUARD, bool
            elements = element_type(inner)
            if elements is not None:
                return SectionShape.ITERATION, elements
            return SectionShape.OPTIONAL, inner

        if declared_type is bool:
            return SectionShape.GUARD, bool

        elements = element_type(declared_type)
        if elements is not None:
            return SectionShape.ITERATION, elements
        return SectionShape.OBJECT, declared_type


_default_classifier: TypeClassifier | None = None


def get_classifier() -> TypeClassifier:
    """Shared classifier instance; the table is read-only."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = TypeClassifier()
    return _default_classifier
