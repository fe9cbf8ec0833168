"""
Type Tags for typedcollections

The closed vocabulary of atomic type descriptors, the open-ended NamedType,
and the mapping from a live Python value to its concrete tag.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, FrozenSet, Tuple, Union
import functools
import io
import mmap
import re
import socket
import types

from .errors import InvalidTypeName


# =============================================================================
# TAG REGISTRY
# =============================================================================

class TypeTag(IntEnum):
    """
    Atomic type descriptors.

    Concrete tags (0x0XX) describe what a value actually is.
    Pseudo-tags (0x1XX) are categories that match several concrete tags.
    """
    # Concrete
    NULL = 0x000
    BOOL = 0x001
    INT = 0x002
    FLOAT = 0x003
    STRING = 0x004
    COMPOSITE = 0x010
    OBJECT = 0x020
    HANDLE = 0x021
    CALLABLE = 0x022

    # Pseudo
    SCALAR = 0x100
    NUMBER = 0x101
    ITERABLE = 0x102
    ANYTHING = 0x1FF

    @property
    def is_pseudo(self) -> bool:
        return self >= 0x100

    @property
    def keyword(self) -> str:
        """Canonical keyword used when printing a TypeSet."""
        return _CANONICAL_KEYWORDS[self]


# What each pseudo-tag expands to at match time. ITERABLE and ANYTHING need
# more than a tag comparison, see TypeSet.match.
PSEUDO_EXPANSION: Dict[TypeTag, FrozenSet[TypeTag]] = {
    TypeTag.SCALAR: frozenset({TypeTag.BOOL, TypeTag.INT, TypeTag.FLOAT, TypeTag.STRING}),
    TypeTag.NUMBER: frozenset({TypeTag.INT, TypeTag.FLOAT}),
    TypeTag.ITERABLE: frozenset({TypeTag.COMPOSITE}),
    TypeTag.ANYTHING: frozenset(t for t in TypeTag if not t.is_pseudo),
}


# =============================================================================
# KEYWORDS
# =============================================================================

KEYWORDS: Dict[str, TypeTag] = {
    'null': TypeTag.NULL,
    'None': TypeTag.NULL,
    'none': TypeTag.NULL,
    'bool': TypeTag.BOOL,
    'int': TypeTag.INT,
    'float': TypeTag.FLOAT,
    'string': TypeTag.STRING,
    'str': TypeTag.STRING,
    'array': TypeTag.COMPOSITE,
    'composite': TypeTag.COMPOSITE,
    'object': TypeTag.OBJECT,
    'resource': TypeTag.HANDLE,
    'handle': TypeTag.HANDLE,
    'callable': TypeTag.CALLABLE,
    'scalar': TypeTag.SCALAR,
    'number': TypeTag.NUMBER,
    'iterable': TypeTag.ITERABLE,
    'mixed': TypeTag.ANYTHING,
    'any': TypeTag.ANYTHING,
    'anything': TypeTag.ANYTHING,
}

_CANONICAL_KEYWORDS: Dict[TypeTag, str] = {
    TypeTag.NULL: 'null',
    TypeTag.BOOL: 'bool',
    TypeTag.INT: 'int',
    TypeTag.FLOAT: 'float',
    TypeTag.STRING: 'string',
    TypeTag.COMPOSITE: 'array',
    TypeTag.OBJECT: 'object',
    TypeTag.HANDLE: 'resource',
    TypeTag.CALLABLE: 'callable',
    TypeTag.SCALAR: 'scalar',
    TypeTag.NUMBER: 'number',
    TypeTag.ITERABLE: 'iterable',
    TypeTag.ANYTHING: 'mixed',
}

# Bare word: letters, digits, underscore; segments joined by '.'
IDENTIFIER_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*')


def is_identifier(name: str) -> bool:
    return IDENTIFIER_RE.fullmatch(name) is not None


# =============================================================================
# NAMED TYPES
# =============================================================================

@dataclass(frozen=True)
class NamedType:
    """
    A class, interface or trait name.

    The name is only checked lexically here. Whether a value answers to it
    is decided at match time from the value's capability set.
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not is_identifier(self.name):
            raise InvalidTypeName(self.name)
        if self.name in KEYWORDS:
            raise InvalidTypeName(self.name, "reserved keyword, use the TypeTag instead")

    @property
    def keyword(self) -> str:
        return self.name

    @classmethod
    def for_class(cls, klass: type) -> 'NamedType':
        """Name a class by its qualified path, or its bare name for local classes."""
        return cls(class_name(klass))


TypeMember = Union[TypeTag, NamedType]


def class_name(klass: type) -> str:
    qualified = f"{klass.__module__}.{klass.__qualname__}"
    if is_identifier(qualified):
        return qualified
    return klass.__name__


# =============================================================================
# VALUE -> TAG
# =============================================================================

COMPOSITE_TYPES: Tuple[type, ...] = (list, tuple, dict, set, frozenset, bytes, bytearray)

HANDLE_TYPES: Tuple[type, ...] = (io.IOBase, socket.socket, mmap.mmap)

CALLABLE_TYPES: Tuple[type, ...] = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    functools.partial,
    type,
)


def tag_of(value: Any) -> TypeTag:
    """
    Return the concrete TypeTag of a value.

    bool is tested before int, since bool is an int subclass in Python.
    Instances of classes with __call__ are OBJECT; only functions, methods,
    partials and classes themselves are CALLABLE.
    """
    if value is None:
        return TypeTag.NULL

    if isinstance(value, bool):
        return TypeTag.BOOL

    if isinstance(value, int):
        return TypeTag.INT

    if isinstance(value, float):
        return TypeTag.FLOAT

    if isinstance(value, str):
        return TypeTag.STRING

    if isinstance(value, COMPOSITE_TYPES):
        return TypeTag.COMPOSITE

    if isinstance(value, HANDLE_TYPES):
        return TypeTag.HANDLE

    if isinstance(value, CALLABLE_TYPES):
        return TypeTag.CALLABLE

    return TypeTag.OBJECT


def type_name(value: Any) -> str:
    """Human-readable type of a value, for diagnostics."""
    tag = tag_of(value)
    if tag in (TypeTag.OBJECT, TypeTag.HANDLE):
        return class_name(type(value))
    return tag.keyword
