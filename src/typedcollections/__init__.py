"""
typedcollections: containers with runtime type constraints

Two engines:
- KeyCodec: any value -> canonical string index, injective under strict
  equality, with identity tokens for objects, handles and callables
- TypeSet: union/nullable type constraints with pseudo-types, named-type
  capability matching, inference and default values

Usage:
    from typedcollections import Dictionary, TypeSet

    ts = TypeSet('?int|string')
    ts.check(3.14, 'value')          # raises TypeMismatch

    d = Dictionary('mixed', 'string')
    d[[1, 2, 3]] = 'list key'
    d[[1, 2, 3]]                     # 'list key'
    d[True] = 'bool key'             # a different key from 1
"""

# Types
from .types import (
    TypeTag,
    NamedType,
    KEYWORDS,
    tag_of,
    type_name,
)

# Errors
from .errors import (
    CollectionError,
    InvalidTypeName,
    TypeMismatch,
    NoDefaultAvailable,
    UnknownKey,
    DuplicateKey,
)

# Engines
from .capabilities import CapabilityRegistry, default_capabilities
from .registry import IdentityRegistry
from .codec import KeyCodec, default_codec, encode_key
from .typeset import TypeSet

# Containers
from .pair import Pair
from .collection import Collection
from .dictionary import Dictionary

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Types
    "TypeTag",
    "NamedType",
    "KEYWORDS",
    "tag_of",
    "type_name",
    # Errors
    "CollectionError",
    "InvalidTypeName",
    "TypeMismatch",
    "NoDefaultAvailable",
    "UnknownKey",
    "DuplicateKey",
    # Engines
    "CapabilityRegistry",
    "default_capabilities",
    "IdentityRegistry",
    "KeyCodec",
    "default_codec",
    "encode_key",
    "TypeSet",
    # Containers
    "Pair",
    "Collection",
    "Dictionary",
]
