"""
TypeSet: runtime type constraints

A TypeSet is a set of TypeTags and NamedTypes. A value satisfies the set when
its own tag is a member, when a pseudo-tag member covers its tag, or when one
of the named members is in its capability set.

Specification grammar:
    spec := '?'? name ('|' name)*
    name := keyword | identifier

An empty TypeSet, or one containing ANYTHING, accepts every value including
None. Sets only grow.
"""

from __future__ import annotations
from collections.abc import Iterable
from types import SimpleNamespace
from typing import Any, Iterator, List, Optional, Set, Tuple, Union
import logging

from .capabilities import CapabilityRegistry, default_capabilities
from .errors import InvalidTypeName, NoDefaultAvailable, TypeMismatch
from .types import (
    KEYWORDS, PSEUDO_EXPANSION, NamedType, TypeMember, TypeTag,
    is_identifier, tag_of, type_name,
)

logger = logging.getLogger(__name__)


# Builtin classes accepted in place of keywords, e.g. TypeSet([int, str])
CLASS_TAGS = {
    type(None): TypeTag.NULL,
    bool: TypeTag.BOOL,
    int: TypeTag.INT,
    float: TypeTag.FLOAT,
    str: TypeTag.STRING,
    list: TypeTag.COMPOSITE,
    tuple: TypeTag.COMPOSITE,
    dict: TypeTag.COMPOSITE,
    set: TypeTag.COMPOSITE,
    frozenset: TypeTag.COMPOSITE,
    bytes: TypeTag.COMPOSITE,
    bytearray: TypeTag.COMPOSITE,
    object: TypeTag.OBJECT,
}

NULLABLE_MARKER = '?'
UNION_DELIMITER = '|'

TypeSpec = Union[None, str, TypeTag, NamedType, type, 'TypeSet', Iterable[Any]]


class TypeSet:
    """
    A set of allowed types.

    Usage:
        ts = TypeSet('?int|string')
        ts.match(None)            # True
        ts.match(3.14)            # False
        ts.check(3.14, 'value')   # raises TypeMismatch
        ts.default_value()        # None

    Args:
        types: None, a specification string, a TypeTag, a NamedType, a class,
            another TypeSet, or an iterable of any of these
        capabilities: Registry used to resolve named types (default: the
            process-wide registry)
    """

    def __init__(
        self,
        types: TypeSpec = None,
        capabilities: Optional[CapabilityRegistry] = None
    ):
        if capabilities is None and isinstance(types, TypeSet):
            capabilities = types.capabilities
        self.capabilities = capabilities if capabilities is not None else default_capabilities
        self._members: Set[TypeMember] = set()
        self.add(types)

    @classmethod
    def from_spec(cls, spec: TypeSpec, capabilities: Optional[CapabilityRegistry] = None) -> 'TypeSet':
        """Build a TypeSet from a specification."""
        return cls(spec, capabilities)

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def add(self, types: TypeSpec) -> 'TypeSet':
        """
        Add one or more types to the set.

        Raises:
            InvalidTypeName: A name is malformed
            TypeError: An item is not a name, tag, class or TypeSet
        """
        for member in self._resolve(types):
            self._members.add(member)
        return self

    def infer(self, value: Any) -> 'TypeSet':
        """
        Grow the set so that it accepts `value`.

        Instances of user classes add their class as a NamedType, or OBJECT
        when the class name is not usable as one. Everything else adds its
        concrete tag.
        """
        tag = tag_of(value)
        member: TypeMember = tag
        if tag == TypeTag.OBJECT:
            try:
                member = NamedType.for_class(type(value))
            except InvalidTypeName:
                # A local class whose bare name is a keyword, e.g. `class number`
                member = TypeTag.OBJECT
        if member not in self._members:
            logger.debug("Inferred type %s from %r", member.keyword, type(value).__name__)
            self._members.add(member)
        return self

    @classmethod
    def _resolve(cls, types: TypeSpec) -> Iterator[TypeMember]:
        if types is None:
            return

        if isinstance(types, TypeSet):
            yield from types._members

        elif isinstance(types, (TypeTag, NamedType)):
            yield types

        elif isinstance(types, str):
            yield from cls._parse(types)

        elif isinstance(types, type):
            yield cls._resolve_class(types)

        elif isinstance(types, Iterable):
            for item in types:
                if not isinstance(item, (str, TypeTag, NamedType, type, TypeSet)):
                    raise TypeError(f"Type names must be strings, got {type(item).__name__}")
                yield from cls._resolve(item)

        else:
            raise TypeError(f"Cannot build a TypeSet from {type(types).__name__}")

    @classmethod
    def _parse(cls, spec: str) -> Iterator[TypeMember]:
        text = spec.strip()
        if text.startswith(NULLABLE_MARKER):
            yield TypeTag.NULL
            text = text[len(NULLABLE_MARKER):]

        for part in text.split(UNION_DELIMITER):
            yield cls._parse_name(part, spec)

    @staticmethod
    def _parse_name(part: str, spec: str) -> TypeMember:
        name = part.strip()
        if name in KEYWORDS:
            return KEYWORDS[name]
        if not is_identifier(name):
            raise InvalidTypeName(spec)
        return NamedType(name)

    @staticmethod
    def _resolve_class(klass: type) -> TypeMember:
        tag = CLASS_TAGS.get(klass)
        if tag is not None:
            return tag
        return NamedType.for_class(klass)

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, value: Any) -> bool:
        """Return True iff `value` satisfies this TypeSet."""
        if self.any_ok():
            return True

        tag = tag_of(value)
        if tag in self._members:
            return True

        for member in self._members:
            if isinstance(member, NamedType):
                if self.capabilities.satisfies(value, member.name):
                    return True
            elif member == TypeTag.CALLABLE:
                if callable(value):
                    return True
            elif member == TypeTag.ITERABLE:
                if _is_iterable(value, tag):
                    return True
            elif member.is_pseudo and tag in PSEUDO_EXPANSION[member]:
                return True

        return False

    def check(self, value: Any, label: str = 'value') -> None:
        """
        Raise TypeMismatch unless `value` satisfies this TypeSet.

        Args:
            value: The value to test
            label: Role of the value in the message ("key", "value", ...)
        """
        if not self.match(value):
            raise TypeMismatch(label, self.names(), type_name(value), value, tag_of(value))

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def contains(self, member: Any) -> bool:
        return self._single(member) in self._members

    def contains_all(self, *members: Any) -> bool:
        return all(self.contains(m) for m in members)

    def contains_any(self, *members: Any) -> bool:
        return any(self.contains(m) for m in members)

    def contains_only(self, *members: Any) -> bool:
        """True iff the set holds exactly these members, in any order."""
        return {self._single(m) for m in members} == self._members

    def is_empty(self) -> bool:
        return not self._members

    def any_ok(self) -> bool:
        return not self._members or TypeTag.ANYTHING in self._members

    def null_ok(self) -> bool:
        return self.any_ok() or TypeTag.NULL in self._members

    def names(self) -> List[str]:
        """Member names, tags first in tag order, then named types alphabetically."""
        return [m.keyword for m in sorted(self._members, key=_member_order)]

    @classmethod
    def _single(cls, member: Any) -> TypeMember:
        resolved = list(cls._resolve(member))
        if len(resolved) != 1:
            raise InvalidTypeName(member, "expected a single type")
        return resolved[0]

    # =========================================================================
    # DEFAULT VALUE
    # =========================================================================

    def default_value(self) -> Any:
        """
        Derive the zero value for this set.

        Priority: null (also an unconstrained set), bool, int (also number/scalar), float, string,
        array (also iterable), object, then the first named type with a
        registered factory.

        Raises:
            NoDefaultAvailable: Nothing in the set has a zero value
        """
        members = self._members

        if self.null_ok():
            return None
        if TypeTag.BOOL in members:
            return False
        if members & {TypeTag.INT, TypeTag.NUMBER, TypeTag.SCALAR}:
            return 0
        if TypeTag.FLOAT in members:
            return 0.0
        if TypeTag.STRING in members:
            return ''
        if members & {TypeTag.COMPOSITE, TypeTag.ITERABLE}:
            return []
        if TypeTag.OBJECT in members:
            return SimpleNamespace()

        for member in sorted(members, key=_member_order):
            if isinstance(member, NamedType):
                factory = self.capabilities.factory_for(member.name)
                if factory is not None:
                    return factory()

        raise NoDefaultAvailable(self)

    # =========================================================================
    # PROTOCOLS
    # =========================================================================

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[TypeMember]:
        return iter(sorted(self._members, key=_member_order))

    def __contains__(self, member: Any) -> bool:
        return self.contains(member)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeSet):
            return NotImplemented
        return self._members == other._members

    __hash__ = None

    def __str__(self) -> str:
        return '{' + ', '.join(self.names()) + '}'

    def __repr__(self) -> str:
        if not self._members:
            return "TypeSet()"
        return f"TypeSet({'|'.join(self.names())!r})"


def _member_order(member: TypeMember) -> Tuple[int, Union[int, str]]:
    if isinstance(member, TypeTag):
        return (0, int(member))
    return (1, member.name)


def _is_iterable(value: Any, tag: TypeTag) -> bool:
    # Text is a scalar here even though Python can iterate it
    if tag == TypeTag.COMPOSITE:
        return True
    return tag != TypeTag.STRING and hasattr(type(value), '__iter__')
