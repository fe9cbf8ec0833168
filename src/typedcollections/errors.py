"""
Exception hierarchy for typedcollections.

Every error raised by the type engine or the containers derives from
CollectionError, and also from the builtin exception a caller would
reach for first (ValueError, TypeError, KeyError, RuntimeError).
"""

from __future__ import annotations
from typing import Any, Iterable


class CollectionError(Exception):
    """Base class for all typedcollections errors."""


class InvalidTypeName(CollectionError, ValueError):
    """A type specification is malformed or names nothing usable."""

    def __init__(self, name: Any, reason: str = "not a valid type name"):
        self.name = name
        super().__init__(f"Invalid type name {name!r}: {reason}.")


class TypeMismatch(CollectionError, TypeError):
    """
    A value does not satisfy a TypeSet.

    Attributes:
        label: Role of the value ("key", "value", or caller-defined)
        expected: Names of the allowed types, sorted
        actual: Name of the value's own type
        value: The offending value
        tag: The offending value's TypeTag
    """

    def __init__(
        self,
        label: str,
        expected: Iterable[str],
        actual: str,
        value: Any = None,
        tag: Any = None,
    ):
        self.label = label
        self.expected = tuple(expected)
        self.actual = actual
        self.value = value
        self.tag = tag
        allowed = ", ".join(self.expected)
        super().__init__(
            f"Disallowed {label} type: {actual}. Allowed types: {{{allowed}}}."
        )


class NoDefaultAvailable(CollectionError, RuntimeError):
    """No default value can be derived for a TypeSet."""

    def __init__(self, typeset: Any = None):
        self.typeset = typeset
        message = "No default value could be determined for this TypeSet"
        if typeset is not None:
            message += f" {typeset}"
        super().__init__(message + ".")


class UnknownKey(CollectionError, KeyError):
    """A lookup or removal targets a key that is not present."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the whole args tuple
        return f"Unknown key: {_abbrev(self.key)}."


class DuplicateKey(CollectionError, ValueError):
    """An operation would produce the same key twice."""

    def __init__(self, key: Any, operation: str):
        self.key = key
        self.operation = operation
        super().__init__(f"Cannot {operation}: duplicate key {_abbrev(self.key)}.")


def _abbrev(value: Any, max_len: int = 40) -> str:
    text = repr(value)
    if len(text) > max_len:
        return text[:max_len - 3] + "..."
    return text
