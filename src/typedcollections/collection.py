"""
Collection: shared base for typed containers.

Holds the value constraint, the key codec and the item storage. Concrete
containers decide what the storage is keyed by.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from .codec import KeyCodec, default_codec
from .typeset import TypeSet, TypeSpec


class Collection(ABC):
    """
    Base class for typed containers.

    Args:
        value_types: Allowed value types (anything TypeSet accepts)
        codec: Key codec; containers that must agree on object identity
            should share one (default: the process-wide codec)
    """

    def __init__(self, value_types: TypeSpec = None, codec: Optional[KeyCodec] = None):
        self.codec = codec if codec is not None else default_codec
        self.value_types = TypeSet(value_types)
        self._items: Dict[Any, Any] = {}

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> 'Collection':
        self._items.clear()
        return self

    def same(self, a: Any, b: Any) -> bool:
        """Strict equality: same tag and content, or the same instance."""
        return self.codec.same(a, b)

    @abstractmethod
    def contains(self, value: Any) -> bool:
        """True if some item's value is strictly equal to `value`."""

    @abstractmethod
    def equal(self, other: Any) -> bool:
        """True if `other` is the same kind of collection with the same items in order."""

    @abstractmethod
    def filter(self, fn: Callable[..., bool]) -> 'Collection':
        """Return a new collection with the items `fn` keeps."""

    @abstractmethod
    def update(self, source: Any) -> 'Collection':
        """Add every item from `source`."""
