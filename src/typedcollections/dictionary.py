"""
Dictionary: a mapping that accepts keys of any type

Keys are stored under their canonical index (see codec.py), so lists, dicts,
None and arbitrary objects all work as keys, and 1, 1.0, "1" and True are
four different keys. The original key is kept alongside its value in a Pair.

Instances of other classes are keyed by identity, so only the very object
that was stored finds its entry again. For value-like classes such as
datetime.date, key by a content-typed form instead (date.isoformat(), a
tuple of fields).

Examples:
    customers = Dictionary('int', 'Customer')
    sales = Dictionary('string', 'float')      # keyed by date.isoformat()
    car_make = Dictionary('string', '?string')
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple
import copy
import logging

from .codec import KeyCodec
from .collection import Collection
from .errors import DuplicateKey, UnknownKey
from .pair import Pair
from .types import type_name
from .typeset import TypeSet

logger = logging.getLogger(__name__)

INFER = True

_MISSING = object()


class Dictionary(Collection):
    """
    Ordered mapping with optional key and value type constraints.

    Allowed types can be given as:
    - None: any type
    - a string: 'string', 'int|null', '?int'
    - an iterable of names or classes: ['string', 'int'], [int, str]
    - a TypeSet
    - True: infer from the source (the default)

    Args:
        key_types: Allowed key types
        value_types: Allowed value types
        source: Mapping, or iterable of (key, value) tuples or Pairs
        codec: Key codec (default: the process-wide codec)

    Raises:
        InvalidTypeName: A type name is malformed
        TypeMismatch: A source key or value has a disallowed type
    """

    def __init__(
        self,
        key_types: Any = INFER,
        value_types: Any = INFER,
        source: Any = (),
        codec: Optional[KeyCodec] = None
    ):
        infer_keys = key_types is INFER
        infer_values = value_types is INFER

        super().__init__(None if infer_values else value_types, codec)
        self.key_types = TypeSet(None if infer_keys else key_types)
        self._items: Dict[str, Pair] = {}

        for key, value in _pairs_of(source):
            if infer_keys:
                self.key_types.infer(key)
            if infer_values:
                self.value_types.infer(value)
            self[key] = value

    @classmethod
    def combine(
        cls,
        keys: Iterable[Any],
        values: Iterable[Any],
        infer_types: bool = True,
        codec: Optional[KeyCodec] = None
    ) -> 'Dictionary':
        """
        Build a Dictionary from parallel iterables of keys and values.

        Args:
            keys: The keys
            values: The values, same count as keys
            infer_types: Infer key and value types (otherwise any type is allowed)

        Raises:
            ValueError: Counts differ
            DuplicateKey: A key repeats
        """
        key_list = list(keys)
        value_list = list(values)
        if len(key_list) != len(value_list):
            raise ValueError(
                f"Cannot combine: keys count ({len(key_list)}) does not match "
                f"values count ({len(value_list)})."
            )

        result = cls(None, None, codec=codec)
        for key, value in zip(key_list, value_list):
            if key in result:
                raise DuplicateKey(key, 'combine')
            if infer_types:
                result.key_types.infer(key)
                result.value_types.infer(value)
            result[key] = value
        return result

    # =========================================================================
    # INDEXING
    # =========================================================================

    def _index_of(self, key: Any) -> str:
        """Validate a key's type and return its index if present."""
        self.key_types.check(key, 'key')
        index = self.codec.encode(key, mint=False)
        if index not in self._items:
            raise UnknownKey(key)
        return index

    def __setitem__(self, key: Any, value: Any) -> None:
        self.key_types.check(key, 'key')
        self.value_types.check(value, 'value')
        self._items[self.codec.encode(key)] = Pair(key, value)

    def __getitem__(self, key: Any) -> Any:
        return self._items[self._index_of(key)].value

    def __delitem__(self, key: Any) -> None:
        del self._items[self._index_of(key)]

    def __contains__(self, key: Any) -> bool:
        # Existence checks never raise, whatever the key looks like
        if not self.key_types.match(key):
            return False
        try:
            index = self.codec.encode(key, mint=False)
        except ValueError:
            return False
        return index in self._items

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        for pair in self._items.values():
            yield pair.key, pair.value

    def __eq__(self, other: object) -> bool:
        return self.equal(other)

    __hash__ = None

    def __repr__(self) -> str:
        items = ', '.join(f"{pair.key!r}: {pair.value!r}" for pair in self._items.values())
        return f"Dictionary({self.key_types!r}, {self.value_types!r}, {{{items}}})"

    # =========================================================================
    # ADDING AND REMOVING
    # =========================================================================

    def add(self, key_or_pair: Any, value: Any = _MISSING) -> 'Dictionary':
        """
        Add a key-value pair.

        Call with a key and a value, or with a single Pair.

        Raises:
            TypeError: One argument was given and it is not a Pair
            TypeMismatch: The key or value has a disallowed type
        """
        if value is _MISSING:
            if not isinstance(key_or_pair, Pair):
                raise TypeError(f"Invalid key-value pair: {key_or_pair!r}")
            key, value = key_or_pair.key, key_or_pair.value
        else:
            key = key_or_pair
        self[key] = value
        return self

    def update(self, source: Any) -> 'Dictionary':
        """Add pairs from a mapping or an iterable of (key, value) items."""
        for key, value in _pairs_of(source):
            self[key] = value
        return self

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value for `key`, or `default` if absent. Disallowed key types still raise."""
        self.key_types.check(key, 'key')
        pair = self._items.get(self.codec.encode(key, mint=False))
        return default if pair is None else pair.value

    def remove_by_key(self, key: Any) -> Any:
        """
        Remove a key and return its value.

        Raises:
            TypeMismatch: The key has a disallowed type
            UnknownKey: The key is not present
        """
        return self._items.pop(self._index_of(key)).value

    def remove_by_value(self, value: Any) -> int:
        """Remove every pair whose value is strictly equal to `value`. Returns the count."""
        self.value_types.check(value, 'value')
        doomed = [index for index, pair in self._items.items() if self.same(pair.value, value)]
        for index in doomed:
            del self._items[index]
        return len(doomed)

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def key_exists(self, key: Any) -> bool:
        return key in self

    def contains(self, value: Any) -> bool:
        """
        True if some pair holds `value`.

        This is a linear scan; keep a reverse Dictionary for frequent lookups.
        """
        return any(self.same(pair.value, value) for pair in self._items.values())

    def equal(self, other: Any) -> bool:
        """
        True if `other` is a Dictionary with the same keys, values and order.

        Type constraints are not compared, only contents.
        """
        if not isinstance(other, Dictionary) or len(self) != len(other):
            return False
        for mine, theirs in zip(self._items.values(), other._items.values()):
            if not (self.same(mine.key, theirs.key) and self.same(mine.value, theirs.value)):
                return False
        return True

    def keys(self) -> List[Any]:
        return [pair.key for pair in self._items.values()]

    def values(self) -> List[Any]:
        return [pair.value for pair in self._items.values()]

    def items(self) -> List[Tuple[Any, Any]]:
        return list(self)

    def pairs(self) -> Iterator[Pair]:
        return iter(list(self._items.values()))

    def to_list(self) -> List[Pair]:
        return list(self._items.values())

    # =========================================================================
    # SORTING
    # =========================================================================

    def sort(self, key: Optional[Callable[[Pair], Any]] = None, reverse: bool = False) -> 'Dictionary':
        """Reorder the pairs in place by `key(pair)`, or by key when no callback is given."""
        if key is None:
            key = _by_key
        ordered = sorted(self._items.items(), key=lambda item: key(item[1]), reverse=reverse)
        self._items = dict(ordered)
        return self

    def sort_by_key(self, reverse: bool = False) -> 'Dictionary':
        return self.sort(_by_key, reverse)

    def sort_by_value(self, reverse: bool = False) -> 'Dictionary':
        return self.sort(lambda pair: pair.value, reverse)

    # =========================================================================
    # TRANSFORMATIONS
    # =========================================================================

    def filter(self, fn: Callable[[Any, Any], bool]) -> 'Dictionary':
        """
        Return a new Dictionary with the pairs for which fn(key, value) is True.

        The result has the same constraints and codec.

        Raises:
            TypeError: The callback returned something other than a bool
        """
        result = Dictionary(self.key_types, self.value_types, codec=self.codec)
        for index, pair in self._items.items():
            keep = fn(pair.key, pair.value)
            if not isinstance(keep, bool):
                raise TypeError(f"The filter callback must return a bool, got {type_name(keep)}.")
            if keep:
                result._items[index] = copy.copy(pair)
        return result

    def flip(self) -> 'Dictionary':
        """
        Swap keys and values.

        Raises:
            DuplicateKey: Two pairs share a value
        """
        result = Dictionary(self.value_types, self.key_types, codec=self.codec)
        for pair in self._items.values():
            if pair.value in result:
                raise DuplicateKey(pair.value, 'flip')
            result[pair.value] = pair.key
        return result

    def map(self, fn: Callable[[Pair], Pair]) -> 'Dictionary':
        """
        Transform every pair with fn(pair) -> Pair.

        Keys and values may change type; the result's constraints are inferred
        from what the callback returns.

        Raises:
            TypeError: The callback returned something other than a Pair
            DuplicateKey: Two results share a key
        """
        result = Dictionary(None, None, codec=self.codec)
        for pair in self._items.values():
            new_pair = fn(pair)
            if not isinstance(new_pair, Pair):
                raise TypeError(f"Map callback must return a Pair, got {type_name(new_pair)}.")
            if new_pair.key in result:
                raise DuplicateKey(new_pair.key, 'map')
            result.key_types.infer(new_pair.key)
            result.value_types.infer(new_pair.value)
            result.add(new_pair)
        return result

    def merge(self, other: 'Dictionary') -> 'Dictionary':
        """
        Return a new Dictionary holding the pairs of both.

        When a key is in both, the pair from `other` wins and keeps the
        position the key had in this Dictionary. Constraints are the union
        of both; if either side is unconstrained, so is the result.
        """
        result = Dictionary(
            _union(self.key_types, other.key_types),
            _union(self.value_types, other.value_types),
            codec=self.codec
        )

        for source in (self, other):
            for pair in source._items.values():
                result._items[result.codec.encode(pair.key)] = copy.copy(pair)

        logger.debug("Merged dictionaries of %d and %d pairs into %d", len(self), len(other), len(result))
        return result


def _by_key(pair: Pair) -> Any:
    return pair.key


def _union(a: TypeSet, b: TypeSet) -> TypeSet:
    # An unconstrained side keeps the result unconstrained
    if a.any_ok() or b.any_ok():
        return TypeSet(None, a.capabilities)
    return TypeSet(a).add(b)


def _pairs_of(source: Any) -> Iterator[Tuple[Any, Any]]:
    """Yield (key, value) from a mapping, a Dictionary, or an iterable of pairs."""
    if isinstance(source, Mapping):
        yield from source.items()
        return
    for item in source:
        if isinstance(item, Pair):
            yield item.key, item.value
        else:
            key, value = item
            yield key, value
