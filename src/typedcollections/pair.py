"""Immutable key/value record stored by Dictionary."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(frozen=True)
class Pair:
    """
    A key and its value.

    Pairs are never mutated; replacing a key's value in a Dictionary stores a
    new Pair. The key is kept in its original, un-encoded form.
    """
    key: Any
    value: Any

    def __iter__(self) -> Iterator[Any]:
        # Allows `key, value = pair`
        yield self.key
        yield self.value
