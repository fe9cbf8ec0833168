"""
Identity registry for identity-bearing values.

Objects, handles and callables are keyed by instance, not by content. The
registry hands each instance a token the first time it is seen and returns
the same token on every later lookup.

Tokens come from a counter that only moves forward, so a token is never
re-issued. Entries hold a weak reference when the value supports one and
are dropped once the instance is collected; this keeps a recycled id()
from inheriting a dead instance's token. Values that cannot be weakly
referenced are held strongly and pinned for the life of the registry.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Tuple
import itertools
import logging
import threading
import weakref

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """
    Lookup-or-insert table from instance identity to token.

    Safe to share between containers and threads: token_for() holds a single
    lock around lookup-or-insert so a fresh instance gets exactly one token.
    """

    def __init__(self):
        self._entries: Dict[int, Tuple[str, Callable[[], Any]]] = {}
        self._counter = itertools.count(1)
        # Reentrant: a weakref callback can fire from GC while the lock is held
        self._lock = threading.RLock()

    def token_for(self, value: Any) -> str:
        """
        Return the token for `value`, minting one on first sight.

        Args:
            value: Any instance

        Returns:
            A token unique to this instance for as long as it is alive
        """
        key = id(value)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[1]() is value:
                return entry[0]

            token = format(next(self._counter), 'x')
            self._entries[key] = (token, self._reference(key, value))

        logger.debug("Minted identity token %s for %s", token, type(value).__name__)
        return token

    def lookup(self, value: Any) -> Optional[str]:
        """Return the token for `value` without minting one."""
        with self._lock:
            entry = self._entries.get(id(value))
        if entry is not None and entry[1]() is value:
            return entry[0]
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, value: Any) -> bool:
        return self.lookup(value) is not None

    def _reference(self, key: int, value: Any) -> Callable[[], Any]:
        try:
            return weakref.ref(value, lambda _ref: self._discard(key, _ref))
        except TypeError:
            return lambda: value

    def _discard(self, key: int, ref: weakref.ref) -> None:
        # The slot may already belong to a newer instance with the same id()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[1] is ref:
                del self._entries[key]
