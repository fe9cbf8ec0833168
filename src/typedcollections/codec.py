"""
KeyCodec: canonical string index for any value

Properties:
1. Deterministic: the same value always produces the same index
2. Strict: encode(a) == encode(b) iff a and b have the same tag and content,
   or are the same instance for identity-bearing kinds (for bound methods:
   the same instance and the same function)
3. Domain separated: a one-letter prefix per kind, so 1, 1.0, "1" and True
   never collide

INDEX = PREFIX ‖ CONTENT

Composite elements are written as LEN ':' INDEX, so concatenating them is
unambiguous without any escaping.
"""

from __future__ import annotations
from types import MethodType
from typing import Any, List, Optional, Set
import math

from .registry import IdentityRegistry
from .types import TypeTag, tag_of


class KeyCodec:
    """
    Canonical key encoder.

    Usage:
        codec = KeyCodec()
        codec.encode(1)          # 'i1'
        codec.encode("1")        # 's1'
        codec.encode(True)       # 'b1'
        codec.encode([1, "a"])   # 'l2[2:i12:sa]'

    Objects, handles and callables are encoded by identity through the
    codec's IdentityRegistry. Containers that need to agree on object keys
    must share a codec (or at least a registry).

    Equal-looking instances are still different keys: two datetime.date
    objects for the same day do not find each other. Bound methods are the
    exception. Each `obj.method` access builds a new method object, so a
    bound method is keyed by its instance and its function instead.

    Lookups should pass mint=False. An instance the registry has never seen
    then gets a transient marker instead of a token, which no stored index
    can contain, and the registry is left untouched.
    """

    NULL_INDEX = 'n'
    TRUE_INDEX = 'b1'
    FALSE_INDEX = 'b0'

    IDENTITY_PREFIX = {
        TypeTag.OBJECT: 'o#',
        TypeTag.HANDLE: 'h#',
        TypeTag.CALLABLE: 'c#',
    }

    # Tokens are hex digits, so this can never start one
    TRANSIENT_MARKER = '~'

    def __init__(self, registry: Optional[IdentityRegistry] = None):
        self.registry = registry if registry is not None else IdentityRegistry()

    def encode(self, value: Any, mint: bool = True) -> str:
        """
        Encode a value to its canonical index.

        Args:
            value: Any value that already passed type validation
            mint: Register unseen instances. With False the result is only
                good for comparing against existing indexes while `value`
                is alive.

        Returns:
            The canonical index string

        Raises:
            ValueError: For NaN, or for a composite that contains itself
        """
        return self._encode(value, set(), mint)

    def same(self, a: Any, b: Any) -> bool:
        """
        Strict equality as the codec sees it.

        Never mints a token. NaN equals nothing but its own instance.
        """
        if a is b:
            return True
        if tag_of(a) != tag_of(b):
            return False
        try:
            return self.encode(a, mint=False) == self.encode(b, mint=False)
        except ValueError:
            return False

    def _encode(self, value: Any, active: Set[int], mint: bool) -> str:
        tag = tag_of(value)

        if tag == TypeTag.NULL:
            return self.NULL_INDEX

        elif tag == TypeTag.BOOL:
            return self.TRUE_INDEX if value else self.FALSE_INDEX

        elif tag == TypeTag.INT:
            return 'i' + str(int(value))

        elif tag == TypeTag.FLOAT:
            return 'f' + self._encode_float(value)

        elif tag == TypeTag.STRING:
            return 's' + value

        elif tag == TypeTag.COMPOSITE:
            return self._encode_composite(value, active, mint)

        if isinstance(value, MethodType):
            token = self._token(value.__self__, mint) + '.' + self._token(value.__func__, mint)
        else:
            token = self._token(value, mint)
        return self.IDENTITY_PREFIX[tag] + token

    def _token(self, value: Any, mint: bool) -> str:
        if mint:
            return self.registry.token_for(value)
        token = self.registry.lookup(value)
        if token is None:
            return self.TRANSIENT_MARKER + format(id(value), 'x')
        return token

    @classmethod
    def _encode_float(cls, value: float) -> str:
        """
        Canonical float text.

        Rules:
        - NaN is not a usable key (NaN != NaN)
        - -0.0 -> 0.0, since the two compare equal
        - Otherwise repr(), which round-trips exactly
        """
        value = float(value)
        if math.isnan(value):
            raise ValueError("NaN cannot be used as a key")
        if value == 0.0:
            return '0.0'
        return repr(value)

    def _encode_composite(self, value: Any, active: Set[int], mint: bool) -> str:
        if isinstance(value, (bytes, bytearray)):
            prefix = 'y' if isinstance(value, bytes) else 'Y'
            return prefix + value.hex()

        marker = id(value)
        if marker in active:
            raise ValueError(f"Cannot encode self-referencing {type(value).__name__}")
        active.add(marker)
        try:
            if isinstance(value, dict):
                return self._encode_mapping(value, active, mint)
            if isinstance(value, (set, frozenset)):
                return self._encode_set(value, active, mint)
            return self._encode_sequence(value, active, mint)
        finally:
            active.discard(marker)

    def _encode_sequence(self, value: Any, active: Set[int], mint: bool) -> str:
        """
        Lists and tuples: count followed by elements in order.
        Order is part of the content.
        """
        prefix = 't' if isinstance(value, tuple) else 'l'
        parts = [_frame(self._encode(elem, active, mint)) for elem in value]
        return f"{prefix}{len(parts)}[{''.join(parts)}]"

    def _encode_mapping(self, value: dict, active: Set[int], mint: bool) -> str:
        """
        Dicts: count followed by entries sorted by encoded key.

        Python dict equality ignores insertion order, so the index does too.
        """
        entries: List[str] = []
        for k, v in value.items():
            entries.append(_frame(self._encode(k, active, mint)) + _frame(self._encode(v, active, mint)))
        entries.sort()
        return f"d{len(entries)}{{{''.join(entries)}}}"

    def _encode_set(self, value: Any, active: Set[int], mint: bool) -> str:
        """Sets: count followed by elements sorted by encoding."""
        prefix = 'F' if isinstance(value, frozenset) else 'S'
        parts = sorted(_frame(self._encode(elem, active, mint)) for elem in value)
        return f"{prefix}{len(parts)}{{{''.join(parts)}}}"


def _frame(index: str) -> str:
    return f"{len(index)}:{index}"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

# Default process-wide codec
default_codec = KeyCodec()


def encode_key(value: Any) -> str:
    """Encode a value with the default codec."""
    return default_codec.encode(value)
