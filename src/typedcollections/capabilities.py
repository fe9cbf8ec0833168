"""
Capability sets for named types.

A value answers to a NamedType when the name is in its capability set:
- every class on its MRO, by bare name and by qualified path
- every trait declared for any of those classes
- every interface name whose ABC the value is an instance of

Class-derived names are cached per class, so most matches are a set
membership test. Interface checks always go through isinstance(), which
follows later ABC.register() calls.
"""

from __future__ import annotations
from abc import ABCMeta
from typing import Any, Callable, Dict, FrozenSet, Optional, Set
import collections.abc
import logging
import threading

from .errors import InvalidTypeName
from .types import class_name, is_identifier

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """
    Host-supplied capability declarations for named types.

    Usage:
        caps = CapabilityRegistry()
        caps.declare(Invoice, 'Billable', factory=Invoice)
        caps.interface('Sized', collections.abc.Sized)

        caps.capabilities_of(Invoice())
        # frozenset({'Invoice', 'app.Invoice', 'Billable', 'Sized', 'object', ...})
    """

    # Interfaces every registry knows about
    STANDARD_INTERFACES: Dict[str, ABCMeta] = {
        'Sized': collections.abc.Sized,
        'Hashable': collections.abc.Hashable,
        'Container': collections.abc.Container,
        'Collection': collections.abc.Collection,
        'Sequence': collections.abc.Sequence,
        'Mapping': collections.abc.Mapping,
        'Iterator': collections.abc.Iterator,
    }

    def __init__(self, standard_interfaces: bool = True):
        self._traits: Dict[type, Set[str]] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._interfaces: Dict[str, ABCMeta] = {}
        self._cache: Dict[type, FrozenSet[str]] = {}
        self._lock = threading.Lock()
        if standard_interfaces:
            self._interfaces.update(self.STANDARD_INTERFACES)

    def declare(
        self,
        klass: type,
        *traits: str,
        factory: Optional[Callable[[], Any]] = None
    ) -> type:
        """
        Declare extra capabilities for a class.

        Args:
            klass: The class being described
            traits: Trait names instances of klass (and its subclasses) satisfy
            factory: Zero-argument callable producing a default instance

        Returns:
            klass, so the method can be used as a decorator helper
        """
        for trait in traits:
            if not is_identifier(trait):
                raise InvalidTypeName(trait)
        with self._lock:
            self._traits.setdefault(klass, set()).update(traits)
            if factory is not None:
                self._factories[klass.__name__] = factory
                self._factories[class_name(klass)] = factory
            self._cache.clear()
        logger.debug("Declared capabilities %s for %s", sorted(traits), class_name(klass))
        return klass

    def interface(self, name: str, abc_class: type) -> None:
        """Make `name` match every instance of `abc_class`, including virtual subclasses."""
        if not is_identifier(name):
            raise InvalidTypeName(name)
        with self._lock:
            self._interfaces[name] = abc_class

    def factory_for(self, name: str) -> Optional[Callable[[], Any]]:
        return self._factories.get(name)

    def capabilities_of(self, value: Any) -> FrozenSet[str]:
        """Return every name `value` answers to."""
        names = set(self._class_names(type(value)))
        for name, abc_class in self._interfaces.items():
            if isinstance(value, abc_class):
                names.add(name)
        return frozenset(names)

    def satisfies(self, value: Any, name: str) -> bool:
        if name in self._class_names(type(value)):
            return True
        abc_class = self._interfaces.get(name)
        return abc_class is not None and isinstance(value, abc_class)

    def _class_names(self, klass: type) -> FrozenSet[str]:
        # Interfaces stay out of the cache: ABC.register() can change them at any time
        cached = self._cache.get(klass)
        if cached is not None:
            return cached

        names: Set[str] = set()
        for ancestor in klass.__mro__:
            names.add(ancestor.__name__)
            names.add(class_name(ancestor))
            names.update(self._traits.get(ancestor, ()))

        result = frozenset(names)
        with self._lock:
            self._cache[klass] = result
        return result


# Default registry shared by TypeSets that are not given one
default_capabilities = CapabilityRegistry()
