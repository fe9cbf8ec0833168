import pytest

from typedcollections import CapabilityRegistry, IdentityRegistry, KeyCodec


@pytest.fixture
def registry():
    """A fresh identity registry, isolated from the process default."""
    return IdentityRegistry()


@pytest.fixture
def codec(registry):
    """A key codec over a fresh registry."""
    return KeyCodec(registry)


@pytest.fixture
def capabilities():
    """A fresh capability registry with the standard interfaces."""
    return CapabilityRegistry()
