"""
Shared test fixtures

Key transformer, global formatters, adapter registrations and reflection
gates are process-wide; every test starts from the defaults.
"""

import pytest

from entitykit import Entity
from entitykit.adapters import adapter_registry, install_default_adapters
from entitykit.keys import set_key_transformer
from entitykit.reflection import Reflection


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore process-wide defaults around each test"""
    yield
    set_key_transformer(None)
    Entity._global_formatters.clear()
    for name in adapter_registry.names():
        adapter_registry.register(name, None)
    install_default_adapters(adapter_registry)
    Reflection.reset()


@pytest.fixture
def sample_entity():
    """A fresh, empty entity type"""
    return type("SampleEntity", (Entity,), {})
