"""
Attribute Adapter Unit Tests

Tests for the adapter cache, registry and the pydantic adapter
"""

from typing import Optional

import pytest
from pydantic import BaseModel, ConfigDict, computed_field

from entitykit import Entity
from entitykit.adapters import (
    AdapterCache,
    AdapterRegistry,
    FunctionAdapter,
    PydanticAdapter,
    adapter_registry,
    type_identifier,
)
from entitykit.errors import ConfigurationError, MissingAttributeError


class Address(BaseModel):
    model_config = ConfigDict(extra="allow")

    street: str
    city: Optional[str] = None

    @computed_field
    @property
    def label(self) -> str:
        return f"{self.street}, {self.city}"

    def short(self):
        return self.street.split()[0]


class AddressEntity(Entity):
    pass


class TestAdapterCache:
    """Tests for the two-level cache"""

    def test_get_set(self):
        """Test values are stored per type and field"""
        cache = AdapterCache()
        cache.set("pkg.User", "name", "John")
        assert cache.get("pkg.User", "name") == "John"
        assert cache.get("pkg.User", "email") is None
        assert cache.get("pkg.Admin", "name", "fallback") == "fallback"
        assert cache.has("pkg.User", "name")
        assert not cache.has("pkg.Admin", "name")
        assert len(cache) == 1

    def test_clear(self):
        """Test explicit reset"""
        cache = AdapterCache()
        cache.set("pkg.User", "name", "John")
        cache.clear()
        assert len(cache) == 0

    def test_type_identifier(self):
        """Test the stable type key"""
        assert type_identifier(Address) == f"{__name__}.Address"


class TestAdapterRegistry:
    """Tests for registration order and removal"""

    def test_register_and_find(self):
        """Test the first matching adapter wins"""
        registry = AdapterRegistry()
        ints = FunctionAdapter(lambda v: isinstance(v, int), lambda e, n, s, c: "int")
        numbers = FunctionAdapter(lambda v: isinstance(v, (int, float)), lambda e, n, s, c: "num")
        registry.register("ints", ints)
        registry.register("numbers", numbers)

        assert registry.find(1).adapter is ints
        assert registry.find(1.5).adapter is numbers
        assert registry.find("x") is None
        assert registry.names() == ["ints", "numbers"]

    def test_remove_with_none(self):
        """Test registering None removes the adapter"""
        registry = AdapterRegistry()
        registry.register("ints", FunctionAdapter(lambda v: True, lambda e, n, s, c: 1))
        registry.register("ints", None)
        assert len(registry) == 0
        registry.register("unknown", None)

    def test_replace_resets_cache(self):
        """Test re-registering starts from an empty cache"""
        registry = AdapterRegistry()
        adapter = FunctionAdapter(lambda v: True, lambda e, n, s, c: 1)
        registry.register("all", adapter)
        registry.get("all").cache.set("t", "f", 1)
        registry.register("all", adapter)
        assert len(registry.get("all").cache) == 0

    def test_rejects_non_adapter(self):
        """Test only AttributeAdapter instances are accepted"""
        registry = AdapterRegistry()
        with pytest.raises(ConfigurationError):
            registry.register("bad", {"condition": lambda v: True})

    def test_default_registration(self):
        """Test the pydantic adapter is installed by default"""
        assert isinstance(adapter_registry.get("pydantic").adapter, PydanticAdapter)


class TestPydanticAdapter:
    """Tests for pydantic model resolution"""

    def resolve(self, model, name, safe=False):
        entry = adapter_registry.get("pydantic")
        return entry.adapter.resolve(AddressEntity(model), name, safe, entry.cache)

    def test_condition(self):
        """Test only models are handled"""
        adapter = PydanticAdapter()
        assert adapter.condition(Address(street="Main St"))
        assert not adapter.condition({"street": "Main St"})

    def test_fields(self):
        """Test declared, computed and extra fields"""
        address = Address(street="1 Main St", city="Springfield", zip="12345")
        assert self.resolve(address, "street") == "1 Main St"
        assert self.resolve(address, "label") == "1 Main St, Springfield"
        assert self.resolve(address, "zip") == "12345"

    def test_methods(self):
        """Test zero-argument model methods"""
        assert self.resolve(Address(street="1 Main St"), "short") == "1"

    def test_base_model_members_are_not_fields(self):
        """Test pydantic's own API is not exposed"""
        with pytest.raises(MissingAttributeError):
            self.resolve(Address(street="1 Main St"), "model_dump")

    def test_missing_safe(self):
        """Test safe lookups of missing fields"""
        assert self.resolve(Address(street="1 Main St"), "country", safe=True) is None

    def test_classification_cached(self):
        """Test the member kind is remembered per model type"""
        self.resolve(Address(street="1 Main St"), "street")
        cache = adapter_registry.get("pydantic").cache
        assert cache.get(type_identifier(Address), "street") == PydanticAdapter.FIELD
