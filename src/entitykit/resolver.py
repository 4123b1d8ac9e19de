"""
Attribute resolution chain

Resolves one field name against an input of unknown shape. Strategies are
tried in a fixed order and the first one that finds the field wins:

1. Mapping input: key lookup (plain functions stored as values are called)
2. Members of the entity type itself (derived values as methods)
3. Registered adapters (the first adapter whose condition matches)
4. Structured objects: data members, zero-argument methods, dynamic hooks
5. Nothing found: None when `safe`, otherwise MissingAttributeError
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, List, Optional

from .adapters import AdapterRegistry, adapter_registry
from .reflection import MISSING, Reflection
from .utils.callables import is_lazy_value

if TYPE_CHECKING:
    from .entity import Entity

# Entity instance state that never doubles as an exposed field
RESERVED_ENTITY_MEMBERS = frozenset({"object", "options"})


class ResolutionStrategy(ABC):
    """One link of the chain"""

    @abstractmethod
    def lookup(self, entity: "Entity", name: str, safe: bool) -> Any:
        """Return the field value, or MISSING to pass to the next strategy"""
        pass


class MappingStrategy(ResolutionStrategy):
    """Key lookup on mapping inputs"""

    def lookup(self, entity: "Entity", name: str, safe: bool) -> Any:
        obj = entity.object
        if not isinstance(obj, Mapping) or name not in obj:
            return MISSING
        value = obj[name]
        return value() if is_lazy_value(value) else value


class EntityMemberStrategy(ResolutionStrategy):
    """Attributes and zero-argument methods declared on the entity type"""

    def lookup(self, entity: "Entity", name: str, safe: bool) -> Any:
        if name in RESERVED_ENTITY_MEMBERS:
            return MISSING
        from .entity import Entity

        return Reflection.read_member(entity, name, exclude=(Entity,))


class AdapterStrategy(ResolutionStrategy):
    """Delegate to the first registered adapter accepting the input"""

    def __init__(self, registry: AdapterRegistry):
        self.registry = registry

    def lookup(self, entity: "Entity", name: str, safe: bool) -> Any:
        entry = self.registry.find(entity.object)
        if entry is None:
            return MISSING
        return entry.adapter.resolve(entity, name, safe, entry.cache)


class ObjectStrategy(ResolutionStrategy):
    """Member and dynamic-hook lookup on non-mapping objects"""

    def lookup(self, entity: "Entity", name: str, safe: bool) -> Any:
        obj = entity.object
        if obj is None or isinstance(obj, Mapping):
            return MISSING
        return Reflection.read_object(obj, name)


class AttributeResolver:
    """Ordered strategy chain"""

    def __init__(
        self,
        registry: Optional[AdapterRegistry] = None,
        strategies: Optional[List[ResolutionStrategy]] = None,
    ):
        self.registry = registry if registry is not None else adapter_registry
        self.strategies: List[ResolutionStrategy] = strategies or [
            MappingStrategy(),
            EntityMemberStrategy(),
            AdapterStrategy(self.registry),
            ObjectStrategy(),
        ]

    def resolve(self, entity: "Entity", name: str, safe: bool = False) -> Any:
        """
        Read `name` for the entity's current input

        Raises:
            MissingAttributeError: Field not found and `safe` is False
        """
        for strategy in self.strategies:
            value = strategy.lookup(entity, name, safe)
            if value is not MISSING:
                return value
        return entity.handle_missing_attribute(name, safe)


default_resolver = AttributeResolver()
