"""
Attribute adapters

Adapters resolve attributes for a recognized family of input types (ORM
models, validation models, ...). They are registered process-wide by name and
consulted in registration order; the first adapter whose condition matches
the input handles the lookup. Each registration owns an AdapterCache.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Optional

from pydantic import BaseModel

from .errors import ConfigurationError
from .reflection import MISSING, Reflection
from .utils.logging import get_logger

if TYPE_CHECKING:
    from .entity import Entity

logger = get_logger(__name__)


def type_identifier(klass: type) -> str:
    """Stable cache key for a runtime type"""
    return f"{klass.__module__}.{klass.__qualname__}"


class AdapterCache:
    """
    Two-level cache: type identifier -> field name -> value

    Only ever cleared explicitly.
    """

    def __init__(self) -> None:
        self._storage: Dict[str, Dict[str, Any]] = {}

    def get(self, type_key: str, name: str, default: Any = None) -> Any:
        return self._storage.get(type_key, {}).get(name, default)

    def set(self, type_key: str, name: str, value: Any) -> None:
        self._storage.setdefault(type_key, {})[name] = value

    def has(self, type_key: str, name: str) -> bool:
        return name in self._storage.get(type_key, {})

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        return sum(len(fields) for fields in self._storage.values())


class AttributeAdapter(ABC):
    """Attribute resolution strategy for one family of inputs"""

    @abstractmethod
    def condition(self, value: Any) -> bool:
        """Whether this adapter handles the given input"""
        pass

    @abstractmethod
    def resolve(self, entity: "Entity", name: str, safe: bool, cache: AdapterCache) -> Any:
        """
        Read `name` from `entity.object`

        Implementations call `entity.handle_missing_attribute(name, safe)`
        when the field does not exist.
        """
        pass


class FunctionAdapter(AttributeAdapter):
    """Adapter built from two plain functions"""

    def __init__(
        self,
        condition: Callable[[Any], bool],
        resolve: Callable[["Entity", str, bool, AdapterCache], Any],
    ):
        self._condition = condition
        self._resolve = resolve

    def condition(self, value: Any) -> bool:
        return bool(self._condition(value))

    def resolve(self, entity: "Entity", name: str, safe: bool, cache: AdapterCache) -> Any:
        return self._resolve(entity, name, safe, cache)


class PydanticAdapter(AttributeAdapter):
    """
    Adapter for pydantic models

    Declared and computed fields are plain attribute reads; the cache
    remembers, per model class, which kind of member each name turned out to
    be so the class metadata is inspected once.
    """

    FIELD = "field"
    COMPUTED = "computed"
    OTHER = "other"

    def condition(self, value: Any) -> bool:
        return isinstance(value, BaseModel)

    def _classify(self, model_type: type, name: str) -> str:
        if name in model_type.model_fields:
            return self.FIELD
        if name in model_type.model_computed_fields:
            return self.COMPUTED
        return self.OTHER

    def resolve(self, entity: "Entity", name: str, safe: bool, cache: AdapterCache) -> Any:
        model = entity.object
        model_type = type(model)
        type_key = type_identifier(model_type)

        kind = cache.get(type_key, name)
        if kind is None:
            kind = self._classify(model_type, name)
            cache.set(type_key, name, kind)

        if kind in (self.FIELD, self.COMPUTED):
            return getattr(model, name)

        extra = model.model_extra or {}
        if name in extra:
            return extra[name]

        value = Reflection.read_member(model, name, exclude=(BaseModel,))
        if value is not MISSING:
            return value
        return entity.handle_missing_attribute(name, safe)


@dataclass
class RegisteredAdapter:
    """An adapter together with the cache owned by its registration"""

    name: str
    adapter: AttributeAdapter
    cache: AdapterCache = field(default_factory=AdapterCache)


class AdapterRegistry:
    """Ordered, name-keyed adapter registrations"""

    def __init__(self) -> None:
        self._entries: Dict[str, RegisteredAdapter] = {}

    def register(self, name: str, adapter: Optional[AttributeAdapter]) -> None:
        """
        Register, replace or (with None) remove an adapter

        Every registration starts with an empty cache.
        """
        if adapter is None:
            if self._entries.pop(name, None) is not None:
                logger.debug("adapter.removed", adapter=name)
            return
        if not isinstance(adapter, AttributeAdapter):
            raise ConfigurationError(
                f"Adapter `{name}` must be an AttributeAdapter, got {type(adapter).__name__}"
            )
        self._entries[name] = RegisteredAdapter(name=name, adapter=adapter)
        logger.debug("adapter.registered", adapter=name, kind=type(adapter).__name__)

    def get(self, name: str) -> Optional[RegisteredAdapter]:
        return self._entries.get(name)

    def find(self, value: Any) -> Optional[RegisteredAdapter]:
        """First registration whose condition accepts the input"""
        for entry in self._entries.values():
            if entry.adapter.condition(value):
                return entry
        return None

    def names(self) -> list:
        return list(self._entries)

    def __iter__(self) -> Iterator[RegisteredAdapter]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


def install_default_adapters(registry: AdapterRegistry) -> None:
    """Register the built-in adapters"""
    registry.register("pydantic", PydanticAdapter())


adapter_registry = AdapterRegistry()
install_default_adapters(adapter_registry)
