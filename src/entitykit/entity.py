"""
Entity presenter

Entity subclasses declare which fields to expose; `represent` resolves that
declaration against a concrete input and returns either lazy Entity handles
or, with the `serializable` option, plain nested dicts and lists.

    class UserEntity(Entity):
        @classmethod
        def initialize(cls):
            cls.expose("id", "name")
            cls.expose("email", if_={"role": "admin"})
            cls.expose("contact", lambda: cls.expose("phone", safe=True))

    UserEntity.represent(user, {"serializable": True})
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Optional,
    Union,
)

from pydantic import BaseModel

from .adapters import AttributeAdapter, adapter_registry
from .context import ResolutionContext
from .declaration import ExposureBuilder
from .errors import ConfigurationError, InvalidOptionError, InvalidTypeError, MissingAttributeError
from .keys import KeyTransformer, get_key_transformer, set_key_transformer, transform_key
from .resolver import AttributeResolver, default_resolver
from .tree import ExposureNode, ExposureTree
from .utils.callables import call_with_arity
from .utils.logging import get_logger

logger = get_logger(__name__)


class SupportsRepresentation(ABC):
    """
    Values that know how to turn themselves into plain data

    Any class defining `serializable_array` qualifies, as do classes
    registered with `SupportsRepresentation.register`. The check looks at the
    class only, so dynamic `__getattr__` hooks never make a value qualify.
    """

    @abstractmethod
    def serializable_array(self) -> Any:
        pass

    @classmethod
    def __subclasshook__(cls, klass: type) -> Any:
        if cls is SupportsRepresentation:
            for base in klass.__mro__:
                if "serializable_array" in base.__dict__:
                    if base.__dict__["serializable_array"] is None:
                        return NotImplemented
                    return True
        return NotImplemented


@dataclass
class _EntityState:
    tree: ExposureTree
    builder: ExposureBuilder
    initialized: bool = False


def _is_collection(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray, Mapping, BaseModel)):
        return False
    return isinstance(value, Iterable)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, Mapping)):
        return len(value) == 0
    return False


def _strict_equal(actual: Any, expected: Any) -> bool:
    return actual is not None and type(actual) is type(expected) and actual == expected


def _expand(value: Any) -> Any:
    if isinstance(value, SupportsRepresentation):
        return value.serializable_array()
    return value


def _expand_serializable(value: Any) -> Any:
    """Replace self-serializing values (one level deep) by their plain form"""
    if isinstance(value, Mapping):
        if any(isinstance(item, SupportsRepresentation) for item in value.values()):
            return {key: _expand(item) for key, item in value.items()}
        return value
    if _is_sequence(value):
        if any(isinstance(item, SupportsRepresentation) for item in value):
            return [_expand(item) for item in value]
        return value
    return _expand(value)


def _coalesce(existing: Any, value: Any) -> Any:
    """Combine two nested exposures that render under the same key"""
    existing_is_map = isinstance(existing, Mapping)
    value_is_map = isinstance(value, Mapping)
    if existing_is_map and value_is_map:
        merged = dict(existing)
        merged.update(value)
        return merged
    if existing_is_map:
        return [existing] + (list(value) if _is_sequence(value) else [value])
    if value_is_map:
        if existing is None:
            return [value]
        if _is_sequence(existing):
            return list(existing) + [value]
        return [existing, value]
    return value


def _mergeable(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, (Mapping, list, tuple, str, bytes, bytearray)):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump()
    attributes = getattr(value, "__dict__", None)
    if isinstance(attributes, dict):
        return {key: item for key, item in attributes.items() if not key.startswith("_")}
    return value


class Entity:
    """
    Base class of all entity types

    Declaration methods are classmethods and act on the calling subclass's
    own exposure tree. `format_with`, `transform_keys` and
    `set_prop_value_adapter` called on Entity itself configure process-wide
    behaviour.
    """

    _global_formatters: ClassVar[Dict[str, Callable[..., Any]]] = {}
    resolver: ClassVar[AttributeResolver] = default_resolver

    def __init__(self, object: Any, options: Optional[Mapping] = None):
        self.object = object
        self.options: Dict[str, Any] = dict(options or {})

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.object!r})"

    # Declaration state

    @classmethod
    def _state(cls) -> _EntityState:
        state = cls.__dict__.get("_entity_state")
        if state is None:
            if cls is Entity:
                raise ConfigurationError("Declare exposures on an Entity subclass")
            tree = ExposureTree()
            state = _EntityState(tree=tree, builder=ExposureBuilder(tree, cls.__qualname__))
            cls._entity_state = state
            for base in cls.__bases__:
                if issubclass(base, Entity) and base is not Entity:
                    cls.extends(base)
        return state

    @classmethod
    def initialize(cls) -> None:
        """Declare exposures; runs once, on first use of the type"""
        pass

    @classmethod
    def load(cls) -> None:
        """Build the exposure tree if that has not happened yet"""
        state = cls._state()
        if state.initialized:
            return
        state.initialized = True
        if "initialize" in cls.__dict__:
            cls.initialize()
        logger.debug(
            "entity.loaded", entity=cls.__qualname__, exposures=len(state.tree.nodes)
        )

    @classmethod
    def exposures(cls) -> List[ExposureNode]:
        """Root exposures in declaration order"""
        cls.load()
        return list(cls._state().tree.nodes)

    # Declaration DSL

    @classmethod
    def expose(cls, *args: Any, **options: Any) -> None:
        cls._state().builder.expose(*args, **options)

    @classmethod
    def with_options(cls, options: Mapping, func: Optional[Callable[[], Any]] = None) -> Any:
        return cls._state().builder.with_options(options, func)

    @classmethod
    def unexpose(cls, *names: str) -> None:
        cls._state().builder.unexpose(*names)

    @classmethod
    def unexpose_all(cls) -> None:
        cls._state().builder.unexpose_all()

    @classmethod
    def extends(cls, *entity_types: Any) -> None:
        """Copy the exposures and formatters of other entity types"""
        builder = cls._state().builder
        for entity_type in entity_types:
            if not isinstance(entity_type, type):
                entity_type = type(entity_type)
            if not issubclass(entity_type, Entity) or entity_type is Entity:
                raise ConfigurationError(f"Cannot extend {entity_type!r}: not an entity type")
            entity_type.load()
            builder.extend_from(entity_type._state().tree)

    @classmethod
    def root(cls, plural: Optional[str], singular: Optional[str] = None) -> None:
        cls._state().builder.root(plural, singular)

    @classmethod
    def present_collection(
        cls, present_collection: bool = False, collection_name: str = "items"
    ) -> None:
        cls._state().builder.present_collection(present_collection, collection_name)

    @classmethod
    def format_with(cls, name: str, func: Callable[..., Any]) -> None:
        """Register a named formatter; on Entity itself it is global"""
        if cls is Entity:
            if not callable(func):
                raise InvalidOptionError(f"Formatter `{name}` must be callable")
            Entity._global_formatters[name] = func
            return
        cls._state().builder.format_with(name, func)

    @classmethod
    def documentation(cls) -> Dict[str, Any]:
        """Output key -> documentation blob of the root exposures"""
        cls.load()
        return cls._state().tree.documentation(get_key_transformer())

    @staticmethod
    def transform_keys(transformer: Union[str, KeyTransformer, None]) -> None:
        """Set the process-wide key transformer (`"camel"`, `"snake"`, callable or None)"""
        set_key_transformer(transformer)

    @staticmethod
    def set_prop_value_adapter(name: str, adapter: Optional[AttributeAdapter]) -> None:
        """Register an attribute adapter; None removes it"""
        adapter_registry.register(name, adapter)

    # Rendering

    @classmethod
    def represent(cls, objects: Any, options: Optional[Mapping] = None) -> Any:
        """
        Represent a single input or a collection of inputs

        Args:
            objects: Mapping, object, or iterable of those
            options: `serializable`, `only`, `except`, `root` and any
                caller-defined keys read by conditions and value functions

        Returns:
            Entity handle(s), or plain data with `serializable`; wrapped under
            the root key when one applies
        """
        cls.load()
        tree = cls._state().tree
        options = dict(options or {})

        if _is_collection(objects) and not _is_sequence(objects):
            objects = list(objects)

        if _is_collection(objects) and len(objects) > 0 and not tree.present_collection:
            root = tree.collection_root
            if options.get("collection") is None:
                options["collection"] = True
            inner: Any = [cls(obj, options).presented() for obj in objects]
        else:
            root = tree.root
            if options.get("collection") is None:
                options["collection"] = False
            if tree.present_collection:
                objects = {tree.collection_name: objects}
            inner = cls(objects, options).presented()

        if "root" in options:
            root = options["root"]
        if root:
            return {transform_key(root): inner}
        return inner

    def presented(self) -> Any:
        """Plain data with the `serializable` option, the handle otherwise"""
        if self.options.get("serializable"):
            return self.serializable_array()
        return self

    def serializable_array(self) -> Any:
        """
        Resolve the exposures against the input

        Returns:
            Ordered dict of output keys, a list when `merge` spliced sequence
            values into the root, or None for a None input
        """
        if self.object is None:
            return None
        entity_type = type(self)
        entity_type.load()
        context = ResolutionContext(self.object, self.options)
        return self._serialize_nodes(list(entity_type._state().tree.nodes), context)

    def to_json(self, **kwargs: Any) -> str:
        from .encoders import to_json

        return to_json(self.serializable_array(), **kwargs)

    def handle_missing_attribute(self, name: str, safe: bool) -> Any:
        """None when `safe`, MissingAttributeError otherwise"""
        if safe:
            return None
        description = self._describe_object()
        logger.debug("entity.missing_attribute", attribute=name, input=description)
        raise MissingAttributeError(
            f"Missing attribute or method `{name}` on `{description}`",
            {"attribute": name, "input": description},
        )

    def _describe_object(self) -> str:
        obj = self.object
        if isinstance(obj, (Mapping, list, tuple)):
            from .encoders import to_json

            try:
                return to_json(obj, default=repr)
            except (TypeError, ValueError, RecursionError):
                # Non-string keys or circular references
                return repr(obj)
        if isinstance(obj, (str, int, float, bool)):
            return str(obj)
        return f"{type(obj).__module__}.{type(obj).__qualname__}"

    def _serialize_nodes(self, nodes: List[ExposureNode], context: ResolutionContext) -> Any:
        root: List[Any] = []
        in_root = False
        exposures: Dict[Any, Any] = {}
        transformer = get_key_transformer()

        for node in nodes:
            options = node.options
            if not self._check_condition(node, context):
                continue

            key = self._output_key(node, context)
            if transformer is not None:
                key = transformer(key)

            context.enter(self._path_segment(node, key, context))
            value = self._resolve_value(node, key, context)

            if value is None and options.expose_null is False:
                continue

            if node.is_nested and key in exposures:
                value = _coalesce(exposures[key], value)

            if options.format_with is not None:
                value = self._format(options.format_with, value)

            if options.merge:
                value = _mergeable(value)
                if _is_sequence(value) and len(value) > 0:
                    root.extend(value)
                    continue
                if isinstance(value, Mapping) or _is_sequence(value):
                    collide = options.merge if callable(options.merge) else None
                    for merge_key, merge_value in (
                        value.items() if isinstance(value, Mapping) else ()
                    ):
                        if not context.includes(merge_key):
                            continue
                        existing = exposures.get(merge_key)
                        if existing is not None and collide is not None:
                            merge_value = call_with_arity(collide, merge_key, existing, merge_value)
                        exposures[merge_key] = merge_value
                    if not in_root:
                        in_root = True
                        root.append(exposures)
                    continue
                path = ".".join(str(part) for part in context.attr_path)
                raise InvalidTypeError(
                    f"Merge error: `{path}` should be a mapping or a list",
                    {"attr_path": list(context.attr_path), "type": type(value).__name__},
                )

            if context.includes(key):
                exposures[key] = value
                if not in_root:
                    in_root = True
                    root.append(exposures)

        if root and (not in_root or len(root) > 1):
            return root
        return exposures

    def _check_condition(self, node: ExposureNode, context: ResolutionContext) -> bool:
        condition = node.options.if_
        if condition is None:
            return True
        if callable(condition):
            return bool(call_with_arity(condition, context.value, context.options))
        if isinstance(condition, str):
            return bool(context.options.get(condition))
        if isinstance(condition, Mapping):
            return all(
                _strict_equal(context.options.get(name), expected)
                for name, expected in condition.items()
            )
        raise InvalidOptionError("Invalid `if` option", {"exposure": node.name})

    def _output_key(self, node: ExposureNode, context: ResolutionContext) -> Any:
        alias = node.options.as_
        if alias is None:
            return node.name
        if callable(alias):
            return call_with_arity(alias, context.value, context.options)
        return alias

    def _path_segment(self, node: ExposureNode, key: Any, context: ResolutionContext) -> Any:
        attr_path = node.options.attr_path
        if attr_path is None:
            return key
        if callable(attr_path):
            return call_with_arity(attr_path, context.value, context.options)
        return attr_path

    def _resolve_value(self, node: ExposureNode, key: Any, context: ResolutionContext) -> Any:
        options = node.options
        if node.func is not None:
            value = call_with_arity(node.func, context.value, context.options)
        elif node.children is not None:
            value = self._serialize_nodes(list(node.children), context.narrowed(key))
        else:
            value = self.resolver.resolve(self, node.name, options.safe)

        if options.using is not None:
            value = options.using.represent(value, context.child_options(key))

        value = _expand_serializable(value)

        if options.default is not None and _is_blank(value):
            return options.default
        return value

    def _format(self, format_with: Any, value: Any) -> Any:
        if callable(format_with):
            return call_with_arity(format_with, value, self)

        formatters = type(self)._state().tree.formatters
        if format_with in formatters:
            return call_with_arity(formatters[format_with], value, self)
        if format_with in Entity._global_formatters:
            return call_with_arity(Entity._global_formatters[format_with], value, self)
        raise InvalidOptionError(
            f"Invalid format_with option: {format_with}", {"formatter": format_with}
        )
