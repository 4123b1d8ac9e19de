"""
Member reflection

Reads a field from an arbitrary object the way a caller would expect from a
presenter: public data first, then non-public data, then zero-argument
methods. A field `name` may be backed by a public member `name`, a protected
member `_name` or a private (name-mangled) member `_Class__name`. Visibility
gates switch the non-public forms off.
"""

import inspect
import types
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class _Missing:
    """Sentinel for 'no such member'"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class Visibility(str, Enum):
    """Member visibility derived from Python naming conventions"""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


_METHOD_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
    staticmethod,
    classmethod,
)

_HOOK_ERRORS = (AttributeError, KeyError, IndexError, TypeError)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _owner(klass: type, attr: str) -> Tuple[Optional[type], Any]:
    for base in klass.__mro__:
        if attr in vars(base):
            return base, vars(base)[attr]
    return None, MISSING


def _zero_argument(func: types.FunctionType) -> bool:
    try:
        params = list(inspect.signature(func).parameters.values())[1:]
    except (TypeError, ValueError):
        return False
    for param in params:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            return False
    return True


class Reflection:
    """
    Visibility-gated member access with a per-class method cache

    Gates and cache are process-wide, like the rest of the engine's
    configuration.
    """

    disable_protected_props: bool = False
    disable_private_props: bool = False
    disable_protected_methods: bool = False
    disable_private_methods: bool = False

    _method_cache: Dict[Tuple[type, str], Optional[str]] = {}

    @classmethod
    def reset_cache(cls) -> None:
        """Forget cached method lookups"""
        cls._method_cache.clear()

    @classmethod
    def reset(cls) -> None:
        """Re-enable every visibility and clear the cache"""
        cls.disable_protected_props = False
        cls.disable_private_props = False
        cls.disable_protected_methods = False
        cls.disable_private_methods = False
        cls.reset_cache()

    @staticmethod
    def candidates(klass: type, name: str) -> List[Tuple[str, Visibility]]:
        """Member names that may back the field `name`, most public first"""
        if not name or _is_dunder(name):
            return []
        if name.startswith("_"):
            return [(name, Visibility.PROTECTED)]

        result = [(name, Visibility.PUBLIC), (f"_{name}", Visibility.PROTECTED)]
        seen = set()
        for base in klass.__mro__:
            mangled = f"_{base.__name__.lstrip('_')}__{name}"
            if mangled not in seen:
                seen.add(mangled)
                result.append((mangled, Visibility.PRIVATE))
        return result

    @classmethod
    def _props_allowed(cls, visibility: Visibility) -> bool:
        if visibility is Visibility.PROTECTED:
            return not cls.disable_protected_props
        if visibility is Visibility.PRIVATE:
            return not cls.disable_private_props
        return True

    @classmethod
    def _methods_allowed(cls, visibility: Visibility) -> bool:
        if visibility is Visibility.PROTECTED:
            return not cls.disable_protected_methods
        if visibility is Visibility.PRIVATE:
            return not cls.disable_private_methods
        return True

    @classmethod
    def get_property(cls, obj: Any, name: str, exclude: Iterable[type] = ()) -> Any:
        """
        Read a data member (instance attribute, class attribute or property)

        Args:
            obj: Object to read from
            name: Field name
            exclude: Classes whose own members are never treated as fields

        Returns:
            Member value, or MISSING
        """
        excluded = tuple(exclude)
        klass = type(obj)
        instance_dict = getattr(obj, "__dict__", None) or {}

        for attr, visibility in cls.candidates(klass, name):
            if not cls._props_allowed(visibility):
                continue
            if attr in instance_dict:
                return instance_dict[attr]

            owner, member = _owner(klass, attr)
            if owner is None or owner in excluded or owner is object:
                continue
            if isinstance(member, _METHOD_TYPES):
                continue
            try:
                return getattr(obj, attr)
            except AttributeError:
                continue
        return MISSING

    @classmethod
    def get_method(cls, klass: type, name: str, exclude: Iterable[type] = ()) -> Optional[str]:
        """
        Find the zero-argument instance method backing the field `name`

        Static, class and abstract methods never qualify.

        Returns:
            Attribute name of the method, or None
        """
        key = (klass, name)
        if key in cls._method_cache:
            return cls._method_cache[key]

        excluded = tuple(exclude)
        found = None
        for attr, visibility in cls.candidates(klass, name):
            if not cls._methods_allowed(visibility):
                continue
            owner, member = _owner(klass, attr)
            if owner is None or owner in excluded or owner is object:
                continue
            if not isinstance(member, types.FunctionType):
                continue
            if getattr(member, "__isabstractmethod__", False):
                continue
            if not _zero_argument(member):
                continue
            found = attr
            break

        cls._method_cache[key] = found
        return found

    @classmethod
    def read_member(cls, obj: Any, name: str, exclude: Iterable[type] = ()) -> Any:
        """Data member first, then zero-argument method; MISSING if neither"""
        value = cls.get_property(obj, name, exclude)
        if value is not MISSING:
            return value

        method = cls.get_method(type(obj), name, exclude)
        if method is not None:
            return getattr(obj, method)()
        return MISSING

    @staticmethod
    def read_dynamic(obj: Any, name: str) -> Any:
        """
        Ask the object's dynamic hooks for the field

        `__getattr__` is tried first, then item access. Lookup errors raised by
        the hooks mean the field does not exist.
        """
        klass = type(obj)
        getattr_hook = getattr(klass, "__getattr__", None)
        if getattr_hook is not None:
            try:
                return getattr_hook(obj, name)
            except _HOOK_ERRORS:
                pass

        getitem_hook = getattr(klass, "__getitem__", None)
        if getitem_hook is not None:
            try:
                return getitem_hook(obj, name)
            except _HOOK_ERRORS:
                pass
        return MISSING

    @classmethod
    def read_object(cls, obj: Any, name: str, exclude: Iterable[type] = ()) -> Any:
        """Full object lookup: members, then dynamic hooks"""
        value = cls.read_member(obj, name, exclude)
        if value is not MISSING:
            return value
        return cls.read_dynamic(obj, name)
