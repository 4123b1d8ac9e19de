"""
Exposure declaration builder

Builds the ExposureTree of one entity type. Nested exposure blocks redirect
new declarations to a fresh child list through an explicit target stack;
`with_options` pushes immutable default-option records onto a second stack.
"""

from collections.abc import Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import InvalidOptionError, NestedExposureError
from .options import build_options, check_option_names, normalize_options, pop_func
from .tree import ExposureNode, ExposureTree
from .utils.callables import takes_no_arguments


class ExposureBuilder:
    """
    Declaration-time state of one entity type

    Only used while declaring; resolution reads `tree` directly.
    """

    def __init__(self, tree: ExposureTree, owner: str = "Entity"):
        self.tree = tree
        self.owner = owner
        self._targets: List[List[ExposureNode]] = []
        self._defaults: List[Mapping] = [MappingProxyType({})]

    @property
    def nesting_depth(self) -> int:
        """Number of nested exposure blocks currently being declared"""
        return len(self._targets)

    @property
    def default_options(self) -> Mapping:
        """Options pushed by the enclosing `with_options` scopes"""
        return self._defaults[-1]

    def _target(self) -> List[ExposureNode]:
        return self._targets[-1] if self._targets else self.tree.nodes

    @staticmethod
    def _split_args(
        args: Sequence[Any],
    ) -> Tuple[List[str], Optional[Mapping], Optional[Callable[..., Any]]]:
        rest = list(args)
        func = None
        options = None
        if rest and callable(rest[-1]) and not isinstance(rest[-1], (str, Mapping)):
            func = rest.pop()
        if rest and (rest[-1] is None or isinstance(rest[-1], Mapping)):
            options = rest.pop()

        if not rest:
            raise InvalidOptionError("`expose` needs at least one attribute name")
        for name in rest:
            if not isinstance(name, str):
                raise InvalidOptionError(
                    f"Invalid attribute name {name!r}: expected a string"
                )
        return rest, options, func

    def expose(self, *args: Any, **kwargs: Any) -> None:
        """
        Declare one or more exposures

        Args:
            *args: Attribute names, then an optional options mapping, then an
                optional value function
            **kwargs: Extra options (`as_` and `if_` stand for `as` and `if`)

        Raises:
            InvalidOptionError: Unknown option or invalid combination
        """
        names, explicit, func = self._split_args(args)
        explicit = dict(explicit or {})
        explicit.update(kwargs)

        options: Dict[str, Any] = dict(self.default_options)
        options.update(normalize_options(explicit))
        option_func = pop_func(options)
        if func is None:
            func = option_func

        if len(names) > 1:
            if func is not None:
                raise InvalidOptionError(
                    "You may not use a function on multi-attribute exposures"
                )
            if "expose_null" in options:
                raise InvalidOptionError(
                    "You may not use `expose_null` on multi-attribute exposures"
                )
            if options.get("as") is not None:
                raise InvalidOptionError(
                    "You may not use the `as` option on multi-attribute exposures"
                )

        for name in names:
            self._expose_one(name, options, func)

    def _expose_one(
        self,
        name: str,
        options: Mapping,
        func: Optional[Callable[..., Any]],
    ) -> None:
        check_option_names(options)
        exposure_options = build_options(options)
        self.tree.invalidate()

        target = self._target()
        if exposure_options.override:
            target[:] = [node for node in target if node.name != name]

        if func is not None and takes_no_arguments(func):
            if exposure_options.format_with is not None:
                raise InvalidOptionError(
                    "You may not use the `format_with` option on nested exposure",
                    {"exposure": name},
                )
            if exposure_options.using is not None:
                raise InvalidOptionError(
                    "You may not use the `using` option on nested exposure",
                    {"exposure": name},
                )

            children: List[ExposureNode] = []
            self._targets.append(children)
            try:
                func()
            finally:
                self._targets.pop()

            target.append(
                ExposureNode(name=name, options=exposure_options, children=tuple(children))
            )
            return

        target.append(ExposureNode(name=name, options=exposure_options, func=func))

    @contextmanager
    def options_scope(self, options: Mapping) -> Iterator[None]:
        """Push default options for every exposure declared inside the block"""
        normalized = normalize_options(options)
        check_option_names(normalized)
        merged = dict(self.default_options)
        merged.update(normalized)
        self._defaults.append(MappingProxyType(merged))
        try:
            yield
        finally:
            self._defaults.pop()

    def with_options(
        self, options: Mapping, func: Optional[Callable[[], Any]] = None
    ) -> Any:
        """
        Run `func` with scoped default options

        Without `func` the scope is returned as a context manager.
        """
        if func is None:
            return self.options_scope(options)
        with self.options_scope(options):
            func()
        return None

    def _check_not_nested(self, operation: str) -> None:
        if self._targets:
            raise NestedExposureError(
                f"You cannot call `{operation}` inside of nesting exposure!",
                {"entity": self.owner},
            )

    def unexpose(self, *names: str) -> None:
        """Remove root exposures by attribute name"""
        self._check_not_nested("unexpose")
        self.tree.invalidate()
        self.tree.nodes[:] = [node for node in self.tree.nodes if node.name not in names]

    def unexpose_all(self) -> None:
        """Remove every root exposure"""
        self._check_not_nested("unexpose_all")
        self.tree.invalidate()
        self.tree.nodes.clear()

    def extend_from(self, other: ExposureTree) -> None:
        """Copy another tree's root exposures and formatters into this one"""
        self.tree.invalidate()
        self._target().extend(other.nodes)
        self.tree.formatters.update(other.formatters)

    def format_with(self, name: str, func: Callable[..., Any]) -> None:
        if not callable(func):
            raise InvalidOptionError(f"Formatter `{name}` must be callable")
        self.tree.formatters[name] = func

    def root(self, plural: Optional[str], singular: Optional[str] = None) -> None:
        self.tree.collection_root = plural
        self.tree.root = singular

    def present_collection(
        self, present_collection: bool = False, collection_name: str = "items"
    ) -> None:
        self.tree.present_collection = present_collection
        self.tree.collection_name = collection_name
