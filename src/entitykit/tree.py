"""
Exposure tree

One ExposureTree per entity type: the ordered root exposures plus formatter,
framing and root-key settings. Nodes are immutable; the tree's node list is
only mutated while declaring.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .errors import InvalidTypeError
from .options import ExposureOptions


class ValueSource(str, Enum):
    """Where an exposure takes its value from"""

    FUNCTION = "function"
    NESTED = "nested"
    ATTRIBUTE = "attribute"


class ExposureNode(BaseModel):
    """
    One declared field

    - func: inline value function called with (object, options)
    - children: nested exposure, resolved as an independent sub-tree
    - neither: the field is read from the input by name
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    options: ExposureOptions
    func: Optional[Callable[..., Any]] = None
    children: Optional[Tuple["ExposureNode", ...]] = None

    @property
    def value_source(self) -> ValueSource:
        if self.func is not None:
            return ValueSource.FUNCTION
        if self.children is not None:
            return ValueSource.NESTED
        return ValueSource.ATTRIBUTE

    @property
    def is_nested(self) -> bool:
        return self.children is not None

    def __repr__(self) -> str:
        return f"ExposureNode({self.name!r}, source={self.value_source.value})"


ExposureNode.model_rebuild()


@dataclass
class ExposureTree:
    """Per-entity-type exposure state"""

    nodes: List[ExposureNode] = field(default_factory=list)
    formatters: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    present_collection: bool = False
    collection_name: str = "items"
    collection_root: Optional[str] = None
    root: Optional[str] = None
    _documentation: Optional[Dict[str, Any]] = field(default=None, repr=False)
    _documentation_transformer: Optional[Callable[[str], str]] = field(default=None, repr=False)

    def invalidate(self) -> None:
        """Drop memoized documentation after the node list changed"""
        self._documentation = None

    def node_names(self) -> List[str]:
        return [node.name for node in self.nodes]

    def documentation(
        self, key_transformer: Optional[Callable[[str], str]] = None
    ) -> Dict[str, Any]:
        """
        Output key -> documentation blob for root exposures

        Nested children are not scanned. A later declaration of the same key
        replaces the earlier one, and drops its blob when it has none. The
        result is memoized per key transformer.

        Raises:
            InvalidTypeError: A documented exposure uses a callable `as`
        """
        if self._documentation is not None and self._documentation_transformer is key_transformer:
            return self._documentation

        documentation: Dict[str, Any] = {}
        for node in self.nodes:
            options = node.options
            if callable(options.as_):
                if options.documentation:
                    raise InvalidTypeError(
                        "`documentation` does not support `as` option as a function",
                        {"exposure": node.name},
                    )
                continue
            key = options.as_ if options.as_ is not None else node.name
            if key_transformer is not None:
                key = key_transformer(key)
            documentation.pop(key, None)
            if options.documentation:
                documentation[key] = options.documentation

        self._documentation = documentation
        self._documentation_transformer = key_transformer
        return documentation
