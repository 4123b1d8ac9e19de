"""
Resolution context

Per-render state of one walk over an exposure list: the input value, the
caller's options (plus the current `attr_path`), and the flattened
`only`/`except` projection for this level. Contexts are created per call and
never shared between renders.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional

PROJECTION_KEYS = ("only", "except")


def flatten_projection(projection: Any, only: bool) -> Dict[Any, bool]:
    """
    Field names a projection names at the current level

    Nested entries (`{"user": ["name"]}`) count as naming their key for
    `only`, and name nothing at this level for `except`.
    """
    if isinstance(projection, Mapping):
        return {key: True for key in projection} if only else {}
    if not isinstance(projection, (list, tuple, set, frozenset)):
        return {projection: True}

    flat: Dict[Any, bool] = {}
    for attr in projection:
        if isinstance(attr, (Mapping, list, tuple, set, frozenset)):
            flat.update(flatten_projection(attr, only))
        else:
            flat[attr] = True
    return flat


def narrow_options(options: Mapping, key: str) -> Dict[str, Any]:
    """
    Options for the sub-representation under `key`

    Each projection descends into its `{key: sub_projection}` entry, or is
    dropped when it has none.
    """
    narrowed = dict(options)
    for projection_key in PROJECTION_KEYS:
        projection = narrowed.get(projection_key)
        if projection is None:
            continue
        entries = [projection] if isinstance(projection, Mapping) else projection
        if not isinstance(entries, (list, tuple)):
            entries = [entries]

        for attr in entries:
            if isinstance(attr, Mapping) and key in attr:
                narrowed[projection_key] = attr[key]
                break
        else:
            del narrowed[projection_key]

    if "attr_path" in narrowed:
        narrowed["attr_path"] = list(narrowed["attr_path"])
    return narrowed


class ResolutionContext:
    """State of one walk over an exposure list"""

    def __init__(self, value: Any, options: Mapping):
        self.value = value
        self.options: Dict[str, Any] = dict(options)
        self.base_path: List[Any] = list(self.options.get("attr_path") or [])
        self.options["attr_path"] = list(self.base_path)

        only = self.options.get("only")
        excluded = self.options.get("except")
        self.only: Optional[Dict[Any, bool]] = (
            flatten_projection(only, True) if only is not None else None
        )
        self.excluded: Optional[Dict[Any, bool]] = (
            flatten_projection(excluded, False) if excluded is not None else None
        )

    @property
    def attr_path(self) -> List[Any]:
        return self.options["attr_path"]

    def includes(self, key: Any) -> bool:
        """Projection check; `except` wins over `only`"""
        if self.only is not None and key not in self.only:
            return False
        return self.excluded is None or key not in self.excluded

    def enter(self, segment: Any) -> None:
        """
        Set the attr path of the exposure about to be resolved

        A list extends the parent path, a falsy segment adds nothing.
        """
        path = list(self.base_path)
        if isinstance(segment, (list, tuple)):
            path.extend(segment)
        elif segment:
            path.append(segment)
        self.options["attr_path"] = path

    def narrowed(self, key: str) -> "ResolutionContext":
        """Context for a nested exposure rendered under `key`"""
        return ResolutionContext(self.value, narrow_options(self.options, key))

    def child_options(self, key: str) -> Dict[str, Any]:
        """Options handed to a `using` entity rendered under `key`"""
        options = narrow_options(self.options, key)
        options.pop("collection", None)
        options["root"] = None
        return options
