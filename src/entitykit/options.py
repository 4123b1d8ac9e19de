"""
Exposure option model

The closed set of directives that can be attached to an exposure. Options are
validated once, at declaration time, and are immutable afterwards.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidOptionError

OPTION_NAMES = (
    "as",
    "default",
    "expose_null",
    "using",
    "override",
    "if",
    "safe",
    "merge",
    "format_with",
    "attr_path",
    "documentation",
)

# Accepted by the DSL but rewritten before validation
OPTION_ALIASES = {"with": "using", "as_": "as", "if_": "if"}
FUNC_OPTION = "func"


class ExposureOptions(BaseModel):
    """
    Options of one exposure

    Fields left at None are "not set"; `model_fields_set` tells explicitly
    provided options apart from defaults.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
        frozen=True,
    )

    as_: Optional[Union[str, Callable[..., Any]]] = Field(default=None, alias="as")
    default: Optional[Any] = None
    expose_null: Optional[bool] = None
    using: Optional[Any] = None
    override: bool = False
    if_: Optional[Any] = Field(default=None, alias="if")
    safe: bool = False
    merge: Optional[Any] = None
    format_with: Optional[Union[str, Callable[..., Any]]] = None
    attr_path: Optional[Any] = None
    documentation: Optional[Any] = None

    @field_validator("if_")
    @classmethod
    def _check_condition(cls, value: Any) -> Any:
        if value is None or callable(value) or isinstance(value, (str, Mapping)):
            return value
        raise ValueError("`if` must be a callable, a context key or a mapping")

    @field_validator("using")
    @classmethod
    def _check_using(cls, value: Any) -> Any:
        if value is None:
            return value
        entity_type = value if isinstance(value, type) else type(value)
        if not callable(getattr(entity_type, "represent", None)):
            raise ValueError("`using` must be an entity type")
        return entity_type

    def is_set(self, name: str) -> bool:
        """Whether the option was explicitly provided (public option name)"""
        field_name = {"as": "as_", "if": "if_"}.get(name, name)
        return field_name in self.model_fields_set

    def to_dict(self) -> Dict[str, Any]:
        """Explicitly provided options keyed by their public names"""
        return self.model_dump(by_alias=True, exclude_unset=True)


def _unknown_option(exc: ValidationError) -> InvalidOptionError:
    error = exc.errors()[0]
    name = error["loc"][0] if error["loc"] else "?"
    if error["type"] == "extra_forbidden":
        return InvalidOptionError(f"Unrecognized `{name}` option", {"option": name})
    if name in ("as_", "if_"):
        name = name[:-1]
    return InvalidOptionError(
        f"Invalid `{name}` option: {error['msg']}", {"option": name}
    )


def normalize_options(raw: Optional[Mapping]) -> Dict[str, Any]:
    """
    Rewrite option aliases to their public names

    `func` is kept in the result; the declaration builder pulls it out after
    merging scoped defaults.
    """
    if raw is not None and not isinstance(raw, Mapping):
        raise InvalidOptionError(f"Options must be a mapping, got {type(raw).__name__}")

    options: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        options[OPTION_ALIASES.get(key, key)] = value

    # An explicit `attr_path: None` means "drop this level", not "unset"
    if "attr_path" in options and options["attr_path"] is None:
        options["attr_path"] = False
    return options


def pop_func(options: Dict[str, Any]) -> Optional[Callable[..., Any]]:
    """Remove and return the `func` option"""
    func = options.pop(FUNC_OPTION, None)
    if func is not None and not callable(func):
        raise InvalidOptionError("`func` option must be callable", {"option": FUNC_OPTION})
    return func


def check_option_names(options: Mapping) -> None:
    """Fail fast on option names outside the recognized set"""
    for name in options:
        if name not in OPTION_NAMES and name != FUNC_OPTION:
            raise InvalidOptionError(f"Unrecognized `{name}` option", {"option": name})


def build_options(options: Mapping) -> ExposureOptions:
    """
    Validate an options mapping into an ExposureOptions instance

    Raises:
        InvalidOptionError: Unknown option name or invalid option value
    """
    try:
        return ExposureOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise _unknown_option(exc) from exc
