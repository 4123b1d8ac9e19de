"""
entitykit - declarative entity presenters

Declare per-type field exposures once, then render mappings, objects and
pydantic models (or collections of them) into plain nested data.
"""

__version__ = "0.1.0"

from .errors import (
    EntityError,
    ConfigurationError,
    InvalidOptionError,
    NestedExposureError,
    MissingAttributeError,
    InvalidTypeError,
)
from .options import ExposureOptions
from .tree import ExposureNode, ExposureTree, ValueSource
from .reflection import MISSING, Reflection
from .adapters import (
    AdapterCache,
    AttributeAdapter,
    FunctionAdapter,
    PydanticAdapter,
    adapter_registry,
)
from .resolver import AttributeResolver
from .keys import camel, snake
from .entity import Entity, SupportsRepresentation
from .encoders import to_json, to_yaml
from .config import EntityKitConfig, apply_config, load_config_from_env, load_config_from_file

__all__ = [
    "__version__",
    # Errors
    "EntityError",
    "ConfigurationError",
    "InvalidOptionError",
    "NestedExposureError",
    "MissingAttributeError",
    "InvalidTypeError",
    # Declaration
    "ExposureOptions",
    "ExposureNode",
    "ExposureTree",
    "ValueSource",
    # Resolution
    "MISSING",
    "Reflection",
    "AdapterCache",
    "AttributeAdapter",
    "FunctionAdapter",
    "PydanticAdapter",
    "adapter_registry",
    "AttributeResolver",
    "camel",
    "snake",
    # Entities
    "Entity",
    "SupportsRepresentation",
    "to_json",
    "to_yaml",
    # Configuration
    "EntityKitConfig",
    "apply_config",
    "load_config_from_env",
    "load_config_from_file",
]
