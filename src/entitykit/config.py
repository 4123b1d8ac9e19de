"""
entitykit configuration

Process-wide settings (key transformer, reflection visibility gates, log
level), loadable from a YAML/JSON file or from ENTITYKIT_* environment
variables and applied in one call.
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigurationError
from .keys import BUILTIN_TRANSFORMERS, set_key_transformer
from .reflection import Reflection
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _as_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


def _as_transformer(value: str) -> Optional[str]:
    return None if value.lower() in ["", "none", "null"] else value


@dataclass
class EntityKitConfig:
    """Process-wide entitykit settings"""

    # Output keys
    key_transformer: Optional[str] = None  # "camel", "snake" or None

    # Reflection visibility
    disable_protected_props: bool = False
    disable_private_props: bool = False
    disable_protected_methods: bool = False
    disable_private_methods: bool = False

    log_level: str = "WARNING"


def get_default_config() -> EntityKitConfig:
    return EntityKitConfig()


def load_config_from_file(config_path: Union[str, Path]) -> EntityKitConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        EntityKitConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported config file format: {config_path.suffix}")

    return config_from_dict(data or {})


def load_config_from_env() -> EntityKitConfig:
    """
    Load configuration from environment variables

    Variables are prefixed with ENTITYKIT_, e.g.
    ENTITYKIT_KEY_TRANSFORMER=camel, ENTITYKIT_DISABLE_PRIVATE_PROPS=true
    """
    config = EntityKitConfig()

    env_mappings = {
        "ENTITYKIT_KEY_TRANSFORMER": ("key_transformer", _as_transformer),
        "ENTITYKIT_DISABLE_PROTECTED_PROPS": ("disable_protected_props", _as_bool),
        "ENTITYKIT_DISABLE_PRIVATE_PROPS": ("disable_private_props", _as_bool),
        "ENTITYKIT_DISABLE_PROTECTED_METHODS": ("disable_protected_methods", _as_bool),
        "ENTITYKIT_DISABLE_PRIVATE_METHODS": ("disable_private_methods", _as_bool),
        "ENTITYKIT_LOG_LEVEL": ("log_level", str),
    }

    for env_var, (attr_name, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            setattr(config, attr_name, converter(value))

    return config


def config_from_dict(data: Dict[str, Any]) -> EntityKitConfig:
    """
    Build a config from a plain mapping

    Raises:
        ConfigurationError: Unknown setting
    """
    known = {f.name for f in fields(EntityKitConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration settings: {', '.join(unknown)}", {"unknown": unknown}
        )
    return EntityKitConfig(**data)


def validate_config(config: EntityKitConfig) -> List[str]:
    """
    Validate configuration and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    if config.key_transformer is not None and config.key_transformer not in BUILTIN_TRANSFORMERS:
        issues.append(
            f"Invalid key_transformer: {config.key_transformer}. "
            f"Must be one of {sorted(BUILTIN_TRANSFORMERS)} or null"
        )

    for f in fields(EntityKitConfig):
        if f.name.startswith("disable_") and not isinstance(getattr(config, f.name), bool):
            issues.append(f"{f.name} must be a boolean")

    if str(config.log_level).upper() not in VALID_LOG_LEVELS:
        issues.append(
            f"Invalid log_level: {config.log_level}. Must be one of {VALID_LOG_LEVELS}"
        )

    return issues


def apply_config(config: EntityKitConfig) -> None:
    """
    Install the settings process-wide

    Raises:
        ConfigurationError: The configuration does not validate
    """
    issues = validate_config(config)
    if issues:
        raise ConfigurationError("Invalid configuration", {"issues": issues})

    configure_logging(config.log_level)
    set_key_transformer(config.key_transformer)
    Reflection.disable_protected_props = config.disable_protected_props
    Reflection.disable_private_props = config.disable_private_props
    Reflection.disable_protected_methods = config.disable_protected_methods
    Reflection.disable_private_methods = config.disable_private_methods
    Reflection.reset_cache()
    logger.debug("config.applied", key_transformer=config.key_transformer)
