"""
Output encoders

Representations may contain lazy Entity handles at any depth (the result of
`represent` without `serializable`). The encoders resolve them to plain data
before handing the structure to json or PyYAML.
"""

import json
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional
from uuid import UUID

import yaml
from pydantic import BaseModel

from .entity import SupportsRepresentation


def json_default(value: Any) -> Any:
    """`default=` hook for json.dumps"""
    if isinstance(value, SupportsRepresentation):
        return value.serializable_array()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_plain(value: Any) -> Any:
    """Recursively replace entity handles and containers with dicts and lists"""
    if isinstance(value, SupportsRepresentation):
        return to_plain(value.serializable_array())
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(item) for item in value]
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    return value


def to_json(
    value: Any,
    indent: Optional[int] = None,
    default: Callable[[Any], Any] = json_default,
    **kwargs: Any,
) -> str:
    """Encode a representation as JSON (non-ASCII kept as-is)"""
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(to_plain(value), indent=indent, default=default, **kwargs)


def to_yaml(value: Any) -> str:
    """Encode a representation as YAML, keeping key order"""
    return yaml.safe_dump(
        json.loads(to_json(value)), allow_unicode=True, sort_keys=False
    )
