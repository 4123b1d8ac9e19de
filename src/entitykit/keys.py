"""
Key transformation

A single process-wide function reshapes every emitted key, root key names and
documentation keys. Built-in transformers are available by name.
"""

import re
from functools import lru_cache
from typing import Callable, Dict, Optional, Union

from .errors import InvalidOptionError
from .utils.logging import get_logger

logger = get_logger(__name__)

KeyTransformer = Callable[[str], str]

_CAMEL_PATTERN = re.compile(r"^[-_\s]+|[-_\s]+(.)?")


@lru_cache(maxsize=4096)
def camel(key: str) -> str:
    """snake_case / kebab-case / spaced words -> camelCase"""
    return _CAMEL_PATTERN.sub(
        lambda match: match.group(1).upper() if match.group(1) else "",
        key.lower(),
    )


@lru_cache(maxsize=4096)
def snake(key: str) -> str:
    """camelCase -> snake_case; whitespace runs are squeezed out"""
    out = []
    i = 0
    length = len(key)
    while i < length:
        char = key[i]
        if i + 1 < length and char != "\n" and key[i + 1].isupper():
            out.append(f"{char}_{key[i + 1]}")
            i += 2
        elif char.isspace():
            j = i
            while j < length and key[j].isspace():
                j += 1
            if j < length and key[j] != "\n":
                out.append(key[j])
                j += 1
            i = j
        else:
            out.append(char)
            i += 1
    return "".join(out).lower()


BUILTIN_TRANSFORMERS: Dict[str, KeyTransformer] = {
    "camel": camel,
    "snake": snake,
}

_key_transformer: Optional[KeyTransformer] = None


def resolve_key_transformer(
    transformer: Union[str, KeyTransformer, None],
) -> Optional[KeyTransformer]:
    """
    Turn a built-in name or a callable into a transformer function

    Raises:
        InvalidOptionError: Unknown built-in name or non-callable value
    """
    if transformer is None:
        return None
    if isinstance(transformer, str):
        try:
            return BUILTIN_TRANSFORMERS[transformer]
        except KeyError:
            raise InvalidOptionError(
                f"Unknown key transformer `{transformer}`",
                {"available": sorted(BUILTIN_TRANSFORMERS)},
            ) from None
    if callable(transformer):
        return transformer
    raise InvalidOptionError(f"Invalid key transformer: {transformer!r}")


def set_key_transformer(transformer: Union[str, KeyTransformer, None]) -> None:
    """Install (or with None remove) the process-wide key transformer"""
    global _key_transformer
    _key_transformer = resolve_key_transformer(transformer)
    logger.debug(
        "keys.transformer_changed",
        transformer=getattr(_key_transformer, "__name__", repr(_key_transformer)),
    )


def get_key_transformer() -> Optional[KeyTransformer]:
    return _key_transformer


def transform_key(key: str) -> str:
    """Apply the current transformer, if any"""
    if _key_transformer is None:
        return key
    return _key_transformer(key)
