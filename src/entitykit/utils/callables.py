"""
Callable helpers

User callbacks (value functions, conditions, formatters, aliases) may declare
fewer positional parameters than the engine has to offer. They are called with
as many leading arguments as they accept.
"""

import inspect
from typing import Any, Callable, Optional

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def positional_arity(func: Callable[..., Any]) -> Optional[int]:
    """
    Count the positional parameters of a callable

    Python-level functions count every positional parameter, other callables
    (builtins, method descriptors) only the required ones.

    Returns:
        Parameter count, or None when the callable takes *args or has no
        introspectable signature
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    python_level = inspect.isfunction(func) or inspect.ismethod(func)
    count = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind not in _POSITIONAL:
            continue
        if python_level or param.default is inspect.Parameter.empty:
            count += 1
    return count


def takes_no_arguments(func: Callable[..., Any]) -> bool:
    """True for callables declared without positional parameters"""
    return positional_arity(func) == 0


def call_with_arity(func: Callable[..., Any], *args: Any) -> Any:
    """Call func with as many leading positional args as it declares"""
    arity = positional_arity(func)
    if arity is None:
        return func(*args)
    return func(*args[:arity])


def is_lazy_value(value: Any) -> bool:
    """Plain functions stored as input values are evaluated on access"""
    return inspect.isfunction(value)
