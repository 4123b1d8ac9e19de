"""
entitykit Utils Module

Logging setup and helpers for calling user-supplied callbacks.
"""

from .logging import get_logger, configure_logging
from .callables import (
    call_with_arity,
    is_lazy_value,
    positional_arity,
    takes_no_arguments,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "call_with_arity",
    "is_lazy_value",
    "positional_arity",
    "takes_no_arguments",
]
