"""
entitykit Exception Definitions

Declaration-time failures derive from ConfigurationError; render-time failures
are MissingAttributeError and InvalidTypeError. All of them share EntityError
so callers can catch the whole family in one place.
"""

from typing import Any, Dict, Optional


class EntityError(Exception):
    """entitykit base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(EntityError):
    """
    Configuration error

    Raised while declaring exposures or configuring the engine, such as
    unknown options, invalid option combinations or an unknown key transformer.
    """

    pass


class InvalidOptionError(ConfigurationError):
    """
    Invalid option error

    Unknown option names, options that cannot be combined on one exposure,
    invalid `if` conditions and unresolvable `format_with` references.
    """

    pass


class NestedExposureError(ConfigurationError):
    """
    Nested exposure error

    Raised when the exposure list is mutated (`unexpose`, `unexpose_all`)
    while a nested exposure block is being declared.
    """

    pass


class MissingAttributeError(EntityError):
    """
    Missing attribute error

    The exposed field could not be read from the input and the exposure is
    not marked `safe`.
    """

    pass


class InvalidTypeError(EntityError):
    """
    Invalid type error

    A value cannot be used the way the exposure asks, such as merging a
    scalar into the enclosing representation.
    """

    pass
