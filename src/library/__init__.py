"""Library module - EDMS classes, properties and action codes.

This module provides:
- PropertiesLibrary: classes and the properties their forms can bind
- ActionCodeLibrary: action codes with built-in defaults
- validate_action_code: checks for new action codes

Example usage:
    >>> from src.library import ActionCodeLibrary
    >>> [code.value for code in ActionCodeLibrary().codes()][:3]
    ['AMD', 'CI', 'CO']
"""

from .lib import (
    DEFAULT_ACTION_CODES,
    ActionCode,
    ActionCodeLibrary,
    ClassProperties,
    LibraryError,
    PropertiesLibrary,
    PropertyDefinition,
    validate_action_code,
)

__all__ = [
    "LibraryError",
    "PropertyDefinition",
    "ClassProperties",
    "PropertiesLibrary",
    "ActionCode",
    "DEFAULT_ACTION_CODES",
    "ActionCodeLibrary",
    "validate_action_code",
]
