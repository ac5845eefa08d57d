"""Centralized environment configuration management for formbridge.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from src.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> port = get_environment(EnvVar.MCP_PORT)  # Returns int
    >>> timeout = get_environment(EnvVar.LOADER_TIMEOUT)  # Returns float
    >>>
    >>> # Override at runtime
    >>> port = get_environment(EnvVar.MCP_PORT, override=9000)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "MCP_PORT").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool, Path).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by formbridge.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - storage: Data directory and library file paths
        - loader: Remote form loading
        - service: MCP server host and port
        - logging: Log output
    """

    # -------------------------------------------------------------------------
    # Storage Paths
    # -------------------------------------------------------------------------
    FORMBRIDGE_DATA_DIR = EnvConfig(
        name="FORMBRIDGE_DATA_DIR",
        default=None,  # Computed from the home directory
        var_type=Path,
        description="Base data directory (library files, saved forms)",
        category="storage",
    )
    FORMBRIDGE_STORE_DIR = EnvConfig(
        name="FORMBRIDGE_STORE_DIR",
        default=None,  # Computed from FORMBRIDGE_DATA_DIR
        var_type=Path,
        description="Directory of saved form schemas and exported HTML",
        category="storage",
    )
    PROPERTIES_LIBRARY_PATH = EnvConfig(
        name="PROPERTIES_LIBRARY_PATH",
        default=None,  # Computed from FORMBRIDGE_DATA_DIR
        var_type=Path,
        description="EDMS properties library XML file",
        category="storage",
    )
    ACTION_CODES_PATH = EnvConfig(
        name="ACTION_CODES_PATH",
        default=None,  # Computed from FORMBRIDGE_DATA_DIR
        var_type=Path,
        description="Action codes library XML file",
        category="storage",
    )

    # -------------------------------------------------------------------------
    # Form Loader
    # -------------------------------------------------------------------------
    LOADER_TIMEOUT = EnvConfig(
        name="LOADER_TIMEOUT",
        default=10.0,
        var_type=float,
        description="Timeout in seconds for fetching forms by URL",
        category="loader",
    )
    LOADER_VERIFY_TLS = EnvConfig(
        name="LOADER_VERIFY_TLS",
        default=True,
        var_type=bool,
        description="Verify TLS certificates when fetching forms by URL",
        category="loader",
    )

    # -------------------------------------------------------------------------
    # Service Configuration (ports chosen to avoid common ports like 8080)
    # -------------------------------------------------------------------------
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="0.0.0.0",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=18080,
        var_type=int,
        description="MCP server port (avoids 8080)",
        category="service",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI and MCP server",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type in (int, float):
        try:
            return var_type(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    if var_type is Path:
        return Path(value).expanduser()

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type (str, int, float, bool, or Path).

    Example:
        >>> port = get_environment(EnvVar.MCP_PORT)
        18080
        >>> port = get_environment(EnvVar.MCP_PORT, override=9000)
        9000
    """
    config: EnvConfig = env_var.value

    # Override takes highest priority
    if override is not None:
        return override

    # Check environment
    raw_value = os.environ.get(config.name)

    # Convert and return
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Path Helpers
# =============================================================================


def get_data_dir(override: Path | str | None = None) -> Path:
    """Get the base data directory.

    Resolution: override > FORMBRIDGE_DATA_DIR > ~/.formbridge
    """
    if override is not None:
        return Path(override)

    env_path = get_environment(EnvVar.FORMBRIDGE_DATA_DIR)
    if env_path:
        return env_path

    return Path.home() / ".formbridge"


def _data_path(env_var: EnvVar, name: str, override: Path | str | None) -> Path:
    """Resolve a path: override > env_var > {data_dir}/{name}."""
    if override is not None:
        return Path(override)

    env_path = get_environment(env_var)
    if env_path:
        return env_path

    return get_data_dir() / name


def get_store_dir(override: Path | str | None = None) -> Path:
    """Get the saved forms directory."""
    return _data_path(EnvVar.FORMBRIDGE_STORE_DIR, "forms", override)


def get_properties_library_path(override: Path | str | None = None) -> Path:
    """Get the EDMS properties library XML path."""
    return _data_path(EnvVar.PROPERTIES_LIBRARY_PATH, "propertiesLibrary.xml", override)


def get_action_codes_path(override: Path | str | None = None) -> Path:
    """Get the action codes library XML path."""
    return _data_path(EnvVar.ACTION_CODES_PATH, "actionCodesLibrary.xml", override)


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (storage, loader, service, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Path helpers
    "get_data_dir",
    "get_store_dir",
    "get_properties_library_path",
    "get_action_codes_path",
    # Introspection
    "list_environment_variables",
]
