"""Centralized configuration management for formbridge.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from src.config import EnvVar, get_environment
    >>>
    >>> # Get any environment variable with automatic type conversion
    >>> port = get_environment(EnvVar.MCP_PORT)  # Returns int: 18080
    >>> timeout = get_environment(EnvVar.LOADER_TIMEOUT)  # Returns float: 10.0
    >>>
    >>> # Override at runtime
    >>> port = get_environment(EnvVar.MCP_PORT, override=9000)
    >>>
    >>> # List available variables by category
    >>> for var in list_environment_variables("storage"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    storage: Data directory, saved forms and library XML paths
    loader: Timeout and TLS settings for fetching forms by URL
    service: MCP server host and port
    logging: Log level
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Path helpers
    get_action_codes_path,
    get_data_dir,
    # Main interface
    get_environment,
    get_environment_info,
    get_properties_library_path,
    get_store_dir,
    # Introspection
    list_environment_variables,
)

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
