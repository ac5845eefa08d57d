"""MCP (Model Context Protocol) server for formbridge.

This module provides the MCP server implementation that exposes form
import, export and validation to LLM clients like Claude Desktop.

Example:
    # Start server in STDIO mode (for Claude Desktop)
    >>> from src.mcp.server import run_server
    >>> run_server()

    # Start server in HTTP mode
    >>> from src.mcp.server import run_server, TransportType
    >>> run_server(transport=TransportType.HTTP, port=18080)

    # Create server for testing
    >>> from src.mcp.server import create_server
    >>> server = create_server()

Available Tools:
    - import_html: Legacy HTML to form JSON (returns draft + JSON)
    - export_html: Form JSON to HTML document
    - create_form: New form
    - validate_form: Validate structure and bindings
    - list_action_codes / list_classes: Library lookups
    - status: Dependency health
"""

from .lib import (
    SERVER_NAME,
    ServerConfig,
    TransportType,
    get_server_capabilities,
    get_server_version,
)
from .server import create_server, mcp, run_server

__all__ = [
    # Server instance
    "mcp",
    "create_server",
    "run_server",
    # Configuration
    "SERVER_NAME",
    "ServerConfig",
    "TransportType",
    # Utilities
    "get_server_version",
    "get_server_capabilities",
]
