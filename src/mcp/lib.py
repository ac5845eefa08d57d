"""Core MCP server logic for formbridge.

Provides factory functions and configuration for creating MCP server instances.
"""

from dataclasses import dataclass
from enum import Enum

from src.config import EnvVar, get_environment

SERVER_NAME = "formbridge"

# Tools and resources registered in server.py
TOOL_NAMES = (
    "import_html",
    "export_html",
    "create_form",
    "validate_form",
    "list_action_codes",
    "list_classes",
    "status",
)
RESOURCE_URIS = ("schema://form",)


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass
class ServerConfig:
    """Configuration for MCP server.

    Attributes:
        name: Server display name.
        transport: Transport type for communication.
        host: Bind address for HTTP/SSE transports.
        port: Port for HTTP/SSE transports.
        path: URL path for HTTP transport.
    """

    name: str = SERVER_NAME
    transport: TransportType = TransportType.STDIO
    host: str = "0.0.0.0"
    port: int = 18080
    path: str = "/mcp"

    @classmethod
    def from_env(
        cls,
        transport: TransportType | None = None,
    ) -> "ServerConfig":
        """Create config from environment variables.

        Args:
            transport: Override transport type (default: STDIO).

        Returns:
            ServerConfig with values from environment.
        """
        return cls(
            name=SERVER_NAME,
            transport=transport or TransportType.STDIO,
            host=get_environment(EnvVar.MCP_HOST),
            port=get_environment(EnvVar.MCP_PORT),
        )


def get_server_version() -> str:
    """Get server version string."""
    from src import __version__

    return __version__


def get_server_capabilities() -> dict[str, list[str]]:
    """Describe what the server exposes over MCP.

    Returns:
        Dictionary with the tool names, resource URIs and transports.
    """
    return {
        "tools": list(TOOL_NAMES),
        "resources": list(RESOURCE_URIS),
        "transports": [t.value for t in TransportType],
    }


__all__ = [
    "SERVER_NAME",
    "TOOL_NAMES",
    "RESOURCE_URIS",
    "TransportType",
    "ServerConfig",
    "get_server_version",
    "get_server_capabilities",
]
