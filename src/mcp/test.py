"""Unit tests for MCP server module.

Tests cover:
- Server configuration
- Server instance creation
- Tool and resource registration over the MCP protocol
"""

import json

import pytest

from .lib import (
    RESOURCE_URIS,
    TOOL_NAMES,
    ServerConfig,
    TransportType,
    get_server_capabilities,
    get_server_version,
)
from .server import create_server, mcp

# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        """Default config has expected values."""
        config = ServerConfig()

        assert config.name == "formbridge"
        assert config.transport == TransportType.STDIO
        assert config.host == "0.0.0.0"
        assert config.port == 18080
        assert config.path == "/mcp"

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        """from_env reads host and port from the environment."""
        monkeypatch.setenv("MCP_PORT", "19000")
        config = ServerConfig.from_env(transport=TransportType.HTTP)

        assert config.transport == TransportType.HTTP
        assert config.port == 19000


class TestTransportType:
    """Tests for TransportType enum."""

    @pytest.mark.unit
    def test_transport_from_string(self):
        """Transport can be created from string."""
        assert TransportType("stdio") == TransportType.STDIO
        assert TransportType("http") == TransportType.HTTP
        assert TransportType("sse") == TransportType.SSE


# =============================================================================
# Server Utility Tests
# =============================================================================


class TestServerUtilities:
    """Tests for server utility functions."""

    @pytest.mark.unit
    def test_get_server_version(self):
        """Server version is the package version."""
        from src import __version__

        assert get_server_version() == __version__
        assert len(get_server_version().split(".")) >= 2

    @pytest.mark.unit
    def test_get_server_capabilities(self):
        """Capabilities list the form tools, the schema resource and transports."""
        caps = get_server_capabilities()

        assert caps["tools"] == list(TOOL_NAMES)
        assert "import_html" in caps["tools"]
        assert caps["resources"] == ["schema://form"]
        assert caps["transports"] == ["stdio", "http", "sse"]


class TestServerInstance:
    """Tests for FastMCP server instance."""

    @pytest.mark.unit
    def test_create_server_returns_mcp(self):
        """create_server returns the mcp instance."""
        assert create_server() is mcp

    @pytest.mark.unit
    def test_server_has_name(self):
        """Server has correct name."""
        assert mcp.name == "formbridge"


# =============================================================================
# MCP Protocol Integration Tests (require async)
# =============================================================================


@pytest.mark.mcp
class TestMCPProtocol:
    """Integration tests using the in-memory MCP client."""

    @pytest.mark.asyncio
    async def test_client_can_list_tools(self, mcp_client):
        """Exactly the form workflow tools are exposed."""
        tools = await mcp_client.list_tools()

        assert {t.name for t in tools} == {
            "import_html",
            "export_html",
            "create_form",
            "validate_form",
            "list_action_codes",
            "list_classes",
            "status",
        }
        assert {t.name for t in tools} == set(TOOL_NAMES)

    @pytest.mark.asyncio
    async def test_import_then_export(self, mcp_client, legacy_form_html):
        """A form imported over the protocol exports again."""
        imported = await mcp_client.call_tool("import_html", {"html": legacy_form_html})
        form = imported.data["form"]
        assert form["name"] == "Change Request"

        exported = await mcp_client.call_tool("export_html", {"form": form})
        assert 'value="${applicantName}"' in exported.data["html"]

    @pytest.mark.asyncio
    async def test_status(self, mcp_client):
        """status reports services."""
        result = await mcp_client.call_tool("status", {})
        assert result.data["status"] in ("healthy", "degraded")
        assert "properties_library" in result.data["services"]
        assert result.data["version"] == get_server_version()
        assert result.data["exposes"] == get_server_capabilities()

    @pytest.mark.asyncio
    async def test_invalid_form_is_tool_error(self, mcp_client):
        """Argument errors surface as tool errors."""
        with pytest.raises(Exception, match="missing required fields"):
            await mcp_client.call_tool("export_html", {"form": {"name": "x"}})

    @pytest.mark.asyncio
    async def test_form_schema_resource(self, mcp_client):
        """The form JSON schema is published as a resource."""
        resources = await mcp_client.list_resources()
        assert {str(r.uri) for r in resources} == set(RESOURCE_URIS)

        contents = await mcp_client.read_resource("schema://form")
        schema = json.loads(contents[0].text)
        assert "sections" in schema["properties"]
