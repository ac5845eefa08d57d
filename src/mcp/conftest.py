"""Pytest fixtures for MCP server tests.

This module provides:
- Server and client fixtures for protocol testing
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

import pytest
from fastmcp import Client

if TYPE_CHECKING:
    from fastmcp import FastMCP


# =============================================================================
# Server Fixtures
# =============================================================================


@pytest.fixture
def mcp_server() -> FastMCP:
    """Create MCP server instance for testing.

    Returns:
        Configured FastMCP server instance.
    """
    from .server import create_server

    return create_server()


@pytest.fixture
async def mcp_client(mcp_server: FastMCP) -> AsyncGenerator[Client, None]:
    """Create connected MCP client for testing.

    Args:
        mcp_server: The MCP server instance.

    Yields:
        Connected in-memory Client instance.
    """
    async with Client(mcp_server) as client:
        yield client
