"""FastMCP server instance for formbridge.

This module provides the MCP server that exposes form import and export
tools to LLM clients. The API follows the user workflow:

    1. import_html: legacy HTML → form JSON + draft text tree
    2. validate_form: check structure and bindings
    3. export_html: form JSON → HTML document

Usage:
    # STDIO mode (for Claude Desktop)
    python -m src.mcp.server

    # HTTP mode (for web deployment)
    python -m src.mcp.server --transport http --port 18080

    # Via CLI
    python . mcp run
    python . mcp serve --port 18080
"""

import argparse
import json
import logging
import sys
from functools import lru_cache
from typing import Any

from fastmcp import FastMCP

from src.core import setup_logging

from .lib import (
    SERVER_NAME,
    TransportType,
    get_server_capabilities,
    get_server_version,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Server Instructions (LLM Guidance)
# =============================================================================

SERVER_INSTRUCTIONS = """\
## formbridge MCP Server

Converts legacy EDMS HTML forms into an editable JSON form schema and back.
Bound fields carry `${property}` tokens that the EDMS fills at runtime.

### Quick Start
1. `status()` → check which libraries are installed
2. `import_html(html)` → form JSON + draft tree
3. Review the draft with the user
4. `validate_form(form)` → check before export
5. `export_html(form)` → HTML document and file name

### Other Tools
- `create_form(name, table_columns)` - Start a new form
- `list_classes(class_name)` - EDMS classes and their bindable properties
- `list_action_codes()` - Action codes a form can declare

### Resources
- `schema://form` - JSON schema of the form format
"""

# =============================================================================
# Server Instance
# =============================================================================

mcp = FastMCP(
    name=SERVER_NAME,
    instructions=SERVER_INSTRUCTIONS,
)


# =============================================================================
# Form Tools (User Workflow)
# =============================================================================


@mcp.tool
def import_html(html: str, name: str | None = None) -> dict[str, Any]:
    """Import a legacy HTML form into the form schema.

    Tables become table sections with one column per cell; pages without
    tables become a single stack section. Values like `${applicantName}`
    become property bindings.

    Args:
        html: Full HTML document or fragment.
        name: Fallback form name when the page has no heading or title.

    Returns:
        Dictionary with:
        - form: The form as JSON (pass to validate_form / export_html)
        - draft: Human-readable text tree for quick review:
            ```
            Change Request [form, CRE]
            └── Change Request [table section]
                └── Row 1 [2 columns]
                    ├── Column 1 [span 4]
                    │   └── Static HTML
                    └── Column 2 [span 4]
                        └── Applicant [text, ${applicantName}]
            ```
        - stats: Section and field counts
    """
    from .tools.forms import import_html as _import

    return _import(html=html, name=name)


@mcp.tool
def export_html(form: dict[str, Any]) -> dict[str, Any]:
    """Export a form to an HTML document.

    Imported forms keep their original head and surrounding page content.

    Args:
        form: Form JSON from import_html or create_form.

    Returns:
        Dictionary with:
        - html: The document
        - filename: Suggested name, e.g. Correspondence_CRE.html
    """
    from .tools.forms import export_html as _export

    return _export(form=form)


@mcp.tool
def create_form(
    name: str | None = None,
    table_columns: int | None = None,
    form_class: str | None = None,
    action_code: str | None = None,
) -> dict[str, Any]:
    """Create a new form.

    Args:
        name: Form name (default "Untitled form").
        table_columns: Start with a one-row table of 1-4 cells (optional).
        form_class: EDMS class for bindings (optional).
        action_code: Action code (default CRE).

    Returns:
        Dictionary with the form JSON and its draft tree.
    """
    from .tools.forms import create_form as _create

    return _create(
        name=name,
        table_columns=table_columns,
        form_class=form_class,
        action_code=action_code,
    )


@mcp.tool
def validate_form(form: dict[str, Any], check_bindings: bool = True) -> dict[str, Any]:
    """Validate a form before export.

    Args:
        form: Form JSON.
        check_bindings: Check bindings against the properties library.

    Returns:
        Dictionary with valid, errors, warnings and stats.
    """
    from .tools.validate import validate_form as _validate

    return _validate(form=form, check_bindings=check_bindings)


# =============================================================================
# Library Tools
# =============================================================================


@mcp.tool
def list_action_codes() -> dict[str, Any]:
    """List action codes (CRE, AMD, ...) with descriptions."""
    from .tools.library import list_action_codes as _list

    return _list()


@mcp.tool
def list_classes(class_name: str | None = None) -> dict[str, Any]:
    """List EDMS classes and the properties their forms can bind.

    Args:
        class_name: Only return this class (optional).
    """
    from .tools.library import list_classes as _list

    return _list(class_name=class_name)


@mcp.tool
def status() -> dict[str, Any]:
    """Check server health and dependency status.

    Returns:
        Dictionary with:
        - status: "healthy" or "degraded"
        - version: Server version
        - capabilities: Which features work
        - services: Detailed status of each dependency
        - exposes: Tool names, resource URIs and transports
        - action_required: What to fix if degraded
    """
    from .health import get_server_health

    health = get_server_health()
    result = health.to_dict()
    result["exposes"] = get_server_capabilities()

    actions = []
    if not health.can_check_bindings:
        actions.append("Set PROPERTIES_LIBRARY_PATH to enable binding checks")
    if not health.can_save:
        actions.append("Set FORMBRIDGE_STORE_DIR to a writable directory")
    if actions:
        result["action_required"] = actions

    return result


# =============================================================================
# Resources (Schema Reference)
# =============================================================================


@lru_cache(maxsize=1)
def _cached_form_schema() -> str:
    """Cached form JSON schema."""
    from src.schema import export_json_schema

    return json.dumps(export_json_schema(), indent=2)


@mcp.resource("schema://form")
def get_form_schema() -> str:
    """Get the FormSchema JSON schema.

    Returns the full schema (camelCase wire names) for form structures.
    """
    return _cached_form_schema()


# =============================================================================
# Server Factory & Runner
# =============================================================================


def create_server() -> FastMCP:
    """Create and configure the MCP server instance.

    Returns:
        Configured FastMCP server instance.
    """
    return mcp


def run_server(
    transport: TransportType = TransportType.STDIO,
    host: str = "0.0.0.0",
    port: int = 18080,
) -> None:
    """Run the MCP server with specified transport.

    Args:
        transport: Transport type (stdio, http, sse).
        host: Bind address for HTTP/SSE.
        port: Port for HTTP/SSE.
    """
    from .health import log_startup_status

    logger.info(f"Starting {SERVER_NAME} server v{get_server_version()}")
    logger.info(f"Transport: {transport.value}")

    log_startup_status()

    if transport == TransportType.STDIO:
        logger.info("Running in STDIO mode (for Claude Desktop)")
        mcp.run()
    elif transport == TransportType.HTTP:
        logger.info(f"Running in HTTP mode at http://{host}:{port}/mcp")
        mcp.run(
            transport="http",
            host=host,
            port=port,
            path="/mcp",
        )
    elif transport == TransportType.SSE:
        logger.info(f"Running in SSE mode at http://{host}:{port}")
        mcp.run(
            transport="sse",
            host=host,
            port=port,
        )
    else:
        raise ValueError(f"Unknown transport: {transport}")


# =============================================================================
# CLI Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for MCP server.

    Args:
        argv: Command line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 for success).
    """
    from .lib import ServerConfig

    defaults = ServerConfig.from_env()
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server for legacy HTML form import and export",
    )
    parser.add_argument(
        "--transport",
        "-t",
        type=str,
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=defaults.host,
        help=f"Bind address for HTTP/SSE (default: {defaults.host})",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=defaults.port,
        help=f"Port for HTTP/SSE (default: {defaults.port})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else None)

    try:
        transport = TransportType(args.transport)
        run_server(
            transport=transport,
            host=args.host,
            port=args.port,
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
