"""CLI entry point for formbridge.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.config import get_store_dir
from src.core import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _write_output(text: str, output: Path | None) -> None:
    """Write text to a file, or stdout when no file is given."""
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    logger.info(f"Wrote {output}")


def _read_form(path: Path):
    """Read a form from a JSON schema or HTML file."""
    from src.importer import parse_html_to_schema
    from src.schema import schema_from_json

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json" or text.lstrip().startswith("{"):
        return schema_from_json(text)
    return parse_html_to_schema(text, path.stem)


# =============================================================================
# Form Commands
# =============================================================================


def cmd_import(args: argparse.Namespace) -> int:
    """Handle the import command (legacy HTML to schema)."""
    from src.importer import parse_html_to_schema
    from src.output import format_form_tree
    from src.schema import schema_to_json
    from src.storage import FormStore

    try:
        html = args.html.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot read {args.html}: {e}")
        return 1

    schema = parse_html_to_schema(html, args.name or args.html.stem)
    logger.info(f"Imported '{schema.name}' with {len(schema.sections)} section(s)")

    if args.save:
        path = FormStore(get_store_dir()).save(schema)
        logger.info(f"Saved to store: {path}")

    if args.format == "tree":
        _write_output(format_form_tree(schema), args.output)
    else:
        _write_output(schema_to_json(schema), args.output)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Handle the export command (schema to HTML)."""
    from src.exporter import export_filename, schema_to_html
    from src.schema import SchemaLoadError, schema_from_json
    from src.storage import FormStore

    try:
        schema = schema_from_json(args.schema.read_text(encoding="utf-8"))
    except (OSError, SchemaLoadError) as e:
        logger.error(f"Cannot load {args.schema}: {e}")
        return 1

    html = schema_to_html(schema)
    filename = export_filename(schema, "html")

    if args.library:
        path = FormStore(get_store_dir()).save_html(filename, html)
        logger.info(f"Saved to forms library: {path}")
        return 0

    output = args.output
    if output is not None and output.is_dir():
        output = output / filename
    _write_output(html, output)
    return 0


def cmd_new(args: argparse.Namespace) -> int:
    """Handle the new command (empty form skeleton)."""
    from src.builder import create_empty_form, create_table_section
    from src.schema import schema_to_json

    schema = create_empty_form(args.name)
    if args.table_columns:
        schema = schema.model_copy(
            update={"sections": [*schema.sections, create_table_section(columns=args.table_columns)]}
        )
    _write_output(schema_to_json(schema), args.output)
    return 0


def cmd_tree(args: argparse.Namespace) -> int:
    """Handle the tree command."""
    from src.output import format_form_tree
    from src.schema import SchemaLoadError

    try:
        schema = _read_form(args.form)
    except (OSError, SchemaLoadError) as e:
        logger.error(f"Cannot load {args.form}: {e}")
        return 1

    print(format_form_tree(schema))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    from src.library import LibraryError, PropertiesLibrary
    from src.schema import SchemaLoadError
    from src.validation import Severity, validate_form

    try:
        schema = _read_form(args.form)
    except (OSError, SchemaLoadError) as e:
        logger.error(f"Cannot load {args.form}: {e}")
        return 1

    lookup = None
    if not args.no_bindings:
        library = PropertiesLibrary(args.properties)
        if library.path.exists():
            try:
                library.classes()
                lookup = library
            except LibraryError as e:
                logger.warning(f"Skipping binding checks: {e}")

    issues = validate_form(schema, lookup)
    errors = [i for i in issues if i.severity == Severity.ERROR]
    for issue in issues:
        print(f"{issue.severity.value.upper():8} {issue.node_id}: {issue.message} [{issue.issue_type}]")

    if errors:
        logger.error(f"{len(errors)} error(s), {len(issues) - len(errors)} warning(s)")
        return 1
    logger.info(f"Valid ({len(issues)} warning(s))")
    return 0


def cmd_load(args: argparse.Namespace) -> int:
    """Handle the load command (URL, path, base64 data or store key)."""
    from src.loader import FormLoadSource, load_form_from_source
    from src.output import format_form_tree
    from src.schema import schema_to_json

    if args.data:
        source = FormLoadSource.data(args.source)
    elif args.key:
        source = FormLoadSource.store(args.source)
    elif args.source.startswith(("http://", "https://")):
        source = FormLoadSource.url(args.source)
    else:
        source = FormLoadSource.path(args.source)

    result = load_form_from_source(source)
    if not result.success or result.schema is None:
        logger.error(result.error or "Unknown error loading form")
        return 1

    if args.format == "tree":
        _write_output(format_form_tree(result.schema), args.output)
    else:
        _write_output(schema_to_json(result.schema), args.output)
    return 0


def cmd_store(args: argparse.Namespace) -> int:
    """Handle the store command (list saved forms)."""
    from src.storage import FormStore

    store = FormStore(get_store_dir())
    print(f"Store: {store.root}")
    print("\nSchemas:")
    for key in store.list_keys():
        print(f"  {key}")
    print("\nForms library:")
    for name in store.list_html():
        print(f"  {name}")
    return 0


def cmd_codes(_args: argparse.Namespace) -> int:
    """Handle the codes command."""
    from src.library import ActionCodeLibrary

    library = ActionCodeLibrary()
    source = library.path if library.path.exists() else "built-in defaults"
    print(f"Action codes ({source}):")
    for code in library.codes():
        description = f"  {code.description}" if code.description else ""
        print(f"  {code.value:6} {code.label}{description}")
    return 0


def cmd_classes(args: argparse.Namespace) -> int:
    """Handle the classes command."""
    from src.library import LibraryError, PropertiesLibrary

    library = PropertiesLibrary(args.properties)
    try:
        classes = library.classes()
    except LibraryError as e:
        logger.error(str(e))
        return 1

    if not classes:
        logger.warning(f"No classes in {library.path}")
        return 1

    for entry in classes:
        if args.class_name and entry.name != args.class_name:
            continue
        print(entry.name)
        for prop in entry.properties:
            print(f"  ${{{prop.name}}}  {prop.label}")
    return 0


def handle_form_command(command: str, argv: list[str]) -> int:
    """Handle form-level commands through a shared parser."""
    parser = argparse.ArgumentParser(
        prog="python .",
        description="Import and export legacy HTML forms",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # import command
    import_parser = subparsers.add_parser("import", help="Import legacy HTML into a form schema")
    import_parser.add_argument("html", type=Path, help="HTML file to import")
    import_parser.add_argument("--name", "-n", type=str, default=None, help="Fallback form name")
    import_parser.add_argument(
        "--format",
        "-f",
        type=str,
        default="json",
        choices=["json", "tree"],
        help="Output format (default: json)",
    )
    import_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    import_parser.add_argument("--save", action="store_true", help="Also save the schema to the store")
    import_parser.set_defaults(func=cmd_import)

    # export command
    export_parser = subparsers.add_parser("export", help="Export a form schema to HTML")
    export_parser.add_argument("schema", type=Path, help="Form schema JSON file")
    export_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file or directory (prints to stdout if not specified)",
    )
    export_parser.add_argument(
        "--library",
        action="store_true",
        help="Save into the forms library instead of writing a file",
    )
    export_parser.set_defaults(func=cmd_export)

    # new command
    new_parser = subparsers.add_parser("new", help="Create an empty form schema")
    new_parser.add_argument("--name", "-n", type=str, default=None, help="Form name")
    new_parser.add_argument(
        "--table-columns",
        type=int,
        default=0,
        help="Add a table section with this many columns",
    )
    new_parser.add_argument("--output", "-o", type=Path, default=None, help="Output file path")
    new_parser.set_defaults(func=cmd_new)

    # tree command
    tree_parser = subparsers.add_parser("tree", help="Print a form as a text tree")
    tree_parser.add_argument("form", type=Path, help="Form schema JSON or HTML file")
    tree_parser.set_defaults(func=cmd_tree)

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a form")
    validate_parser.add_argument("form", type=Path, help="Form schema JSON or HTML file")
    validate_parser.add_argument(
        "--properties",
        type=Path,
        default=None,
        help="Properties library XML (default: PROPERTIES_LIBRARY_PATH)",
    )
    validate_parser.add_argument("--no-bindings", action="store_true", help="Skip binding checks")
    validate_parser.set_defaults(func=cmd_validate)

    # load command
    load_parser = subparsers.add_parser("load", help="Load a form from a URL, path, data or store key")
    load_parser.add_argument("source", type=str, help="URL, file path, forms/<name>, data or key")
    load_group = load_parser.add_mutually_exclusive_group()
    load_group.add_argument("--data", action="store_true", help="Treat source as base64 JSON")
    load_group.add_argument("--key", action="store_true", help="Treat source as a store key")
    load_parser.add_argument(
        "--format",
        "-f",
        type=str,
        default="json",
        choices=["json", "tree"],
        help="Output format (default: json)",
    )
    load_parser.add_argument("--output", "-o", type=Path, default=None, help="Output file path")
    load_parser.set_defaults(func=cmd_load)

    # store command
    store_parser = subparsers.add_parser("store", help="List saved forms")
    store_parser.set_defaults(func=cmd_store)

    # codes command
    codes_parser = subparsers.add_parser("codes", help="List action codes")
    codes_parser.set_defaults(func=cmd_codes)

    # classes command
    classes_parser = subparsers.add_parser("classes", help="List EDMS classes and properties")
    classes_parser.add_argument("class_name", nargs="?", default=None, help="Only show this class")
    classes_parser.add_argument("--properties", type=Path, default=None, help="Properties library XML")
    classes_parser.set_defaults(func=cmd_classes)

    args = parser.parse_args([command, *argv])
    return args.func(args)


FORM_COMMANDS = ("import", "export", "new", "tree", "validate", "load", "store", "codes", "classes")


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . test                # Run all tests
        python . test --unit         # Run only unit tests (fast, no I/O)
        python . test --integration  # Run integration tests (file system)
        python . test --mcp          # Run MCP protocol tests
        python . test --all          # Run all tests explicitly
        python . test -v             # Run with verbose output
        python . test -k "import"    # Run tests matching pattern

    Test Tiers:
        unit        - Fast tests with no I/O or external dependencies
        integration - Tests touching the file system or the local store
        mcp         - Tests driving the MCP server through an in-memory client
    """
    # Test tier mapping
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--integration": ["-m", "integration"],
        "--mcp": ["-m", "mcp"],
        "--all": [],  # No filter, run everything
    }

    # Process tier flags
    pytest_args: list[str] = []
    remaining_args: list[str] = []

    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    # Build final command
    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


# =============================================================================
# MCP Server Command
# =============================================================================


def handle_mcp_command(argv: list[str]) -> int:
    """Handle MCP server commands.

    Usage:
        python . mcp run              # Start in STDIO mode (for Claude Desktop)
        python . mcp serve            # Start in HTTP mode
        python . mcp serve --port 8080
        python . mcp info             # Show server info
    """
    if not argv:
        print("MCP Server Commands")
        print("\nUsage: python . mcp {command} [options]")
        print("\nCommands:")
        print("  run                 Start server in STDIO mode (for Claude Desktop)")
        print("  serve               Start server in HTTP mode")
        print("  info                Show server information")
        print("\nOptions for 'serve':")
        print("  --host HOST         Bind address (default: MCP_HOST or 0.0.0.0)")
        print("  --port PORT         Port number (default: MCP_PORT or 18080)")
        print("  --transport TYPE    Transport: http or sse (default: http)")
        print("\nClaude Desktop Configuration:")
        print("  Add to claude_desktop_config.json:")
        print("  {")
        print('    "mcpServers": {')
        print('      "formbridge": {')
        print('        "command": "python",')
        print('        "args": [".", "mcp", "run"],')
        print('        "cwd": "/path/to/formbridge"')
        print("      }")
        print("    }")
        print("  }")
        return 1

    subcommand = argv[0]
    subargs = argv[1:]

    if subcommand == "run":
        from src.mcp.server import main as server_main

        return server_main(["--transport", "stdio", *subargs])

    elif subcommand == "serve":
        from src.mcp.server import main as server_main

        if "--transport" not in subargs and "-t" not in subargs:
            subargs = ["--transport", "http", *subargs]
        return server_main(subargs)

    elif subcommand == "info":
        from src.mcp import get_server_capabilities, get_server_version
        from src.mcp.health import get_server_health

        print("formbridge MCP Server")
        print("=" * 40)
        print(f"Version: {get_server_version()}")
        capabilities = get_server_capabilities()
        print("\nTools:")
        for name in capabilities["tools"]:
            print(f"  - {name}")
        print(f"\nResources: {', '.join(capabilities['resources'])}")
        print(f"Transports: {', '.join(capabilities['transports'])}")
        print(f"\nHealth: {get_server_health().status.value}")
        return 0

    else:
        logger.error(f"Unknown mcp command: {subcommand}")
        return handle_mcp_command([])


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Forms ===")
    print("  import     Import legacy HTML into a form schema")
    print("  export     Export a form schema to HTML")
    print("  new        Create an empty form schema")
    print("  tree       Print a form as a text tree")
    print("  validate   Validate a form (structure and bindings)")
    print("  load       Load a form from a URL, path, base64 data or store key")
    print("  store      List saved schemas and the forms library")
    print("\n=== Libraries ===")
    print("  codes      List action codes")
    print("  classes    List EDMS classes and their properties")
    print("\n=== MCP Server ===")
    print("  mcp        Run MCP server (STDIO or HTTP mode)")
    print("\n=== Development ===")
    print("  test       Run the test suite (--unit, --integration, --mcp, --all)")
    print("\nExamples:")
    print("  python . import legacy/Invoice.html --format tree")
    print("  python . import legacy/Invoice.html -o Invoice.json --save")
    print("  python . export Invoice.json --library")
    print("  python . validate Invoice.json")
    print("  python . load forms/Invoice_CRE.html")
    print("  python . mcp serve --port 18080")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    if command == "test":
        return cmd_test(rest_args)

    if command == "mcp":
        return handle_mcp_command(rest_args)

    if command in FORM_COMMANDS:
        setup_logging()
        return handle_form_command(command, rest_args)

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
