"""formbridge: legacy HTML form import, schema editing and HTML export."""

__version__ = "0.1.0"

from src.exporter import export_filename, schema_to_html
from src.importer import parse_html_to_schema
from src.schema import FormSchema, export_json_schema, schema_from_json, schema_to_json
from src.validation import ValidationIssue, is_valid, validate_form

__all__ = [
    "__version__",
    # Schema
    "FormSchema",
    "schema_to_json",
    "schema_from_json",
    "export_json_schema",
    # Import / export
    "parse_html_to_schema",
    "schema_to_html",
    "export_filename",
    # Validation
    "validate_form",
    "is_valid",
    "ValidationIssue",
]
