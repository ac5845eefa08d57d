"""MCP tools for formbridge.

This module provides the core MCP tools that expose form import, export,
validation and library lookups.

Tools:
    - import_html: Legacy HTML to form JSON (returns draft tree + JSON)
    - export_html: Form JSON to HTML document
    - create_form: New empty or table form
    - validate_form: Validate form structure and bindings
    - list_action_codes / list_classes: Library lookups
"""

from .forms import create_form, export_html, import_html
from .library import list_action_codes, list_classes
from .validate import validate_form

__all__ = [
    "import_html",
    "export_html",
    "create_form",
    "validate_form",
    "list_action_codes",
    "list_classes",
]
