"""Importer module - legacy HTML forms to FormSchema.

Example usage:
    >>> from src.importer import parse_html_to_schema
    >>> form = parse_html_to_schema("<h1>Request</h1><input name='who'>")
    >>> form.name
    'Request'
"""

from .html import (
    LabelIndex,
    extract_binding,
    find_top_level_tables,
    normalize_html,
    parse_document,
    sanitize_label,
)
from .lib import (
    DEFAULT_FORM_NAME,
    infer_field_type,
    map_element_to_field,
    parse,
    parse_html_to_schema,
    parse_table,
)

__all__ = [
    "DEFAULT_FORM_NAME",
    "LabelIndex",
    "extract_binding",
    "find_top_level_tables",
    "infer_field_type",
    "map_element_to_field",
    "normalize_html",
    "parse",
    "parse_document",
    "parse_html_to_schema",
    "parse_table",
    "sanitize_label",
]
