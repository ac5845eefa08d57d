"""Exporter module - FormSchema to HTML.

Example usage:
    >>> from src.builder import create_empty_form
    >>> from src.exporter import schema_to_html
    >>> schema_to_html(create_empty_form("Blank")).startswith("<!doctype html>")
    True
"""

from .lib import (
    HtmlExporter,
    escape_html,
    export_filename,
    render,
    schema_filename,
    schema_to_html,
)

__all__ = [
    "HtmlExporter",
    "escape_html",
    "export_filename",
    "render",
    "schema_filename",
    "schema_to_html",
]
