"""Import, export and create tools for MCP server.

These tools move forms between legacy HTML and the JSON schema. Forms
travel as camelCase JSON dicts, the same shape saved by the builder.
"""

import logging
from typing import Any

from src.builder import create_empty_form, create_table_section
from src.exporter import export_filename, schema_to_html
from src.importer import parse_html_to_schema
from src.output import format_form_tree
from src.schema import (
    FormSchema,
    SchemaLoadError,
    SectionLayout,
    iter_fields,
    schema_from_dict,
    schema_to_dict,
)

logger = logging.getLogger(__name__)


def parse_form_argument(form: dict[str, Any]) -> FormSchema:
    """Decode a form dict passed by a client.

    Raises:
        ValueError: If the dict is not a valid form.
    """
    try:
        return schema_from_dict(form)
    except SchemaLoadError as e:
        raise ValueError(str(e)) from e


def form_stats(schema: FormSchema) -> dict[str, int]:
    """Counts shown next to a draft."""
    fields = list(iter_fields(schema))
    return {
        "sections": len(schema.sections),
        "table_sections": sum(1 for s in schema.sections if s.layout == SectionLayout.TABLE),
        "fields": len(fields),
        "bound_fields": sum(1 for f in fields if f.binding_property),
    }


def import_html(html: str, name: str | None = None) -> dict[str, Any]:
    """Import legacy HTML into a form.

    Args:
        html: Full document or fragment.
        name: Fallback form name when the document has no heading or title.

    Returns:
        Dictionary containing:
        - form: The form as JSON
        - draft: Human-readable text tree
        - stats: Section and field counts
    """
    if not html.strip():
        raise ValueError("html must not be empty")

    schema = parse_html_to_schema(html, name)
    stats = form_stats(schema)
    logger.info(f"Imported '{schema.name}': {stats['fields']} fields")
    return {
        "form": schema_to_dict(schema),
        "draft": format_form_tree(schema),
        "stats": stats,
    }


def export_html(form: dict[str, Any]) -> dict[str, Any]:
    """Export a form as an HTML document.

    Returns:
        Dictionary containing:
        - html: Document text
        - filename: Suggested file name ({class}_{action}.html)
    """
    schema = parse_form_argument(form)
    return {
        "html": schema_to_html(schema),
        "filename": export_filename(schema, "html"),
    }


def create_form(
    name: str | None = None,
    table_columns: int | None = None,
    form_class: str | None = None,
    action_code: str | None = None,
) -> dict[str, Any]:
    """Create a new form.

    Args:
        name: Form name.
        table_columns: When given, start with a one-row table section of
            this many cells (clamped to 1-4).
        form_class: EDMS class.
        action_code: Action code (defaults to CRE).

    Returns:
        Dictionary containing the form JSON and its draft tree.
    """
    schema = create_empty_form(name)
    update: dict[str, Any] = {}
    if table_columns is not None:
        update["sections"] = [create_table_section(columns=table_columns)]
    if form_class:
        update["form_class"] = form_class
    if action_code:
        update["action_code"] = action_code
    if update:
        schema = schema.model_copy(update=update)
    return {"form": schema_to_dict(schema), "draft": format_form_tree(schema)}


__all__ = [
    "parse_form_argument",
    "form_stats",
    "import_html",
    "export_html",
    "create_form",
]
