"""Builder module - default node constructors.

Example usage:
    >>> from src.builder import create_default_field
    >>> field = create_default_field("select")
    >>> len(field.options)
    2
"""

from .lib import (
    DEFAULT_ACTION_CODE,
    DEFAULT_STATIC_HTML,
    NESTED_TABLE_ATTRIBUTES,
    SECTION_TABLE_ATTRIBUTES,
    clamp,
    coerce_field_type,
    create_default_field,
    create_empty_column,
    create_empty_form,
    create_empty_row,
    create_empty_section,
    create_nested_table,
    create_static_block,
    create_table_section,
    generate_field_name,
)

__all__ = [
    "DEFAULT_ACTION_CODE",
    "DEFAULT_STATIC_HTML",
    "NESTED_TABLE_ATTRIBUTES",
    "SECTION_TABLE_ATTRIBUTES",
    "clamp",
    "coerce_field_type",
    "generate_field_name",
    "create_default_field",
    "create_static_block",
    "create_empty_column",
    "create_empty_row",
    "create_empty_section",
    "create_table_section",
    "create_nested_table",
    "create_empty_form",
]
