"""Editing module - copy-on-write operations on FormSchema trees."""

from .lib import (
    PropertyLookup,
    add_field,
    add_nested_table,
    add_row,
    add_section,
    add_static_block,
    add_table_section,
    change_form_class,
    find_node,
    remove_field,
    remove_row,
    remove_section,
    remove_static_block,
    reorder_fields,
    reorder_rows,
    replace,
    transform,
    update_column,
    update_field,
    update_form,
    update_row,
    update_section,
    update_static_block,
)

__all__ = [
    "PropertyLookup",
    "add_field",
    "add_nested_table",
    "add_row",
    "add_section",
    "add_static_block",
    "add_table_section",
    "change_form_class",
    "find_node",
    "remove_field",
    "remove_row",
    "remove_section",
    "remove_static_block",
    "reorder_fields",
    "reorder_rows",
    "replace",
    "transform",
    "update_column",
    "update_field",
    "update_form",
    "update_row",
    "update_section",
    "update_static_block",
]
