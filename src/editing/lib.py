"""Copy-on-write editing operations for FormSchema trees.

Every operation takes a form and returns a new one; the input is never
mutated (the models are frozen). Operations that address an unknown id
return a form equal to the input. Column level operations reach columns
inside nested tables at any depth.

Example:
    >>> from src.builder import create_empty_form
    >>> form = add_section(create_empty_form("Request"), "Applicant")
    >>> form.sections[0].title
    'Applicant'
"""

from collections.abc import Callable, Iterator
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from src.builder import (
    create_default_field,
    create_empty_row,
    create_empty_section,
    create_nested_table,
    create_static_block,
    create_table_section,
)
from src.schema import (
    Column,
    FormField,
    FormSchema,
    Row,
    Section,
    StaticBlock,
    StaticBlockKind,
    Table,
    iter_columns,
)

ModelT = TypeVar("ModelT", bound=BaseModel)
ItemT = TypeVar("ItemT")

RowsFn = Callable[[list[Row]], list[Row]]
ColumnFn = Callable[[Column], Column]

Node = Section | Row | Column | FormField | StaticBlock | Table


class PropertyLookup(Protocol):
    """Read-only view of the EDMS properties library."""

    def property_names(self, class_name: str) -> set[str]: ...


# =============================================================================
# Tree plumbing
# =============================================================================


def replace(model: ModelT, **changes: Any) -> ModelT:
    """Return a validated copy of a frozen model with `changes` applied.

    Raises:
        ValueError: If a change names an attribute the model does not have.
        pydantic.ValidationError: If a changed value is invalid.
    """
    fields = type(model).model_fields
    unknown = sorted(set(changes) - set(fields))
    if unknown:
        raise ValueError(f"Unknown {type(model).__name__} attribute(s): {', '.join(unknown)}")
    data = {name: getattr(model, name) for name in fields}
    data.update(changes)
    return type(model).model_validate(data)


def _keep(value: ItemT) -> ItemT:
    return value


def _same(new: list[Any], old: list[Any]) -> bool:
    """True when two child lists hold the very same nodes."""
    return len(new) == len(old) and all(a is b for a, b in zip(new, old))


def _transform_rows(rows: list[Row], rows_fn: RowsFn, column_fn: ColumnFn) -> list[Row]:
    result = []
    for row in rows_fn(rows):
        columns = [_transform_column(c, rows_fn, column_fn) for c in row.columns]
        result.append(row if _same(columns, row.columns) else replace(row, columns=columns))
    return result


def _transform_column(column: Column, rows_fn: RowsFn, column_fn: ColumnFn) -> Column:
    column = column_fn(column)
    tables = []
    for table in column.nested_tables:
        rows = _transform_rows(table.rows, rows_fn, column_fn)
        tables.append(table if _same(rows, table.rows) else replace(table, rows=rows))
    if _same(tables, column.nested_tables):
        return column
    return replace(column, nested_tables=tables)


def transform(
    schema: FormSchema,
    rows_fn: RowsFn = _keep,
    column_fn: ColumnFn = _keep,
) -> FormSchema:
    """Rebuild a form, applying `rows_fn` to every row list and
    `column_fn` to every column, nested tables included.

    Only nodes on the path to a change are rebuilt; untouched subtrees are
    shared with the input, and a form with no changes comes back as is.
    """
    sections = []
    for section in schema.sections:
        rows = _transform_rows(section.rows, rows_fn, column_fn)
        sections.append(section if _same(rows, section.rows) else replace(section, rows=rows))
    if _same(sections, schema.sections):
        return schema
    return replace(schema, sections=sections)


def _for_column(column_id: str, update: ColumnFn) -> ColumnFn:
    def apply(column: Column) -> Column:
        return update(column) if column.id == column_id else column

    return apply


def _move(items: list[ItemT], from_index: int, to_index: int) -> list[ItemT]:
    if not (0 <= from_index < len(items) and 0 <= to_index < len(items)):
        return list(items)
    moved = list(items)
    moved.insert(to_index, moved.pop(from_index))
    return moved


def _map_sections(
    schema: FormSchema, section_id: str, update: Callable[[Section], Section]
) -> FormSchema:
    sections = [update(s) if s.id == section_id else s for s in schema.sections]
    return replace(schema, sections=sections)


# =============================================================================
# Updates
# =============================================================================


def update_form(schema: FormSchema, **changes: Any) -> FormSchema:
    """Change form level attributes (name, description, action_code, ...)."""
    return replace(schema, **changes)


def update_section(schema: FormSchema, section_id: str, **changes: Any) -> FormSchema:
    """Change attributes of one section."""
    return _map_sections(schema, section_id, lambda s: replace(s, **changes))


def update_row(schema: FormSchema, row_id: str, **changes: Any) -> FormSchema:
    """Change attributes of one row, nested rows included."""

    def rows_fn(rows: list[Row]) -> list[Row]:
        return [replace(r, **changes) if r.id == row_id else r for r in rows]

    return transform(schema, rows_fn=rows_fn)


def update_column(schema: FormSchema, column_id: str, **changes: Any) -> FormSchema:
    """Change attributes of one column (span, col_span, ...)."""
    return transform(schema, column_fn=_for_column(column_id, lambda c: replace(c, **changes)))


def update_field(schema: FormSchema, field_id: str, **changes: Any) -> FormSchema:
    """Change attributes of one field."""

    def column_fn(column: Column) -> Column:
        if not any(f.id == field_id for f in column.fields):
            return column
        fields = [replace(f, **changes) if f.id == field_id else f for f in column.fields]
        return replace(column, fields=fields)

    return transform(schema, column_fn=column_fn)


def update_static_block(schema: FormSchema, block_id: str, html: str) -> FormSchema:
    """Replace the markup of one static block."""

    def column_fn(column: Column) -> Column:
        if not any(b.id == block_id for b in column.static_blocks):
            return column
        blocks = [replace(b, html=html) if b.id == block_id else b for b in column.static_blocks]
        return replace(column, static_blocks=blocks)

    return transform(schema, column_fn=column_fn)


# =============================================================================
# Additions
# =============================================================================


def add_section(schema: FormSchema, title: str | None = None) -> FormSchema:
    """Append an empty stack section."""
    return replace(schema, sections=[*schema.sections, create_empty_section(title)])


def add_table_section(
    schema: FormSchema, title: str | None = None, columns: int | None = None
) -> FormSchema:
    """Append a one-row table section with `columns` cells (clamped to 1-4)."""
    return replace(schema, sections=[*schema.sections, create_table_section(title, columns)])


def add_row(schema: FormSchema, section_id: str) -> FormSchema:
    """Append an empty row to a section."""
    return _map_sections(
        schema, section_id, lambda s: replace(s, rows=[*s.rows, create_empty_row()])
    )


def add_field(schema: FormSchema, column_id: str, field_type: str = "text") -> FormSchema:
    """Append a default field of `field_type` to a column."""
    field = create_default_field(field_type)
    return transform(
        schema,
        column_fn=_for_column(column_id, lambda c: replace(c, fields=[*c.fields, field])),
    )


def add_nested_table(schema: FormSchema, column_id: str) -> FormSchema:
    """Append a 1x1 nested table to a column."""
    table = create_nested_table()
    return transform(
        schema,
        column_fn=_for_column(
            column_id, lambda c: replace(c, nested_tables=[*c.nested_tables, table])
        ),
    )


def add_static_block(
    schema: FormSchema, column_id: str, kind: StaticBlockKind | str = StaticBlockKind.HTML
) -> FormSchema:
    """Append a placeholder static block to a column."""
    block = create_static_block(kind=kind)
    return transform(
        schema,
        column_fn=_for_column(
            column_id, lambda c: replace(c, static_blocks=[*c.static_blocks, block])
        ),
    )


# =============================================================================
# Removals
# =============================================================================


def remove_section(schema: FormSchema, section_id: str) -> FormSchema:
    """Remove a section."""
    return replace(schema, sections=[s for s in schema.sections if s.id != section_id])


def remove_row(schema: FormSchema, row_id: str) -> FormSchema:
    """Remove a row from a section or from a nested table."""
    return transform(schema, rows_fn=lambda rows: [r for r in rows if r.id != row_id])


def remove_field(schema: FormSchema, field_id: str) -> FormSchema:
    """Remove a field."""

    def column_fn(column: Column) -> Column:
        if not any(f.id == field_id for f in column.fields):
            return column
        return replace(column, fields=[f for f in column.fields if f.id != field_id])

    return transform(schema, column_fn=column_fn)


def remove_static_block(schema: FormSchema, block_id: str) -> FormSchema:
    """Remove a static block."""

    def column_fn(column: Column) -> Column:
        if not any(b.id == block_id for b in column.static_blocks):
            return column
        blocks = [b for b in column.static_blocks if b.id != block_id]
        return replace(column, static_blocks=blocks)

    return transform(schema, column_fn=column_fn)


# =============================================================================
# Reordering
# =============================================================================


def reorder_rows(schema: FormSchema, section_id: str, from_index: int, to_index: int) -> FormSchema:
    """Move a section row from one position to another.

    Out of range indices leave the form unchanged.
    """
    return _map_sections(
        schema, section_id, lambda s: replace(s, rows=_move(s.rows, from_index, to_index))
    )


def reorder_fields(schema: FormSchema, column_id: str, from_index: int, to_index: int) -> FormSchema:
    """Move a field within its column."""
    return transform(
        schema,
        column_fn=_for_column(
            column_id, lambda c: replace(c, fields=_move(c.fields, from_index, to_index))
        ),
    )


# =============================================================================
# Form class
# =============================================================================


def change_form_class(
    schema: FormSchema, form_class: str | None, lookup: PropertyLookup
) -> FormSchema:
    """Switch the form's EDMS class and drop bindings the class lacks.

    Fields bound to a property that the new class does not define lose both
    the binding and their default value; every other field is untouched.
    """
    valid = lookup.property_names(form_class) if form_class else set()

    def column_fn(column: Column) -> Column:
        if not any(f.binding_property and f.binding_property not in valid for f in column.fields):
            return column
        fields = [
            replace(f, binding_property=None, default_value=None)
            if f.binding_property and f.binding_property not in valid
            else f
            for f in column.fields
        ]
        return replace(column, fields=fields)

    return replace(transform(schema, column_fn=column_fn), form_class=form_class)


# =============================================================================
# Lookup
# =============================================================================


def _iter_nodes(schema: FormSchema) -> Iterator[Node]:
    for section in schema.sections:
        yield section
        for row in section.rows:
            yield row
    for column in iter_columns(schema):
        yield column
        yield from column.fields
        yield from column.static_blocks
        for table in column.nested_tables:
            yield table
            yield from table.rows


def find_node(schema: FormSchema, node_id: str) -> Node | None:
    """Return the section, row, column, field, static block or table with
    `node_id`, or None."""
    return next((node for node in _iter_nodes(schema) if node.id == node_id), None)


__all__ = [
    "PropertyLookup",
    "replace",
    "transform",
    "update_form",
    "update_section",
    "update_row",
    "update_column",
    "update_field",
    "update_static_block",
    "add_section",
    "add_table_section",
    "add_row",
    "add_field",
    "add_nested_table",
    "add_static_block",
    "remove_section",
    "remove_row",
    "remove_field",
    "remove_static_block",
    "reorder_rows",
    "reorder_fields",
    "change_form_class",
    "find_node",
]
