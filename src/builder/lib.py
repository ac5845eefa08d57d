"""Construction helpers for well-formed form nodes.

Every helper returns a fully populated node with fresh ids, so nodes created
by an editing surface already satisfy the schema invariants. Inputs are
clamped, never rejected.
"""

import random
import string

from src.schema import (
    MAX_COLUMN_SPAN,
    OPTION_FIELD_TYPES,
    Column,
    FieldOption,
    FieldType,
    FormField,
    FormSchema,
    Row,
    Section,
    SectionLayout,
    StaticBlock,
    StaticBlockKind,
    Table,
)

DEFAULT_STATIC_HTML = "<p>Add your text</p>"
DEFAULT_ACTION_CODE = "CRE"

SECTION_TABLE_ATTRIBUTES = {"border": "1", "cellpadding": "6", "cellspacing": "0"}
NESTED_TABLE_ATTRIBUTES = {"border": "1", "cellpadding": "4", "cellspacing": "0"}


def generate_field_name() -> str:
    """Generate a fallback programmatic name like `field_k3x9`."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"field_{suffix}"


def coerce_field_type(value: str | FieldType | None) -> FieldType:
    """Map any value to a FieldType, falling back to text."""
    if isinstance(value, FieldType):
        return value
    try:
        return FieldType((value or "").lower())
    except ValueError:
        return FieldType.TEXT


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def create_default_field(field_type: str | FieldType = FieldType.TEXT) -> FormField:
    """Create a field of the given type with editor-friendly defaults.

    Select and radio fields get exactly two options; every other type gets none.

    Args:
        field_type: Field type or its wire value. Unknown values become text.

    Returns:
        New FormField with an empty validation list.
    """
    ftype = coerce_field_type(field_type)
    label = f"{ftype.value.capitalize()} field"
    options = None
    if ftype in OPTION_FIELD_TYPES:
        options = [
            FieldOption(label="Option 1", value="option1"),
            FieldOption(label="Option 2", value="option2"),
        ]
    return FormField(
        type=ftype,
        name=generate_field_name(),
        label=label,
        placeholder=f"Enter {label.lower()}",
        options=options,
        validations=[],
    )


def create_static_block(
    html: str | None = None,
    kind: str | StaticBlockKind = StaticBlockKind.HTML,
) -> StaticBlock:
    """Create a static content block (defaults to a placeholder paragraph)."""
    block_kind = (
        StaticBlockKind.RICHTEXT
        if kind in (StaticBlockKind.RICHTEXT, StaticBlockKind.RICHTEXT.value)
        else StaticBlockKind.HTML
    )
    return StaticBlock(
        html=html or DEFAULT_STATIC_HTML,
        label="Rich text" if block_kind == StaticBlockKind.RICHTEXT else "Static HTML",
        kind=block_kind,
    )


def create_empty_column(span: int = MAX_COLUMN_SPAN) -> Column:
    """Create an empty column with span clamped to 1-4."""
    return Column(span=clamp(span, 1, MAX_COLUMN_SPAN))


def create_empty_row() -> Row:
    """Create a row holding one full-width empty column."""
    return Row(columns=[create_empty_column()])


def create_empty_section(title: str | None = None) -> Section:
    """Create a stack section with one empty row."""
    return Section(
        title=title or "Untitled section",
        layout=SectionLayout.STACK,
        rows=[create_empty_row()],
    )


def _field_cell() -> Column:
    return Column(span=MAX_COLUMN_SPAN, fields=[create_default_field(FieldType.TEXT)])


def create_table_section(title: str | None = None, columns: int | None = None) -> Section:
    """Create a one-row table section.

    Args:
        title: Section title (defaults to "Table section").
        columns: Cell count, clamped to 1-4 (defaults to 2).

    Returns:
        Table-layout section whose cells each hold one default text field.
    """
    count = clamp(columns or 2, 1, MAX_COLUMN_SPAN)
    return Section(
        title=title or "Table section",
        layout=SectionLayout.TABLE,
        table_attributes=dict(SECTION_TABLE_ATTRIBUTES),
        rows=[Row(columns=[_field_cell() for _ in range(count)])],
    )


def create_nested_table() -> Table:
    """Create a 1x1 nested table skeleton holding one default text field."""
    return Table(
        table_attributes=dict(NESTED_TABLE_ATTRIBUTES),
        rows=[Row(columns=[_field_cell()])],
    )


def create_empty_form(name: str | None = None) -> FormSchema:
    """Create a blank form (version 1, no sections)."""
    return FormSchema(
        name=name or "Untitled form",
        action_code=DEFAULT_ACTION_CODE,
        version=1,
        sections=[],
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
