"""Authoritative Schema Module for form definitions.

This module serves as the single source of truth for the form data model
shared by the importer, the exporter, the editing operations and the
persistence layer. It provides:
- The recursive form tree (sections, rows, columns, fields, nested tables)
- Lossless JSON serialization compatible with saved `.json` form files
- Depth-first walkers over the tree in document order
- JSON Schema export

All nodes carry an opaque string id assigned at construction. Models are
frozen: every change produces a new value (see src/editing).
"""

import json
from collections.abc import Iterator
from enum import Enum
from typing import Annotated, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


def create_id() -> str:
    """Generate a fresh, never reused node identifier."""
    return str(uuid4())


# === ENUMS ===


class FieldType(str, Enum):
    """Bindable input control types.

    Maps to HTML controls:
    - TEXT, NUMBER, DATE: <input type="...">
    - TEXTAREA: <textarea>
    - SELECT: <select> with <option> children
    - CHECKBOX: single <input type="checkbox">
    - RADIO: group of <input type="radio">, one per option
    """

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"


class ValidationType(str, Enum):
    """Supported validation rule kinds."""

    REQUIRED = "required"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"


class SectionLayout(str, Enum):
    """Section rendering mode.

    - TABLE: rows map directly to <tr> elements
    - STACK: rows are flex-arranged groups of columns
    """

    TABLE = "table"
    STACK = "stack"


class StaticBlockKind(str, Enum):
    """Kind tag of a static content block."""

    HTML = "html"
    RICHTEXT = "richtext"


# Types that carry a list of options
OPTION_FIELD_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO})

# Columns are sized on a four-slot grid
MAX_COLUMN_SPAN = 4


# === MODELS ===


class _SchemaModel(BaseModel):
    """Base for all form tree models.

    Field names are snake_case in Python and camelCase on the wire so saved
    files stay interchangeable with the browser builder.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ValidationRule(_SchemaModel):
    """A single validation rule attached to a field.

    Attributes:
        type: Rule kind (required, min, max, pattern).
        value: Rule operand (bound for min/max, regex for pattern).
        message: Optional user-facing message.
    """

    type: ValidationType
    value: int | float | str | None = None
    message: str | None = None


class FieldOption(_SchemaModel):
    """A (label, value) pair for select and radio fields."""

    label: str
    value: str


class StaticBlock(_SchemaModel):
    """A fragment of pass-through HTML not bound to an input.

    Attributes:
        id: Unique identifier.
        html: Markup emitted verbatim on export.
        label: Optional display label for the editor.
        kind: html or richtext (serialized as "type").
    """

    id: str = Field(default_factory=create_id)
    html: str = ""
    label: str | None = None
    kind: StaticBlockKind = Field(default=StaticBlockKind.HTML, alias="type")


class FormField(_SchemaModel):
    """One bindable input.

    Attributes:
        id: Unique identifier.
        type: Control type.
        name: Programmatic name.
        label: Display label.
        binding_property: External (EDMS) property the value is wired to.
        original_id: id attribute of the source element, reused on export.
        original_name: name attribute of the source element, reused on export.
        html_attributes: Every attribute captured from the source element.
        placeholder: Placeholder text.
        help_text: Help text shown by the editor.
        default_value: Literal default value (unset when bound).
        options: Options for select/radio fields.
        validations: Ordered validation rules.
    """

    id: str = Field(default_factory=create_id)
    type: FieldType = FieldType.TEXT
    name: str
    label: str = ""
    binding_property: str | None = None
    original_id: str | None = None
    original_name: str | None = None
    html_attributes: dict[str, str] = Field(default_factory=dict)
    placeholder: str | None = None
    help_text: str | None = None
    default_value: str | int | float | bool | None = None
    options: list[FieldOption] | None = None
    validations: list[ValidationRule] = Field(default_factory=list)

    @property
    def binding_token(self) -> str | None:
        """The `${property}` token for a bound field, else None."""
        if self.binding_property:
            return "${" + self.binding_property + "}"
        return None


class Column(_SchemaModel):
    """Table cell equivalent.

    Attributes:
        id: Unique identifier.
        span: Relative width on a four-slot grid (1-4).
        fields: Fields owned by this cell.
        static_blocks: Free-form HTML blocks.
        col_span: colspan of the source cell.
        row_span: rowspan of the source cell.
        html_attributes: Attributes captured from the source cell.
        nested_tables: Tables owned by this cell, in document order.
        static_html: Cell markup with fields and nested tables removed.
    """

    id: str = Field(default_factory=create_id)
    span: Annotated[int, Field(ge=1, le=MAX_COLUMN_SPAN)] = MAX_COLUMN_SPAN
    fields: list[FormField] = Field(default_factory=list)
    static_blocks: list[StaticBlock] = Field(default_factory=list)
    col_span: Annotated[int, Field(ge=1)] = 1
    row_span: Annotated[int, Field(ge=1)] = 1
    html_attributes: dict[str, str] = Field(default_factory=dict)
    nested_tables: list["Table"] = Field(default_factory=list)
    static_html: str | None = None

    @property
    def flex_ratio(self) -> float:
        """Share of the row width used by stack layouts (span / 4)."""
        return self.span / MAX_COLUMN_SPAN


class Row(_SchemaModel):
    """Ordered list of columns."""

    id: str = Field(default_factory=create_id)
    columns: list[Column] = Field(default_factory=list)
    html_attributes: dict[str, str] = Field(default_factory=dict)


class Table(_SchemaModel):
    """A nested table owned exclusively by its containing column."""

    id: str = Field(default_factory=create_id)
    rows: list[Row] = Field(default_factory=list)
    table_attributes: dict[str, str] = Field(default_factory=dict)


class Section(_SchemaModel):
    """A titled group of rows.

    Attributes:
        id: Unique identifier.
        title: Display title.
        layout: table or stack.
        rows: Ordered rows.
        table_attributes: Source table attributes (border, cellpadding, ...).
    """

    id: str = Field(default_factory=create_id)
    title: str = ""
    layout: SectionLayout = SectionLayout.STACK
    rows: list[Row] = Field(default_factory=list)
    table_attributes: dict[str, str] = Field(default_factory=dict)


class FormSchema(_SchemaModel):
    """Top-level form.

    Attributes:
        id: Unique identifier.
        name: Form display name.
        description: Free text description.
        form_class: EDMS class the bindings refer to.
        action_code: Operation intent code (CRE, AMD, ...).
        version: Version counter.
        sections: Sections in render/export order.
        original_html: Raw imported document.
        original_head_html: Inner markup of the imported <head>.
        original_body_html: Inner markup of the imported <body>.
        remaining_body_html: Imported body with the imported form content removed.
    """

    id: str = Field(default_factory=create_id)
    name: str
    description: str | None = None
    form_class: str | None = None
    action_code: str | None = None
    version: Annotated[int, Field(ge=1)] = 1
    sections: list[Section] = Field(default_factory=list)
    original_html: str | None = None
    original_head_html: str | None = None
    original_body_html: str | None = None
    remaining_body_html: str | None = None


for _model in (Column, Row, Table, Section, FormSchema):
    _model.model_rebuild()


# === WALKERS ===


def iter_tables(column: Column) -> Iterator[Table]:
    """Yield every table nested below a column, depth first."""
    for table in column.nested_tables:
        yield table
        for row in table.rows:
            for child in row.columns:
                yield from iter_tables(child)


def _iter_row_columns(rows: list[Row]) -> Iterator[Column]:
    for row in rows:
        for column in row.columns:
            yield column
            for table in column.nested_tables:
                yield from _iter_row_columns(table.rows)


def iter_columns(schema: FormSchema) -> Iterator[Column]:
    """Yield every column of a form in document order, nested ones included."""
    for section in schema.sections:
        yield from _iter_row_columns(section.rows)


def iter_fields(schema: FormSchema) -> Iterator[FormField]:
    """Yield every field of a form in document order."""
    for column in iter_columns(schema):
        yield from column.fields


# === SERIALIZATION ===


class SchemaLoadError(ValueError):
    """Raised when a saved form cannot be decoded into a FormSchema."""


def schema_to_dict(schema: FormSchema) -> dict[str, Any]:
    """Dump a form to a JSON-compatible dict with camelCase keys."""
    return schema.model_dump(mode="json", by_alias=True, exclude_none=True)


def schema_from_dict(data: dict[str, Any]) -> FormSchema:
    """Validate a decoded JSON object as a FormSchema.

    Raises:
        SchemaLoadError: If required members are missing or malformed.
    """
    if not isinstance(data, dict):
        raise SchemaLoadError("Invalid form schema: expected a JSON object")
    missing = [key for key in ("id", "name", "sections") if key not in data]
    if missing:
        raise SchemaLoadError(
            f"Invalid form schema: missing required fields ({', '.join(missing)})"
        )
    try:
        return FormSchema.model_validate(data)
    except PydanticValidationError as e:
        raise SchemaLoadError(f"Invalid form schema: {e}") from e


def schema_to_json(schema: FormSchema, indent: int | None = 2) -> str:
    """Serialize a form losslessly to JSON text."""
    return json.dumps(schema_to_dict(schema), indent=indent, ensure_ascii=False)


def schema_from_json(text: str) -> FormSchema:
    """Parse JSON text produced by `schema_to_json` (or the browser builder).

    Raises:
        SchemaLoadError: On invalid JSON or an invalid schema.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaLoadError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e
    return schema_from_dict(data)


def export_json_schema() -> dict[str, Any]:
    """Export the complete FormSchema JSON Schema (wire field names)."""
    return FormSchema.model_json_schema(by_alias=True)


__all__ = [
    "create_id",
    # Enums
    "FieldType",
    "ValidationType",
    "SectionLayout",
    "StaticBlockKind",
    "OPTION_FIELD_TYPES",
    "MAX_COLUMN_SPAN",
    # Models
    "ValidationRule",
    "FieldOption",
    "StaticBlock",
    "FormField",
    "Column",
    "Row",
    "Table",
    "Section",
    "FormSchema",
    # Walkers
    "iter_tables",
    "iter_columns",
    "iter_fields",
    # Serialization
    "SchemaLoadError",
    "schema_to_dict",
    "schema_from_dict",
    "schema_to_json",
    "schema_from_json",
    "export_json_schema",
]
