"""Schema module - authoritative form data model.

This module provides:
- Frozen pydantic models for the form tree
- camelCase JSON round trip for saved `.json` forms
- Document-order walkers

Example usage:
    >>> from src.schema import FormSchema, schema_to_json, schema_from_json
    >>> form = FormSchema(name="Leave request")
    >>> schema_from_json(schema_to_json(form)) == form
    True
"""

from .lib import (
    MAX_COLUMN_SPAN,
    OPTION_FIELD_TYPES,
    Column,
    FieldOption,
    FieldType,
    FormField,
    FormSchema,
    Row,
    SchemaLoadError,
    Section,
    SectionLayout,
    StaticBlock,
    StaticBlockKind,
    Table,
    ValidationRule,
    ValidationType,
    create_id,
    export_json_schema,
    iter_columns,
    iter_fields,
    iter_tables,
    schema_from_dict,
    schema_from_json,
    schema_to_dict,
    schema_to_json,
)

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
