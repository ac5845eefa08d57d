"""Form validation and static analysis.

This module provides validation functions for FormSchema trees,
detecting structural and binding issues before export.
"""

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from src.editing import PropertyLookup
from src.schema import (
    MAX_COLUMN_SPAN,
    OPTION_FIELD_TYPES,
    Column,
    FormField,
    FormSchema,
    Row,
    Table,
    ValidationType,
    iter_columns,
    iter_fields,
)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """Represents a validation issue in a form tree.

    Attributes:
        node_id: ID of the node with the issue.
        message: Human-readable description.
        issue_type: Category of the issue.
        severity: error blocks export; warning does not.
    """

    node_id: str
    message: str
    issue_type: str
    severity: Severity = Severity.ERROR


def validate_form(schema: FormSchema, lookup: PropertyLookup | None = None) -> list[ValidationIssue]:
    """Validate a FormSchema tree.

    Performs the following checks:
        - Unique IDs across sections, rows, columns, fields, blocks and tables
        - Column span within 1-4, col/row span at least 1
        - Select and radio fields have options
        - Field names are present and unique (duplicates warn)
        - Bindings exist on the form class (when a lookup is given)
        - min/max rules carry numeric values

    Models built through pydantic already enforce the span bounds; trees
    assembled with `model_construct` or edited dicts are checked anyway.

    Args:
        schema: The form to validate.
        lookup: Properties library used for binding checks.

    Returns:
        list[ValidationIssue]: Issues found (empty if valid).

    Example:
        >>> for issue in validate_form(form, PropertiesLibrary()):
        ...     print(f"{issue.severity.value} {issue.node_id}: {issue.message}")
    """
    issues: list[ValidationIssue] = []
    issues.extend(_duplicate_ids(schema))
    issues.extend(_span_issues(schema))
    for field in iter_fields(schema):
        issues.extend(_field_issues(field))
    issues.extend(_duplicate_names(schema))
    if lookup is not None and schema.form_class:
        issues.extend(_binding_issues(schema, lookup))
    return issues


def is_valid(schema: FormSchema, lookup: PropertyLookup | None = None) -> bool:
    """Check if a form has no error-level issues.

    Warnings such as duplicate field names do not make a form invalid.
    """
    return not any(i.severity == Severity.ERROR for i in validate_form(schema, lookup))


def _iter_rows(rows: list[Row]) -> Iterator[Row | Column | Table]:
    for row in rows:
        yield row
        for column in row.columns:
            yield column
            for table in column.nested_tables:
                yield table
                yield from _iter_rows(table.rows)


def _iter_ids(schema: FormSchema) -> Iterator[str]:
    yield schema.id
    for section in schema.sections:
        yield section.id
        for node in _iter_rows(section.rows):
            yield node.id
    for column in iter_columns(schema):
        yield from (f.id for f in column.fields)
        yield from (b.id for b in column.static_blocks)


def _duplicate_ids(schema: FormSchema) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            node_id=node_id,
            message=f"Duplicate ID '{node_id}' appears {count} times",
            issue_type="duplicate_id",
        )
        for node_id, count in Counter(_iter_ids(schema)).items()
        if count > 1
    ]


def _span_issues(schema: FormSchema) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for column in iter_columns(schema):
        if not 1 <= column.span <= MAX_COLUMN_SPAN:
            issues.append(
                ValidationIssue(
                    node_id=column.id,
                    message=f"span {column.span} outside valid range 1-{MAX_COLUMN_SPAN}",
                    issue_type="invalid_span",
                )
            )
        for attribute in ("col_span", "row_span"):
            value = getattr(column, attribute)
            if value < 1:
                issues.append(
                    ValidationIssue(
                        node_id=column.id,
                        message=f"{attribute} {value} must be at least 1",
                        issue_type="invalid_cell_span",
                    )
                )
    return issues


def _field_issues(field: FormField) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not field.name.strip():
        issues.append(
            ValidationIssue(
                node_id=field.id, message="Field name is empty", issue_type="empty_name"
            )
        )
    if field.type in OPTION_FIELD_TYPES and not field.options:
        issues.append(
            ValidationIssue(
                node_id=field.id,
                message=f"{field.type.value} field '{field.name}' has no options",
                issue_type="missing_options",
            )
        )
    for rule in field.validations:
        if rule.type in (ValidationType.MIN, ValidationType.MAX) and not _is_number(rule.value):
            issues.append(
                ValidationIssue(
                    node_id=field.id,
                    message=f"{rule.type.value} rule on '{field.name}' needs a numeric value",
                    issue_type="invalid_rule",
                )
            )
    return issues


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def _duplicate_names(schema: FormSchema) -> list[ValidationIssue]:
    seen: dict[str, str] = {}
    issues: list[ValidationIssue] = []
    for field in iter_fields(schema):
        if not field.name.strip():
            continue
        if field.name in seen:
            issues.append(
                ValidationIssue(
                    node_id=field.id,
                    message=f"Field name '{field.name}' is also used by {seen[field.name]}",
                    issue_type="duplicate_name",
                    severity=Severity.WARNING,
                )
            )
        else:
            seen[field.name] = field.id
    return issues


def _binding_issues(schema: FormSchema, lookup: PropertyLookup) -> list[ValidationIssue]:
    valid = lookup.property_names(schema.form_class)
    return [
        ValidationIssue(
            node_id=field.id,
            message=(
                f"Binding '{field.binding_property}' is not a property "
                f"of class '{schema.form_class}'"
            ),
            issue_type="unknown_binding",
        )
        for field in iter_fields(schema)
        if field.binding_property and field.binding_property not in valid
    ]


__all__ = ["Severity", "ValidationIssue", "validate_form", "is_valid"]
