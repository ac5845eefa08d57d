"""Unit tests for validation module."""

import pytest

from src.schema import (
    Column,
    FieldType,
    FormField,
    FormSchema,
    Row,
    Section,
    Table,
    ValidationRule,
    ValidationType,
)
from src.validation import Severity, ValidationIssue, is_valid, validate_form


class FakeLookup:
    def __init__(self, classes: dict[str, set[str]]):
        self.classes = classes

    def property_names(self, class_name: str) -> set[str]:
        return self.classes.get(class_name, set())


def _form(*columns: Column, **kwargs) -> FormSchema:
    return FormSchema(
        id="form",
        name="F",
        sections=[Section(id="s", rows=[Row(id="r", columns=list(columns))])],
        **kwargs,
    )


class TestValidateForm:
    """Tests for validate_form function."""

    @pytest.mark.unit
    def test_valid_form(self, sample_form):
        """A well-formed form passes validation."""
        assert validate_form(sample_form) == []

    @pytest.mark.unit
    def test_duplicate_ids(self):
        """Duplicate IDs are detected across node kinds."""
        form = _form(
            Column(id="dupe", fields=[FormField(id="dupe", name="a")]),
            Column(id="c2", nested_tables=[Table(id="t", rows=[Row(id="r")])]),
        )
        issues = validate_form(form)
        assert {(i.node_id, i.issue_type) for i in issues} == {
            ("dupe", "duplicate_id"),
            ("r", "duplicate_id"),
        }
        assert "appears 2 times" in issues[0].message

    @pytest.mark.unit
    def test_spans_out_of_range(self):
        """Spans that bypassed model validation are reported."""
        column = Column.model_construct(id="c", span=7, col_span=0, row_span=1)
        issues = validate_form(_form(column))
        assert [i.issue_type for i in issues] == ["invalid_span", "invalid_cell_span"]
        assert "col_span 0" in issues[1].message

    @pytest.mark.unit
    def test_option_fields_need_options(self):
        """Select and radio fields without options are errors."""
        form = _form(
            Column(
                id="c",
                fields=[
                    FormField(id="f1", name="a", type=FieldType.SELECT),
                    FormField(id="f2", name="b", type=FieldType.RADIO, options=[]),
                ],
            )
        )
        assert [i.node_id for i in validate_form(form)] == ["f1", "f2"]

    @pytest.mark.unit
    def test_names(self):
        """Empty names are errors; duplicate names warn."""
        form = _form(
            Column(
                id="c",
                fields=[
                    FormField(id="f1", name=" "),
                    FormField(id="f2", name="x"),
                    FormField(id="f3", name="x"),
                ],
            )
        )
        issues = validate_form(form)
        assert [(i.node_id, i.issue_type, i.severity) for i in issues] == [
            ("f1", "empty_name", Severity.ERROR),
            ("f3", "duplicate_name", Severity.WARNING),
        ]

    @pytest.mark.unit
    def test_min_max_rules_need_numbers(self):
        """min/max rules with non-numeric values are errors."""
        rules = [
            ValidationRule(type=ValidationType.MIN, value="abc"),
            ValidationRule(type=ValidationType.MAX, value="10"),
            ValidationRule(type=ValidationType.PATTERN, value="^a$"),
        ]
        form = _form(Column(id="c", fields=[FormField(id="f", name="n", validations=rules)]))
        issues = validate_form(form)
        assert len(issues) == 1
        assert issues[0].issue_type == "invalid_rule"

    @pytest.mark.unit
    def test_bindings_checked_with_lookup(self):
        """Bindings must be properties of the form class."""
        form = _form(
            Column(
                id="c",
                fields=[
                    FormField(id="f1", name="a", binding_property="subject"),
                    FormField(id="f2", name="b", binding_property="ghost"),
                ],
            ),
            form_class="Correspondence",
        )
        lookup = FakeLookup({"Correspondence": {"subject"}})
        issues = validate_form(form, lookup)
        assert [(i.node_id, i.issue_type) for i in issues] == [("f2", "unknown_binding")]
        assert validate_form(form) == []


class TestIsValid:
    """Tests for is_valid convenience function."""

    @pytest.mark.unit
    def test_warnings_do_not_invalidate(self):
        """Duplicate names alone keep a form valid."""
        form = _form(Column(id="c", fields=[FormField(name="x"), FormField(name="x")]))
        assert is_valid(form) is True

    @pytest.mark.unit
    def test_errors_invalidate(self):
        """Error-level issues make a form invalid."""
        form = _form(Column(id="c", fields=[FormField(name="s", type=FieldType.SELECT)]))
        assert is_valid(form) is False


class TestValidationIssue:
    """Tests for ValidationIssue dataclass."""

    @pytest.mark.unit
    def test_defaults_to_error(self):
        """Issues are errors unless stated otherwise."""
        issue = ValidationIssue(node_id="n", message="m", issue_type="t")
        assert issue.severity == Severity.ERROR
