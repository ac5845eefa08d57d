"""Unit tests for default node constructors."""

import re

import pytest

from src.schema import FieldType, SectionLayout, StaticBlockKind

from .lib import (
    coerce_field_type,
    create_default_field,
    create_empty_form,
    create_empty_row,
    create_empty_section,
    create_nested_table,
    create_static_block,
    create_table_section,
    generate_field_name,
)


class TestCreateDefaultField:
    """Tests for create_default_field."""

    @pytest.mark.unit
    def test_select_has_two_options(self):
        """Select fields start with exactly two options."""
        field = create_default_field("select")
        assert field.type == FieldType.SELECT
        assert [(o.label, o.value) for o in field.options] == [
            ("Option 1", "option1"),
            ("Option 2", "option2"),
        ]
        assert field.validations == []

    @pytest.mark.unit
    def test_radio_has_two_options(self):
        """Radio fields start with exactly two options."""
        assert len(create_default_field(FieldType.RADIO).options) == 2

    @pytest.mark.unit
    def test_checkbox_has_no_options(self):
        """Checkbox fields carry no options."""
        field = create_default_field("checkbox")
        assert field.options is None
        assert field.validations == []

    @pytest.mark.unit
    def test_default_is_text(self):
        """Without arguments a text field is built."""
        field = create_default_field()
        assert field.type == FieldType.TEXT
        assert field.label == "Text field"
        assert field.placeholder == "Enter text field"

    @pytest.mark.unit
    def test_unknown_type_coerces_to_text(self):
        """Unknown type names fall back to text."""
        assert create_default_field("signature").type == FieldType.TEXT

    @pytest.mark.unit
    def test_fresh_ids_and_names(self):
        """Each field gets a unique id and a generated name."""
        a, b = create_default_field(), create_default_field()
        assert a.id != b.id
        assert re.fullmatch(r"field_[a-z0-9]{4}", a.name)


class TestHelpers:
    """Tests for small helpers."""

    @pytest.mark.unit
    def test_coerce_field_type(self):
        """Known values map case-insensitively; others become text."""
        assert coerce_field_type("DATE") == FieldType.DATE
        assert coerce_field_type(None) == FieldType.TEXT
        assert coerce_field_type("password") == FieldType.TEXT

    @pytest.mark.unit
    def test_generate_field_name(self):
        """Generated names use the field_ prefix."""
        assert generate_field_name().startswith("field_")


class TestContainers:
    """Tests for row, section and table constructors."""

    @pytest.mark.unit
    def test_static_block_defaults(self):
        """Static blocks default to a placeholder paragraph."""
        block = create_static_block()
        assert block.html == "<p>Add your text</p>"
        assert block.kind == StaticBlockKind.HTML
        assert block.label == "Static HTML"

    @pytest.mark.unit
    def test_richtext_block(self):
        """Rich text blocks are labelled accordingly."""
        block = create_static_block("<b>x</b>", "richtext")
        assert block.kind == StaticBlockKind.RICHTEXT
        assert block.label == "Rich text"
        assert block.html == "<b>x</b>"

    @pytest.mark.unit
    def test_empty_row(self):
        """An empty row holds one full-width empty column."""
        row = create_empty_row()
        assert len(row.columns) == 1
        column = row.columns[0]
        assert column.span == 4
        assert column.fields == []
        assert column.static_blocks == []
        assert column.nested_tables == []

    @pytest.mark.unit
    def test_empty_section(self):
        """Sections default their title and start with one row."""
        section = create_empty_section()
        assert section.title == "Untitled section"
        assert section.layout == SectionLayout.STACK
        assert len(section.rows) == 1
        assert create_empty_section("Applicant").title == "Applicant"

    @pytest.mark.unit
    @pytest.mark.parametrize("requested,expected", [(0, 2), (1, 1), (3, 3), (9, 4), (-2, 1)])
    def test_table_section_clamps_columns(self, requested, expected):
        """Column counts are clamped to 1-4 (0 means the default of 2)."""
        section = create_table_section(columns=requested)
        assert len(section.rows[0].columns) == expected

    @pytest.mark.unit
    def test_table_section_shape(self):
        """Table sections carry border attributes and one field per cell."""
        section = create_table_section("Grid", 3)
        assert section.layout == SectionLayout.TABLE
        assert section.title == "Grid"
        assert section.table_attributes == {
            "border": "1",
            "cellpadding": "6",
            "cellspacing": "0",
        }
        for column in section.rows[0].columns:
            assert len(column.fields) == 1
            assert column.col_span == 1
            assert column.row_span == 1

    @pytest.mark.unit
    def test_nested_table(self):
        """Nested tables are 1x1 with a text field."""
        table = create_nested_table()
        assert table.table_attributes["cellpadding"] == "4"
        assert len(table.rows) == 1
        assert len(table.rows[0].columns) == 1
        assert table.rows[0].columns[0].fields[0].type == FieldType.TEXT

    @pytest.mark.unit
    def test_empty_form(self):
        """Blank forms start at version 1 with no sections."""
        form = create_empty_form()
        assert form.name == "Untitled form"
        assert form.version == 1
        assert form.sections == []
        assert form.action_code == "CRE"
