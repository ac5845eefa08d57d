"""Tests for output module."""

import pytest

from src.importer import parse_html_to_schema
from src.output import FormOutput, OutputGenerator, format_form_tree
from src.schema import Column, FormField, FormSchema, Row, Section, Table


class TestFormatFormTree:
    """Tests for format_form_tree function."""

    @pytest.mark.unit
    def test_empty_form(self):
        """A form without sections is a single line."""
        form = FormSchema(name="Blank", form_class="Invoice", action_code="AMD")
        assert format_form_tree(form) == "Blank [form, Invoice, AMD]"

    @pytest.mark.unit
    def test_exact_tree(self):
        """Sections, rows, columns, fields and nested tables are drawn."""
        inner = Table(rows=[Row(columns=[Column(fields=[FormField(name="n", label="N")])])])
        form = FormSchema(
            name="F",
            sections=[
                Section(
                    title="S",
                    rows=[
                        Row(
                            columns=[
                                Column(
                                    span=2,
                                    col_span=2,
                                    fields=[FormField(name="a", binding_property="p")],
                                    nested_tables=[inner],
                                ),
                            ]
                        )
                    ],
                )
            ],
        )
        assert format_form_tree(form).split("\n") == [
            "F [form]",
            "└── S [stack section]",
            "    └── Row 1 [1 column]",
            "        └── Column 1 [span 2, colspan 2]",
            "            ├── a [text, ${p}]",
            "            └── Table [1 row]",
            "                └── Row 1 [1 column]",
            "                    └── Column 1 [span 4]",
            "                        └── N [text]",
        ]

    @pytest.mark.unit
    def test_imported_form(self, legacy_form_html):
        """Imported forms show static HTML, spans and options."""
        tree = format_form_tree(parse_html_to_schema(legacy_form_html))
        assert "[table section]" in tree
        assert "Static HTML" in tree
        assert "Applicant [text, ${applicantName}]" in tree
        assert "Kind [select, 2 options]" in tree
        assert "rowspan 2" in tree
        assert "├──" in tree and "└──" in tree


class TestOutputGenerator:
    """Tests for OutputGenerator class."""

    @pytest.mark.unit
    def test_generate(self, sample_form):
        """Output bundles tree, HTML and issues."""
        output = OutputGenerator().generate(sample_form)
        assert isinstance(output, FormOutput)
        assert output.text_tree.startswith("Sample [form, Correspondence")
        assert output.html.startswith("<!doctype html>")
        assert output.issues == []
        assert output.schema is sample_form
