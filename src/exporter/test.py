"""Unit tests for the HTML exporter."""

import pytest
from bs4 import BeautifulSoup

from src.builder import create_empty_form, create_table_section
from src.importer import parse_html_to_schema
from src.schema import (
    Column,
    FieldOption,
    FieldType,
    FormField,
    FormSchema,
    Row,
    Section,
    SectionLayout,
    StaticBlock,
    Table,
    iter_fields,
)

from .lib import (
    HtmlExporter,
    escape_html,
    export_filename,
    schema_filename,
    schema_to_html,
)


def _form(*sections: Section, **kwargs) -> FormSchema:
    return FormSchema(name=kwargs.pop("name", "Form"), sections=list(sections), **kwargs)


def _nesting_depth(rows: list[Row]) -> int:
    """Levels of nested tables below a list of rows."""
    depths = [
        1 + _nesting_depth(table.rows)
        for row in rows
        for column in row.columns
        for table in column.nested_tables
    ]
    return max(depths, default=0)


def _table_section(*columns: Column) -> Section:
    return Section(layout=SectionLayout.TABLE, rows=[Row(columns=list(columns))])


class TestEscaping:
    """Tests for entity escaping."""

    @pytest.mark.unit
    def test_escape_html(self):
        """The four special characters are escaped."""
        assert escape_html('a < b & "c" > d') == "a &lt; b &amp; &quot;c&quot; &gt; d"
        assert escape_html("${prop}") == "${prop}"

    @pytest.mark.unit
    def test_hostile_field_content_stays_escaped(self):
        """Labels, defaults, options and names never break the markup."""
        field = FormField(
            name='x" onload="y',
            label='<script>alert("x")</script>',
            default_value='"><b>&',
        )
        select = FormField(
            name="s",
            type=FieldType.SELECT,
            label="S",
            options=[FieldOption(label="<i>", value='"q"')],
        )
        html = schema_to_html(
            _form(Section(rows=[Row(columns=[Column(fields=[field, select])])]), name="<T>")
        )
        assert "<script>" not in html
        assert '"><b>' not in html
        assert "<title>&lt;T&gt;</title>" in html

        soup = BeautifulSoup(html, "html5lib")
        control = soup.find("input", attrs={"type": "text"})
        assert control["name"] == 'x" onload="y'
        assert control["value"] == '"><b>&'
        assert soup.find("label").get_text() == '<script>alert("x")</script>'
        assert soup.find("option")["value"] == '"q"'


class TestFieldRendering:
    """Tests for per-type field markup."""

    @pytest.mark.unit
    def test_bound_text_field(self):
        """Bound fields carry the binding token as their value."""
        field = FormField(name="who", label="Who", binding_property="applicantName")
        assert HtmlExporter().render_field(field) == [
            '<label for="who">Who</label>',
            '<input type="text" id="who" name="who" value="${applicantName}" />',
        ]

    @pytest.mark.unit
    def test_imported_field_renders_bare_control(self):
        """Imported fields in tables keep captured attributes without a new label."""
        field = FormField(
            name="x",
            label="X",
            original_name="x",
            default_value="1",
            html_attributes={"type": "hidden", "name": "x", "value": "1", "class": "c"},
        )
        assert HtmlExporter().render_field(field, labels=False) == [
            '<input type="hidden" name="x" class="c" id="x" value="1" />'
        ]

    @pytest.mark.unit
    def test_original_id_and_name_win(self):
        """Original identifiers are reused even after a rename."""
        field = FormField(name="renamed", original_id="orig-id", original_name="orig_name")
        line = HtmlExporter().render_field(field, labels=False)[0]
        assert 'id="orig-id" name="orig_name"' in line

    @pytest.mark.unit
    def test_checkbox_defaults_to_on(self):
        """Checkboxes are wrapped by their label and default to value on."""
        field = FormField(name="ok", type=FieldType.CHECKBOX, label="OK")
        assert HtmlExporter().render_field(field) == [
            '<label><input type="checkbox" id="ok" name="ok" value="on" /> OK</label>'
        ]

    @pytest.mark.unit
    def test_radio_group(self):
        """Radios with options render one labeled control per option."""
        field = FormField(
            name="r",
            type=FieldType.RADIO,
            label="Pick",
            default_value="b",
            options=[FieldOption(label="A", value="a"), FieldOption(label="B", value="b")],
        )
        assert HtmlExporter().render_field(field) == [
            "<div>",
            "  Pick",
            '  <label><input type="radio" id="r" name="r" value="a" /> A</label>',
            '  <label><input type="radio" id="r" name="r" value="b" checked /> B</label>',
            "</div>",
        ]

    @pytest.mark.unit
    def test_radio_without_options(self):
        """An imported radio stays a single control with its own value."""
        field = FormField(
            name="r",
            type=FieldType.RADIO,
            original_name="r",
            default_value="yes",
            html_attributes={"type": "radio", "name": "r", "value": "yes"},
        )
        assert HtmlExporter().render_field(field, labels=False) == [
            '<input type="radio" name="r" id="r" value="yes" />'
        ]

    @pytest.mark.unit
    def test_select_marks_default(self):
        """The default option is selected."""
        field = FormField(
            name="s",
            type=FieldType.SELECT,
            label="S",
            default_value="b",
            options=[FieldOption(label="A", value="a"), FieldOption(label="B", value="b")],
        )
        assert HtmlExporter().render_field(field) == [
            '<label for="s">S</label>',
            '<select id="s" name="s">',
            '  <option value="a">A</option>',
            '  <option value="b" selected>B</option>',
            "</select>",
        ]

    @pytest.mark.unit
    def test_textarea_and_placeholder(self):
        """Textareas carry their value as content; placeholders are emitted."""
        field = FormField(
            name="t", type=FieldType.TEXTAREA, label="T", placeholder="Type", default_value="x"
        )
        assert HtmlExporter().render_field(field)[1] == (
            '<textarea id="t" name="t" placeholder="Type">x</textarea>'
        )

    @pytest.mark.unit
    def test_modelled_type_change_wins(self):
        """A field changed to text no longer emits its captured number type."""
        field = FormField(name="n", html_attributes={"type": "number"})
        assert '<input type="text"' in HtmlExporter().render_field(field)[1]
        field = FormField(name="n", type=FieldType.DATE, html_attributes={"type": "text"})
        assert '<input type="date"' in HtmlExporter().render_field(field)[1]

    @pytest.mark.unit
    def test_boolean_default_is_not_a_value(self):
        """Boolean defaults produce an empty value."""
        field = FormField(name="b", default_value=True)
        assert 'value=""' in HtmlExporter().render_field(field)[1]


class TestSections:
    """Tests for table and stack sections."""

    @pytest.mark.unit
    def test_cell_content_order(self):
        """Static HTML, static blocks, fields, then nested tables."""
        column = Column(
            static_html="<b>old</b>",
            static_blocks=[StaticBlock(html="<i>block</i>")],
            fields=[FormField(name="f", original_name="f")],
            nested_tables=[Table(table_attributes={"id": "inner"}, rows=[Row(columns=[Column()])])],
            col_span=2,
            row_span=3,
            html_attributes={"class": "cell"},
        )
        lines = HtmlExporter().render_section(_table_section(column))
        text = "\n".join(lines)
        order = [
            text.index("<b>old</b>"),
            text.index("<i>block</i>"),
            text.index('name="f"'),
            text.index('<table id="inner">'),
        ]
        assert order == sorted(order)
        assert '      <td class="cell" colspan="2" rowspan="3">' in lines
        assert lines[:3] == ["<table>", "  <tbody>", "    <tr>"]

    @pytest.mark.unit
    def test_stack_section(self):
        """Stack rows become flex containers sized by span."""
        section = Section(
            layout=SectionLayout.STACK,
            rows=[
                Row(
                    columns=[
                        Column(span=2, fields=[FormField(name="a", label="A")]),
                        Column(span=2),
                    ]
                ),
                Row(columns=[Column()]),
            ],
        )
        lines = HtmlExporter().render_section(section)
        assert lines[0] == "<section>"
        assert lines[1] == '  <div style="display:flex; gap:8px;">'
        assert lines.count('    <div style="flex:0.5; padding:4px;">') == 2
        assert '    <div style="flex:1; padding:4px;">' in lines
        assert '      <label for="a">A</label>' in lines

    @pytest.mark.unit
    def test_stack_column_renders_blocks_and_tables(self):
        """Stack columns carry static blocks and nested tables, not just fields."""
        inner = Table(rows=[Row(columns=[Column(fields=[FormField(name="inner")])])])
        column = Column(
            fields=[FormField(name="a", label="A")],
            static_blocks=[StaticBlock(html="<p>Note</p>")],
            nested_tables=[inner],
        )
        section = Section(layout=SectionLayout.STACK, rows=[Row(columns=[column])])
        html = "\n".join(HtmlExporter().render_section(section))
        order = [html.index(marker) for marker in ("<p>Note</p>", 'for="a"', "<table", 'name="inner"')]
        assert order == sorted(order)

    @pytest.mark.unit
    def test_authored_table_fields_get_labels(self):
        """Fields created in the editor are labeled inside tables too."""
        section = create_table_section("Grid", 2)
        html = schema_to_html(_form(section))
        assert html.count('<label for="') == 2


class TestDocumentShell:
    """Tests for document wrapping and passthrough."""

    @pytest.mark.unit
    def test_blank_form_shell(self):
        """A blank authored form gets a synthesized document."""
        assert schema_to_html(create_empty_form("Blank")) == (
            "<!doctype html>\n"
            "<html>\n"
            "  <head>\n"
            '    <meta charset="UTF-8" />\n'
            "    <title>Blank</title>\n"
            "  </head>\n"
            "  <body>\n"
            "\n"
            "  </body>\n"
            "</html>"
        )

    @pytest.mark.unit
    def test_passthrough_without_sections(self):
        """Imported documents without form content are returned unchanged."""
        form = _form(original_html="<p>raw</p>")
        assert schema_to_html(form) == "<p>raw</p>"

    @pytest.mark.unit
    def test_original_head_and_remaining_body(self):
        """The imported head and the non-form body are reused."""
        form = _form(
            _table_section(Column(fields=[FormField(name="a", original_name="a")])),
            original_html="<html>...</html>",
            original_head_html="<title>Old</title>\n<style>td{}</style>",
            original_body_html="<p>chrome</p><table></table>",
            remaining_body_html="<p>chrome</p>",
        )
        html = schema_to_html(form)
        assert "    <title>Old</title>\n    <style>td{}</style>" in html
        assert html.count("<table") == 1
        assert html.index("<p>chrome</p>") < html.index("<table")

    @pytest.mark.unit
    def test_original_body_used_without_remaining(self):
        """Older files without a remaining body fall back to the full body."""
        form = _form(
            _table_section(Column()),
            original_body_html="<p>chrome</p>",
        )
        html = schema_to_html(form)
        assert "<p>chrome</p>" in html
        assert "<title>Form</title>" in html


class TestRoundTrip:
    """Import, export and re-import."""

    @pytest.mark.unit
    def test_legacy_form_round_trip(self, legacy_form_html):
        """Bindings, spans, options and chrome survive a round trip."""
        first = parse_html_to_schema(legacy_form_html)
        html = schema_to_html(first)

        assert html.count("<table") == 1
        assert html.count('<p class="intro">') == 1
        assert 'value="${applicantName}"' in html
        assert ">${remarks}</textarea>" in html
        assert 'colspan="2"' in html
        assert 'rowspan="2"' in html

        second = parse_html_to_schema(html)
        before = [(f.name, f.type, f.binding_property, f.default_value) for f in iter_fields(first)]
        after = [(f.name, f.type, f.binding_property, f.default_value) for f in iter_fields(second)]
        assert after == before
        assert second.name == first.name
        assert [f.label for f in iter_fields(second)] == ["Applicant", "amount", "Kind", "notes"]

    @pytest.mark.unit
    def test_nested_table_round_trip(self):
        """A 2x2 table inside a 1x1 table keeps its shape and depth."""
        source = (
            '<table id="outer"><tr><td>'
            '<table id="inner">'
            '<tr><td>A <input name="a"></td><td>B <input name="b"></td></tr>'
            '<tr><td><input name="c"></td><td><input name="d"></td></tr>'
            "</table>"
            "</td></tr></table>"
        )

        def shape(form: FormSchema) -> tuple:
            rows = form.sections[0].rows
            columns = [c for r in rows for c in r.columns]
            nested = [t for c in columns for t in c.nested_tables]
            return (
                len(rows),
                [len(r.columns) for r in rows],
                len(nested),
                [[len(r.columns) for r in t.rows] for t in nested],
                _nesting_depth(rows),
                [f.name for f in iter_fields(form)],
            )

        first = parse_html_to_schema(source)
        html = schema_to_html(first)
        second = parse_html_to_schema(html)

        assert shape(first) == (1, [1], 1, [[2, 2]], 1, ["a", "b", "c", "d"])
        assert shape(second) == shape(first)
        assert html.count("<table") == 2

    @pytest.mark.unit
    def test_interleaved_round_trip(self, interleaved_form_html):
        """Interleaved text and tables keep their order through export."""
        html = schema_to_html(parse_html_to_schema(interleaved_form_html))
        positions = [html.index(marker) for marker in ("Intro", 'id="t1"', "Between", 'id="t2"', "Outro")]
        assert positions == sorted(positions)


class TestFilenames:
    """Tests for export and save file names."""

    @pytest.mark.unit
    def test_export_filename(self):
        """Class and action code name the export, with defaults."""
        assert export_filename(_form()) == "UnknownClass_CRE.xml"
        assert export_filename(_form(form_class="Correspondence", action_code="AMD")) == (
            "Correspondence_AMD.xml"
        )
        assert export_filename(_form(), "html") == "UnknownClass_CRE.html"

    @pytest.mark.unit
    def test_schema_filename(self):
        """Spaces become underscores and the action code is appended."""
        assert schema_filename(_form(name="Change  Request", action_code="AMD")) == (
            "Change_Request_AMD.json"
        )
        assert schema_filename(_form(name="Plain")) == "Plain.json"
