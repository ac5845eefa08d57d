"""Unit tests for the HTML importer."""

import pytest

from src.exporter import schema_to_html
from src.importer import (
    map_element_to_field,
    normalize_html,
    parse_document,
    parse_html_to_schema,
    parse_table,
)
from src.schema import FieldType, SectionLayout, StaticBlockKind, iter_fields


def _field(form, name):
    return next(f for f in iter_fields(form) if f.name == name)


class TestLegacyTableImport:
    """Tests against a typical table based legacy form."""

    @pytest.mark.unit
    def test_document_metadata(self, legacy_form_html):
        """Title, description and document parts are captured."""
        form = parse_html_to_schema(legacy_form_html, "change.html")
        assert form.name == "Change Request"
        assert form.description == "Imported from: change.html"
        assert form.original_html == legacy_form_html
        assert "<title>Change Request</title>" in form.original_head_html
        assert "<table" in form.original_body_html

    @pytest.mark.unit
    def test_one_table_section(self, legacy_form_html):
        """A single top-level table becomes one table section."""
        form = parse_html_to_schema(legacy_form_html)
        assert len(form.sections) == 1
        section = form.sections[0]
        assert section.layout == SectionLayout.TABLE
        assert section.title == "Change Request"
        assert section.table_attributes == {
            "border": "1",
            "cellpadding": "6",
            "cellspacing": "0",
        }
        assert len(section.rows) == 4
        assert section.rows[0].html_attributes == {"class": "header-row"}

    @pytest.mark.unit
    def test_fields_in_document_order(self, legacy_form_html):
        """Every control becomes a field, in source order."""
        form = parse_html_to_schema(legacy_form_html)
        assert [f.name for f in iter_fields(form)] == ["applicant", "amount", "kind", "notes"]

    @pytest.mark.unit
    def test_bound_field(self, legacy_form_html):
        """Binding tokens become binding properties, not defaults."""
        field = _field(parse_html_to_schema(legacy_form_html), "applicant")
        assert field.type == FieldType.TEXT
        assert field.label == "Applicant"
        assert field.binding_property == "applicantName"
        assert field.default_value is None
        assert field.original_id == "applicant"
        assert field.original_name == "applicant"
        assert field.html_attributes["class"] == "wide"
        assert list(field.html_attributes) == ["type", "id", "name", "value", "class"]

    @pytest.mark.unit
    def test_literal_default_and_sanitized_label(self, legacy_form_html):
        """Unbound values are kept literally; unlabeled fields use their name."""
        field = _field(parse_html_to_schema(legacy_form_html), "amount")
        assert field.type == FieldType.NUMBER
        assert field.default_value == "12"
        assert field.binding_property is None
        assert field.label == "amount"
        assert field.original_id is None

    @pytest.mark.unit
    def test_select_options(self, legacy_form_html):
        """Options map 1:1; the wrapping label names the field."""
        field = _field(parse_html_to_schema(legacy_form_html), "kind")
        assert field.type == FieldType.SELECT
        assert field.label == "Kind"
        assert [(o.label, o.value) for o in field.options] == [("Alpha", "a"), ("Beta", "b")]
        assert field.default_value == "b"

    @pytest.mark.unit
    def test_textarea_binding(self, legacy_form_html):
        """Textarea text content is scanned for a binding."""
        field = _field(parse_html_to_schema(legacy_form_html), "notes")
        assert field.type == FieldType.TEXTAREA
        assert field.binding_property == "remarks"
        assert field.default_value is None

    @pytest.mark.unit
    def test_spans_and_cell_attributes(self, legacy_form_html):
        """colspan/rowspan are modelled, not duplicated as attributes."""
        rows = parse_html_to_schema(legacy_form_html).sections[0].rows
        wide = rows[2].columns[0]
        assert wide.col_span == 2
        assert wide.row_span == 1
        assert "colspan" not in wide.html_attributes
        assert rows[3].columns[0].row_span == 2
        assert all(c.span == 4 for row in rows for c in row.columns)

    @pytest.mark.unit
    def test_static_html_keeps_labels(self, legacy_form_html):
        """Cell text and labels survive as static blocks; controls do not."""
        rows = parse_html_to_schema(legacy_form_html).sections[0].rows
        label_cell, input_cell = rows[0].columns
        assert [b.html for b in label_cell.static_blocks] == [
            '<label for="applicant">Applicant</label>'
        ]
        assert label_cell.static_blocks[0].kind == StaticBlockKind.HTML
        assert input_cell.static_blocks == []
        select_static = rows[2].columns[0].static_blocks[0].html
        assert select_static.startswith("<label>Kind")
        assert "<select" not in select_static

    @pytest.mark.unit
    def test_remaining_body_drops_tables(self, legacy_form_html):
        """The retained body keeps chrome but not the imported table."""
        form = parse_html_to_schema(legacy_form_html)
        assert '<p class="intro">Fill in every field.</p>' in form.remaining_body_html
        assert "<table" not in form.remaining_body_html


class TestNestedTables:
    """Tests for nested table handling."""

    @pytest.mark.unit
    def test_interleaved_cell_is_exploded(self, interleaved_form_html):
        """Static text and nested tables keep their vertical order."""
        form = parse_html_to_schema(interleaved_form_html)
        rows = form.sections[0].rows
        assert len(rows) == 5
        shapes = []
        for row in rows:
            (column,) = row.columns
            if column.nested_tables:
                shapes.append(("table", column.nested_tables[0].table_attributes["id"]))
            else:
                shapes.append(("text", column.static_blocks[0].html))
        assert shapes == [
            ("text", "<p>Intro</p>"),
            ("table", "t1"),
            ("text", "<p>Between</p>"),
            ("table", "t2"),
            ("text", "<p>Outro</p>"),
        ]

    @pytest.mark.unit
    def test_interleaved_fields_order(self, interleaved_form_html):
        """Fields of synthetic rows and nested tables stay in source order."""
        form = parse_html_to_schema(interleaved_form_html)
        assert [f.name for f in iter_fields(form)] == ["top", "inner1", "inner2"]
        assert [f.name for f in form.sections[0].rows[0].columns[0].fields] == ["top"]

    @pytest.mark.unit
    def test_nested_table_in_multi_cell_row(self):
        """Without the lone-cell shape, nested tables stay in their column."""
        html = (
            "<table><tr><td>A <input name='outer'>"
            "<table><tr><td><input name='inner'></td></tr></table></td>"
            "<td><input name='side'></td></tr></table>"
        )
        table = parse_html_to_schema(html).sections[0]
        first, second = table.rows[0].columns
        assert [f.name for f in first.fields] == ["outer"]
        assert len(first.nested_tables) == 1
        assert first.nested_tables[0].rows[0].columns[0].fields[0].name == "inner"
        assert first.static_blocks[0].html == "A"
        assert [f.name for f in second.fields] == ["side"]

    @pytest.mark.unit
    def test_multiple_tables_get_numbered_titles(self):
        """Several top-level tables become numbered sections."""
        html = "<h2>Order</h2><table><tr><td>a</td></tr></table><table><tr><td>b</td></tr></table>"
        form = parse_html_to_schema(html)
        assert [s.title for s in form.sections] == ["Order - Table 1", "Order - Table 2"]

    @pytest.mark.unit
    def test_parse_table_direct(self):
        """parse_table works on a table element of any document."""
        soup = parse_document(normalize_html("<table class='t'><td><input name='x'></td></table>"))
        table = parse_table(soup.find("table"))
        assert table.table_attributes == {"class": "t"}
        assert table.rows[0].columns[0].fields[0].name == "x"

    @pytest.mark.unit
    def test_exploded_rows_do_not_repeat_attributes(self):
        """Only the first synthetic row and cell keep the source attributes."""
        html = (
            '<table><tr class="r"><td id="cell" class="c"><p>Intro</p>'
            "<table><tr><td><input name='inner'></td></tr></table><p>Outro</p></td></tr></table>"
        )
        form = parse_html_to_schema(html)
        rows = form.sections[0].rows
        assert len(rows) == 3
        assert rows[0].html_attributes == {"class": "r"}
        assert rows[0].columns[0].html_attributes == {"id": "cell", "class": "c"}
        assert all(row.html_attributes == {} for row in rows[1:])
        assert all(row.columns[0].html_attributes == {} for row in rows[1:])
        assert schema_to_html(form).count('id="cell"') == 1

    @pytest.mark.unit
    def test_missing_row_is_repaired(self):
        """Cells written without <tr> still import as a row."""
        form = parse_html_to_schema("<table><td><input name='x'></td><td>y</td></table>")
        assert len(form.sections[0].rows) == 1
        assert len(form.sections[0].rows[0].columns) == 2


class TestUnclosedMarkup:
    """Tests for legacy markup that leaves cells and rows open."""

    @pytest.mark.unit
    def test_unclosed_cells_and_rows(self):
        """Open <td> and <tr> tags still produce a 2x2 grid."""
        form = parse_html_to_schema("<table><tr><td>A<td>B<tr><td>C<td>D</table>")
        rows = form.sections[0].rows
        assert [len(row.columns) for row in rows] == [2, 2]
        assert [[c.static_blocks[0].html for c in row.columns] for row in rows] == [
            ["A", "B"],
            ["C", "D"],
        ]

    @pytest.mark.unit
    def test_unclosed_cells_keep_fields_apart(self):
        """Each control lands in its own cell."""
        html = "<table><tr><td>Name<td><input name=a><tr><td>Age<td><input name=b></table>"
        rows = parse_html_to_schema(html).sections[0].rows
        assert len(rows) == 2
        for row, (label, name) in zip(rows, [("Name", "a"), ("Age", "b")]):
            label_cell, input_cell = row.columns
            assert label_cell.static_blocks[0].html == label
            assert label_cell.fields == []
            assert [f.name for f in input_cell.fields] == [name]

    @pytest.mark.unit
    def test_unclosed_paragraph_in_cell(self):
        """An open <p> closes at the end of its cell."""
        form = parse_html_to_schema("<table><tr><td><p>Note<td><input name=x></tr></table>")
        first, second = form.sections[0].rows[0].columns
        assert first.static_blocks[0].html == "<p>Note</p>"
        assert [f.name for f in second.fields] == ["x"]


class TestStackFallback:
    """Tests for documents without tables."""

    @pytest.mark.unit
    def test_fields_paired_per_row(self, stack_form_html):
        """Fields are laid out two per row at span 2."""
        form = parse_html_to_schema(stack_form_html)
        (section,) = form.sections
        assert section.layout == SectionLayout.STACK
        assert section.title == "Contact"
        assert [[c.fields[0].name for c in r.columns] for r in section.rows] == [
            ["first_name", "email"],
            ["subscribe"],
        ]
        assert all(c.span == 2 for r in section.rows for c in r.columns)

    @pytest.mark.unit
    def test_labels_and_types(self, stack_form_html):
        """Labels resolve by for, wrapping and name; unknown types are text."""
        form = parse_html_to_schema(stack_form_html)
        fields = {f.name: f for f in iter_fields(form)}
        assert fields["first_name"].label == "First name"
        assert fields["email"].label == "Email"
        assert fields["email"].type == FieldType.TEXT
        assert fields["email"].html_attributes["type"] == "email"
        assert fields["subscribe"].type == FieldType.CHECKBOX
        assert fields["subscribe"].label == "subscribe"

    @pytest.mark.unit
    def test_remaining_body_drops_controls_and_labels(self, stack_form_html):
        """Imported controls and their labels leave the retained body."""
        remaining = parse_html_to_schema(stack_form_html).remaining_body_html
        assert "<h2>Contact</h2>" in remaining
        assert "<input" not in remaining
        assert "<label" not in remaining


class TestFieldMapping:
    """Tests for map_element_to_field."""

    @pytest.mark.unit
    def test_name_falls_back_to_id_then_generated(self):
        """Names come from name, then id, then a generated value."""
        soup = parse_document("<input id='only-id'><input>")
        by_id, anonymous = (map_element_to_field(el) for el in soup.find_all("input"))
        assert by_id.name == "only-id"
        assert by_id.label == "only id"
        assert anonymous.name.startswith("field_")
        assert anonymous.original_name == anonymous.name

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "markup,expected",
        [
            ("<input type='DATE'>", FieldType.DATE),
            ("<input type='radio'>", FieldType.RADIO),
            ("<input type='hidden'>", FieldType.TEXT),
            ("<input type='submit'>", FieldType.TEXT),
            ("<textarea></textarea>", FieldType.TEXTAREA),
        ],
    )
    def test_type_inference(self, markup, expected):
        """Types are inferred case-insensitively; others become text."""
        element = parse_document(markup).find(["input", "textarea"])
        assert map_element_to_field(element).type == expected

    @pytest.mark.unit
    def test_option_fallbacks(self):
        """Options without text or value get readable fallbacks."""
        soup = parse_document("<select name='s'><option value='v'></option><option>T</option></select>")
        field = map_element_to_field(soup.find("select"))
        assert [(o.label, o.value) for o in field.options] == [("v", "v"), ("T", "T")]
        assert field.default_value is None

    @pytest.mark.unit
    def test_placeholder_and_textarea_default(self):
        """Placeholders are captured; textarea text is trimmed."""
        soup = parse_document("<textarea name='t' placeholder='Type'>  hello  </textarea>")
        field = map_element_to_field(soup.find("textarea"))
        assert field.placeholder == "Type"
        assert field.default_value == "hello"


class TestDegenerateInput:
    """Tests for inputs without form content."""

    @pytest.mark.unit
    @pytest.mark.parametrize("html", ["", "   ", "<<<>>>", "</table></td>", "\x00garbage"])
    def test_never_raises(self, html):
        """Any string imports without raising."""
        form = parse_html_to_schema(html)
        assert form.sections == []

    @pytest.mark.unit
    def test_empty_input(self):
        """Blank input yields an empty named form."""
        form = parse_html_to_schema("", "blank.html")
        assert form.name == "blank.html"
        assert form.original_html is None
        assert form.original_body_html is None

    @pytest.mark.unit
    def test_static_page_is_retained(self):
        """A page with no tables or fields keeps its body for passthrough."""
        html = "<html><body><p>Just text</p></body></html>"
        form = parse_html_to_schema(html)
        assert form.sections == []
        assert form.name == "Imported form"
        assert form.original_html == html
        assert form.original_body_html == "<p>Just text</p>"
        assert form.remaining_body_html == "<p>Just text</p>"
