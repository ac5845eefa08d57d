"""Unit tests for importer HTML helpers."""

import pytest

from src.importer.html import (
    LabelIndex,
    collect_attributes,
    extract_binding,
    find_top_level_tables,
    iter_cells,
    iter_rows,
    markup,
    normalize_html,
    parse_document,
    parse_span,
    sanitize_label,
)


class TestNormalizeHtml:
    """Tests for the missing-row repair pass."""

    @pytest.mark.unit
    def test_inserts_missing_row(self):
        """A cell directly after <table> gets a <tr>."""
        assert normalize_html("<table><td>A</td></table>") == "<table><tr><td>A</td></table>"

    @pytest.mark.unit
    def test_inserts_after_tbody_with_attributes(self):
        """Attributes and whitespace before the cell are kept."""
        html = '<table border="1"><tbody class="b">\n  <th>A</th></tbody></table>'
        assert normalize_html(html) == (
            '<table border="1"><tbody class="b">\n  <tr><th>A</th></tbody></table>'
        )

    @pytest.mark.unit
    def test_leaves_wellformed_tables_alone(self):
        """Tables with rows and thead sections are unchanged."""
        html = "<table><thead><tr><th>A</th></tr></thead><tr><td>B</td></tr></table>"
        assert normalize_html(html) == html

    @pytest.mark.unit
    def test_repaired_row_is_parsed(self):
        """The tree builder closes the inserted row."""
        soup = parse_document(normalize_html("<table><td>A</td><td>B</td></table>"))
        rows = iter_rows(soup.find("table"))
        assert len(rows) == 1
        assert len(rows[0].find_all("td")) == 2


class TestParseDocument:
    """Tests for lenient parsing and attribute capture."""

    @pytest.mark.unit
    def test_class_attribute_stays_a_string(self):
        """Multi-valued attributes are not split."""
        soup = parse_document('<input class="a  b" data-x="1">')
        attrs = collect_attributes(soup.find("input"))
        assert attrs == {"class": "a  b", "data-x": "1"}

    @pytest.mark.unit
    def test_collect_attributes_exclude(self):
        """Excluded attributes are skipped."""
        soup = parse_document('<table><tr><td colspan="2" class="c" rowspan="3"></td></tr></table>')
        assert collect_attributes(soup.find("td"), exclude=("colspan", "rowspan")) == {
            "class": "c"
        }

    @pytest.mark.unit
    def test_malformed_markup_parses(self):
        """Unclosed tags never raise."""
        soup = parse_document("<table><tr><td><input name=a><div></table")
        assert soup.find("input") is not None

    @pytest.mark.unit
    def test_unclosed_cells_close_implicitly(self):
        """A new <td> or <tr> closes the open cell and row."""
        soup = parse_document("<table><tr><td>A<td>B<tr><td>C<td>D</table>")
        rows = iter_rows(soup.find("table"))
        assert [[cell.get_text() for cell in iter_cells(row)] for row in rows] == [
            ["A", "B"],
            ["C", "D"],
        ]

    @pytest.mark.unit
    def test_fragment_gets_document_shell(self):
        """Fragments are placed in a body like a browser would."""
        soup = parse_document("<p>x</p>")
        assert soup.body.decode_contents() == "<p>x</p>"
        assert soup.head.decode_contents() == ""

    @pytest.mark.unit
    def test_markup_reescapes_text(self):
        """Text nodes keep their entities when serialized."""
        soup = parse_document("<p>a &amp; b</p>")
        assert markup(soup.find("p").contents[0]) == "a &amp; b"


class TestTables:
    """Tests for table helpers."""

    @pytest.mark.unit
    def test_top_level_tables_skip_nested(self):
        """Only tables without a table ancestor are top level."""
        soup = parse_document(
            "<table id='a'><tr><td><table id='b'></table></td></tr></table><table id='c'></table>"
        )
        assert [t["id"] for t in find_top_level_tables(soup)] == ["a", "c"]

    @pytest.mark.unit
    def test_iter_rows_ignores_nested_rows(self):
        """Rows of nested tables do not belong to the outer table."""
        soup = parse_document(
            "<table><tbody><tr><td><table><tr><td>x</td></tr></table></td></tr></tbody>"
            "<tfoot><tr><td>f</td></tr></tfoot></table>"
        )
        assert len(iter_rows(soup.find("table"))) == 2

    @pytest.mark.unit
    @pytest.mark.parametrize("raw,expected", [("2", 2), (None, 1), ("x", 1), ("0", 1), (" 3 ", 3)])
    def test_parse_span(self, raw, expected):
        """Invalid spans fall back to 1."""
        assert parse_span(raw) == expected


class TestLabels:
    """Tests for label resolution."""

    @pytest.mark.unit
    def test_label_for_wins(self):
        """A label[for] beats a wrapping label."""
        soup = parse_document(
            '<label for="a">By for</label><label>Wrap <input id="a"></label>'
        )
        assert LabelIndex(soup).text(soup.find("input")) == "By for"

    @pytest.mark.unit
    def test_wrapping_label_excludes_control_text(self):
        """Option text of a wrapped select is not part of the label."""
        soup = parse_document("<label>Kind <select><option>A</option></select></label>")
        assert LabelIndex(soup).text(soup.find("select")) == "Kind"

    @pytest.mark.unit
    def test_previous_sibling_label(self):
        """The preceding sibling label is used last."""
        soup = parse_document("<div><label>Name</label> <input name='n'></div>")
        assert LabelIndex(soup).text(soup.find("input")) == "Name"

    @pytest.mark.unit
    def test_empty_labels_are_skipped(self):
        """Labels without text do not count."""
        soup = parse_document('<label for="a"> </label><input id="a">')
        assert LabelIndex(soup).find(soup.find("input")) is None

    @pytest.mark.unit
    def test_non_label_sibling_is_ignored(self):
        """Only a <label> sibling is considered."""
        soup = parse_document("<span>Name</span><input name='n'>")
        assert LabelIndex(soup).text(soup.find("input")) == ""


class TestTextHelpers:
    """Tests for label sanitizing and binding extraction."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("__first_name", "first name"),
            ("due-date", "due date"),
            ("a__-b", "a b"),
            ("plain", "plain"),
        ],
    )
    def test_sanitize_label(self, raw, expected):
        """Names become readable labels."""
        assert sanitize_label(raw) == expected

    @pytest.mark.unit
    def test_extract_binding(self):
        """Tokens are found anywhere in the value and trimmed."""
        assert extract_binding("${applicantName}") == "applicantName"
        assert extract_binding("Dear ${ subject }!") == "subject"
        assert extract_binding("no token") is None
        assert extract_binding("") is None
        assert extract_binding(None) is None
