"""HTML helpers for the form importer.

Wraps BeautifulSoup with the small set of DOM capabilities the importer
needs: lenient parsing, a repair pass for rows missing their `<tr>`,
attribute capture, nearest-table ownership, label resolution and text
extraction.

Parsing uses the html5lib tree builder, which follows the HTML5 parsing
algorithm browsers use: unclosed `<td>`, `<tr>` and `<p>` elements close
implicitly, and every document gets `<html>`, `<head>` and `<body>`.
"""

import re

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

# Tags that become form fields
CONTROL_TAGS = ["input", "textarea", "select"]

# Row containers that may sit between a <table> and its <tr> elements
ROW_GROUP_TAGS = {"thead", "tbody", "tfoot"}

CELL_TAGS = ["td", "th"]

# A cell directly after <table ...> or <tbody ...> means the <tr> is missing
_MISSING_ROW_RE = re.compile(
    r"(<(?:table|tbody)\b[^>]*>)(\s*)(?=<t[dh]\b)",
    re.IGNORECASE,
)

BINDING_TOKEN_RE = re.compile(r"\$\{\s*([^}]+?)\s*\}")


def normalize_html(html: str) -> str:
    """Insert the `<tr>` some legacy documents omit.

    Example:
        >>> normalize_html("<table><td>A</td></table>")
        '<table><tr><td>A</td></table>'
    """
    return _MISSING_ROW_RE.sub(r"\1\2<tr>", html)


def parse_document(html: str) -> BeautifulSoup:
    """Parse HTML leniently into a navigable tree, the way a browser would.

    Attribute values are always kept as plain strings so they round-trip
    exactly (no splitting of `class` and similar attributes).
    """
    return BeautifulSoup(html, "html5lib", multi_valued_attributes=None)


def collect_attributes(element: Tag, exclude: tuple[str, ...] = ()) -> dict[str, str]:
    """Capture an element's attributes in source order."""
    attrs: dict[str, str] = {}
    for name, value in element.attrs.items():
        if name in exclude or value is None:
            continue
        attrs[name] = value if isinstance(value, str) else " ".join(value)
    return attrs


def markup(node: PageElement) -> str:
    """Serialize a tag or text node back to HTML (entities re-escaped)."""
    if isinstance(node, NavigableString):
        return node.output_ready()
    return node.decode()


def nearest_table(element: Tag) -> Tag | None:
    """Return the closest enclosing <table>, or None."""
    return element.find_parent("table")


def element_text(element: Tag) -> str:
    """Text content with whitespace runs collapsed."""
    return " ".join(element.get_text(" ").split())


def parse_span(value: str | None) -> int:
    """Parse a colspan/rowspan attribute, defaulting to 1."""
    try:
        span = int((value or "").strip())
    except ValueError:
        return 1
    return span if span >= 1 else 1


def iter_rows(table: Tag) -> list[Tag]:
    """Return a table's own rows in document order.

    Rows are <tr> children of the table itself or of its thead/tbody/tfoot,
    never rows of nested tables.
    """
    rows: list[Tag] = []
    for child in table.find_all(True, recursive=False):
        if child.name == "tr":
            rows.append(child)
        elif child.name in ROW_GROUP_TAGS:
            rows.extend(child.find_all("tr", recursive=False))
    return rows


def iter_cells(row: Tag) -> list[Tag]:
    """Return the <td>/<th> children of a row."""
    return row.find_all(CELL_TAGS, recursive=False)


def child_tables(cell: Tag) -> list[Tag]:
    """Return the direct-child tables of a cell."""
    return cell.find_all("table", recursive=False)


def find_top_level_tables(soup: BeautifulSoup) -> list[Tag]:
    """Return tables that are not nested inside another table."""
    return [table for table in soup.find_all("table") if nearest_table(table) is None]


def sanitize_label(raw: str) -> str:
    """Turn a programmatic name into a readable label.

    Example:
        >>> sanitize_label("__applicant-first_name")
        'applicant first name'
    """
    text = re.sub(r"^_+", "", raw)
    text = re.sub(r"[_-]+", " ", text)
    return " ".join(text.split())


def extract_binding(value: str | None) -> str | None:
    """Return the property name of a `${property}` token, if any."""
    if not value:
        return None
    match = BINDING_TOKEN_RE.search(value)
    return match.group(1).strip() if match else None


class LabelIndex:
    """Resolves the label of a form control within one document.

    Resolution order:
        1. <label for="id"> matching the control's id
        2. a <label> wrapping the control
        3. the immediately preceding sibling element, if it is a <label>
    """

    def __init__(self, soup: BeautifulSoup):
        self._by_for: dict[str, Tag] = {}
        for label in soup.find_all("label"):
            target = label.get("for")
            if target and target not in self._by_for:
                self._by_for[target] = label

    def find(self, element: Tag) -> Tag | None:
        """Return the label element for a control, or None."""
        control_id = element.get("id")
        if control_id:
            label = self._by_for.get(control_id)
            if label is not None and self._label_text(label, element):
                return label

        wrapping = element.find_parent("label")
        if wrapping is not None and self._label_text(wrapping, element):
            return wrapping

        previous = element.find_previous_sibling(True)
        if previous is not None and previous.name == "label":
            if self._label_text(previous, element):
                return previous
        return None

    def text(self, element: Tag) -> str:
        """Return the resolved label text for a control, or ""."""
        label = self.find(element)
        return self._label_text(label, element) if label is not None else ""

    @staticmethod
    def _label_text(label: Tag, element: Tag) -> str:
        # Text of a wrapping label excludes the control's own content
        parts = [
            text
            for text in label.find_all(string=True)
            if not any(parent is element for parent in text.parents)
        ]
        return " ".join(" ".join(parts).split())


__all__ = [
    "BINDING_TOKEN_RE",
    "CELL_TAGS",
    "CONTROL_TAGS",
    "LabelIndex",
    "child_tables",
    "collect_attributes",
    "element_text",
    "extract_binding",
    "find_top_level_tables",
    "iter_cells",
    "iter_rows",
    "markup",
    "nearest_table",
    "normalize_html",
    "parse_document",
    "parse_span",
    "sanitize_label",
]
