"""HTML to form schema importer.

Converts legacy HTML form documents (usually table based, often malformed)
into a FormSchema. Each top-level table becomes a table-layout section;
documents without tables fall back to a two-column stack section. The raw
document, its head and body markup are kept on the schema so the exporter
can reproduce the non-form chrome.

The importer is pure: it never executes scripts, never performs I/O and
never raises for any input string.
"""

import copy
import logging

from bs4 import BeautifulSoup, Doctype, NavigableString, PageElement, Tag

from src.builder import generate_field_name
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
    StaticBlockKind,
    Table,
    iter_fields,
)

from .html import (
    CONTROL_TAGS,
    LabelIndex,
    child_tables,
    collect_attributes,
    element_text,
    extract_binding,
    find_top_level_tables,
    iter_cells,
    iter_rows,
    markup,
    nearest_table,
    normalize_html,
    parse_document,
    parse_span,
    sanitize_label,
)

logger = logging.getLogger(__name__)

DEFAULT_FORM_NAME = "Imported form"

# Stack fallback places two fields per row
STACK_FIELDS_PER_ROW = 2
STACK_COLUMN_SPAN = 2

# Modelled as col_span/row_span, so never duplicated into cell attributes
SPAN_ATTRIBUTES = ("colspan", "rowspan")

STATIC_BLOCK_LABEL = "Static HTML"

INPUT_TYPE_MAP: dict[str, FieldType] = {
    "number": FieldType.NUMBER,
    "date": FieldType.DATE,
    "checkbox": FieldType.CHECKBOX,
    "radio": FieldType.RADIO,
}


# =============================================================================
# Field mapping
# =============================================================================


def infer_field_type(element: Tag) -> FieldType:
    """Infer the field type from the tag name and `type` attribute.

    Unknown or missing input types (hidden, email, submit, ...) map to text.
    """
    if element.name == "textarea":
        return FieldType.TEXTAREA
    if element.name == "select":
        return FieldType.SELECT
    input_type = (element.get("type") or "text").strip().lower()
    return INPUT_TYPE_MAP.get(input_type, FieldType.TEXT)


def _select_options(element: Tag) -> list[FieldOption]:
    options = []
    for option in element.find_all("option"):
        text = element_text(option)
        value = option.get("value")
        options.append(
            FieldOption(
                label=text or value or "Option",
                value=value if value else (text or "option"),
            )
        )
    return options


def _selected_value(element: Tag) -> str | None:
    for option in element.find_all("option"):
        if option.has_attr("selected"):
            value = option.get("value")
            return value if value is not None else element_text(option)
    return None


def _raw_value(element: Tag) -> str | None:
    """The literal value a control carries in the source markup."""
    if element.name == "textarea":
        return element.get_text()
    if element.name == "select":
        return _selected_value(element)
    return element.get("value")


def map_element_to_field(element: Tag, labels: LabelIndex | None = None) -> FormField:
    """Convert one input/textarea/select element into a FormField.

    Args:
        element: The control element.
        labels: Label index of the element's document. Built on demand
            when omitted.

    Returns:
        FormField with type, naming, label, binding and attributes filled in.
    """
    if labels is None:
        root = element
        while root.parent is not None:
            root = root.parent
        labels = LabelIndex(root)

    field_type = infer_field_type(element)
    element_id = element.get("id") or None
    name = element.get("name") or element_id or generate_field_name()
    label = labels.text(element) or sanitize_label(name)

    raw_value = _raw_value(element)
    binding = extract_binding(raw_value)
    default_value = None
    if binding is None and raw_value is not None:
        # Textarea content is free text, trimmed like the other sources
        literal = raw_value.strip() if element.name == "textarea" else raw_value
        default_value = literal or None

    return FormField(
        type=field_type,
        name=name,
        label=label,
        binding_property=binding,
        original_id=element_id,
        original_name=name,
        html_attributes=collect_attributes(element),
        placeholder=element.get("placeholder") or None,
        default_value=default_value,
        options=_select_options(element) if field_type == FieldType.SELECT else None,
    )


# =============================================================================
# Table walk
# =============================================================================


def _is_table(node: PageElement) -> bool:
    return isinstance(node, Tag) and node.name == "table"


def _owned_controls(nodes: list[PageElement], table: Tag) -> list[Tag]:
    """Controls among `nodes` whose nearest table ancestor is `table`."""
    controls: list[Tag] = []
    for node in nodes:
        if not isinstance(node, Tag):
            continue
        if node.name in CONTROL_TAGS:
            candidates = [node, *node.find_all(CONTROL_TAGS)]
        else:
            candidates = node.find_all(CONTROL_TAGS)
        controls.extend(c for c in candidates if nearest_table(c) is table)
    return controls


def _static_markup(nodes: list[PageElement]) -> str:
    """Markup of `nodes` with the controls they own removed, trimmed.

    Works on detached copies; controls inside deeper, non-direct tables stay
    part of the static markup together with their table.
    """
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, NavigableString):
            parts.append(markup(node))
            continue
        if not isinstance(node, Tag) or node.name in CONTROL_TAGS:
            continue
        fragment = copy.copy(node)
        for control in fragment.find_all(CONTROL_TAGS):
            if nearest_table(control) is None:
                control.decompose()
        parts.append(markup(fragment))
    return "".join(parts).strip()


def _content_column(
    nodes: list[PageElement],
    table: Tag,
    labels: LabelIndex,
    cell: Tag,
    nested_tables: list[Table] | None = None,
) -> Column:
    fields = [map_element_to_field(c, labels) for c in _owned_controls(nodes, table)]
    static_html = _static_markup(nodes)
    static_blocks = []
    if static_html:
        static_blocks.append(
            StaticBlock(html=static_html, label=STATIC_BLOCK_LABEL, kind=StaticBlockKind.HTML)
        )
    return Column(
        fields=fields,
        static_blocks=static_blocks,
        col_span=parse_span(cell.get("colspan")),
        row_span=parse_span(cell.get("rowspan")),
        html_attributes=collect_attributes(cell, exclude=SPAN_ATTRIBUTES),
        nested_tables=nested_tables or [],
    )


def _explode_cell(table: Tag, row: Tag, cell: Tag, labels: LabelIndex) -> list[Row]:
    """Split a lone cell holding child tables into synthetic rows.

    Runs of non-table content become field/static rows; each child table
    becomes a row holding exactly that one nested table. Empty runs emit
    nothing, so concatenating the rows restores the source order. Only the
    first synthetic row and cell keep the source `<tr>`/`<td>` attributes,
    so an `id` is never exported twice.
    """
    row_attributes = collect_attributes(row)
    rows: list[Row] = []
    run: list[PageElement] = []

    def append(column: Column) -> None:
        if rows:
            column = column.model_copy(update={"html_attributes": {}})
            rows.append(Row(columns=[column]))
        else:
            rows.append(Row(columns=[column], html_attributes=row_attributes))

    def flush() -> None:
        if not run:
            return
        column = _content_column(run, table, labels, cell)
        if column.fields or column.static_blocks:
            append(column)
        run.clear()

    for node in cell.contents:
        if _is_table(node):
            flush()
            append(_content_column([], table, labels, cell, [parse_table(node, labels)]))
        else:
            run.append(node)
    flush()
    return rows


def parse_table(table: Tag, labels: LabelIndex | None = None) -> Table:
    """Convert a <table> element (and its nested tables) into a Table."""
    if labels is None:
        root = table
        while root.parent is not None:
            root = root.parent
        labels = LabelIndex(root)

    row_elements = iter_rows(table)
    if len(row_elements) == 1:
        cells = iter_cells(row_elements[0])
        if len(cells) == 1 and child_tables(cells[0]):
            return Table(
                rows=_explode_cell(table, row_elements[0], cells[0], labels),
                table_attributes=collect_attributes(table),
            )

    rows = []
    for row in row_elements:
        columns = []
        for cell in iter_cells(row):
            content = [node for node in cell.contents if not _is_table(node)]
            nested = [parse_table(child, labels) for child in child_tables(cell)]
            columns.append(_content_column(content, table, labels, cell, nested))
        rows.append(Row(columns=columns, html_attributes=collect_attributes(row)))

    return Table(rows=rows, table_attributes=collect_attributes(table))


# =============================================================================
# Document
# =============================================================================


def _document_title(soup: BeautifulSoup, fallback_name: str | None) -> str:
    heading = soup.find(["h1", "h2", "h3"])
    if heading is not None and element_text(heading):
        return element_text(heading)
    if soup.title is not None and element_text(soup.title):
        return element_text(soup.title)
    return fallback_name or DEFAULT_FORM_NAME


def _body_markup(soup: BeautifulSoup) -> str:
    """Inner body markup; a frameset document has no <body>, so its top level is used."""
    if soup.body is not None:
        return soup.body.decode_contents()
    container = soup.html or soup
    return "".join(
        markup(node)
        for node in container.contents
        if not isinstance(node, Doctype)
        and not (isinstance(node, Tag) and node.name == "head")
    )


def _head_markup(soup: BeautifulSoup) -> str | None:
    """Inner head markup, or None when the document has nothing in it."""
    if soup.head is None:
        return None
    head_html = soup.head.decode_contents()
    return head_html if head_html.strip() else None


def _stack_section(title: str, fields: list[FormField]) -> Section:
    rows = []
    for start in range(0, len(fields), STACK_FIELDS_PER_ROW):
        pair = fields[start : start + STACK_FIELDS_PER_ROW]
        rows.append(
            Row(columns=[Column(span=STACK_COLUMN_SPAN, fields=[field]) for field in pair])
        )
    return Section(title=title, layout=SectionLayout.STACK, rows=rows)


def _strip_imported_content(soup: BeautifulSoup, tables: list[Tag], labels: LabelIndex) -> None:
    """Remove what the sections now own so it is not exported twice."""
    if tables:
        for table in tables:
            table.extract()
        return
    # Resolve every label before the tree changes
    consumed: list[Tag] = []
    controls = soup.find_all(CONTROL_TAGS)
    for control in controls:
        label = labels.find(control)
        if label is not None and not any(label is seen for seen in consumed):
            consumed.append(label)
    for element in [*controls, *consumed]:
        element.extract()


def _empty_schema(html: str, fallback_name: str | None) -> FormSchema:
    return FormSchema(
        name=fallback_name or DEFAULT_FORM_NAME,
        original_html=html if html.strip() else None,
    )


def parse_html_to_schema(html: str, fallback_name: str | None = None) -> FormSchema:
    """Import an HTML document as a FormSchema.

    Args:
        html: Raw HTML text (whole document or fragment).
        fallback_name: Form name used when the document has no heading or
            title (typically the source file name).

    Returns:
        FormSchema. Garbage input yields a schema with no sections.

    Example:
        >>> form = parse_html_to_schema("<table><tr><td><input name=\"a\"></td></tr></table>")
        >>> form.sections[0].layout
        <SectionLayout.TABLE: 'table'>
    """
    html = html or ""
    try:
        return _parse(html, fallback_name)
    except Exception as e:
        # Degrade to passthrough rather than surface parser failures
        logger.warning(f"HTML import failed, keeping document as passthrough: {e}")
        return _empty_schema(html, fallback_name)


def _parse(html: str, fallback_name: str | None) -> FormSchema:
    soup = parse_document(normalize_html(html))
    labels = LabelIndex(soup)

    title = _document_title(soup, fallback_name)
    head_html = _head_markup(soup)
    body_html = _body_markup(soup) if html.strip() else None

    tables = find_top_level_tables(soup)
    sections: list[Section] = []
    for index, table in enumerate(tables, start=1):
        parsed = parse_table(table, labels)
        suffix = f" - Table {index}" if len(tables) > 1 else ""
        sections.append(
            Section(
                title=title + suffix,
                layout=SectionLayout.TABLE,
                rows=parsed.rows,
                table_attributes=parsed.table_attributes,
            )
        )

    if not tables:
        fields = [map_element_to_field(c, labels) for c in soup.find_all(CONTROL_TAGS)]
        if fields:
            sections.append(_stack_section(title, fields))

    remaining_html = None
    if body_html is not None:
        _strip_imported_content(soup, tables, labels)
        remaining_html = _body_markup(soup)

    source = f"Imported from: {fallback_name}" if fallback_name else "Imported from HTML"
    schema = FormSchema(
        name=title,
        description=source,
        sections=sections,
        original_html=html if html.strip() else None,
        original_head_html=head_html,
        original_body_html=body_html,
        remaining_body_html=remaining_html,
    )
    logger.debug(
        f"Imported {len(tables)} top-level tables, "
        f"{sum(1 for _ in iter_fields(schema))} fields"
    )
    return schema


parse = parse_html_to_schema


__all__ = [
    "DEFAULT_FORM_NAME",
    "infer_field_type",
    "map_element_to_field",
    "parse_table",
    "parse_html_to_schema",
    "parse",
]
