"""FormSchema to HTML exporter.

Renders a form back into HTML compatible with the host document
management system: table sections become `<table>` markup that mirrors the
imported source, stack sections become flex rows. Imported documents are
re-wrapped in their original head and the non-form body content.

Exporter output is always syntactically valid HTML regardless of field
content: every text and attribute insertion point is entity escaped.
Static HTML blocks are markup and are emitted verbatim.
"""

import re

from src.builder import DEFAULT_ACTION_CODE
from src.schema import (
    MAX_COLUMN_SPAN,
    Column,
    FieldType,
    FormField,
    FormSchema,
    Row,
    Section,
    SectionLayout,
)

INDENT = "  "

# Captured attributes the exporter writes itself
CONTROLLED_ATTRIBUTES = frozenset({"type", "value"})

# Input types with their own FieldType; a text field never re-emits these
MODELLED_INPUT_TYPES = frozenset({"text", "number", "date", "checkbox", "radio"})

PLACEHOLDER_FIELD_TYPES = frozenset(
    {FieldType.TEXT, FieldType.TEXTAREA, FieldType.NUMBER, FieldType.DATE}
)

UNKNOWN_CLASS = "UnknownClass"

_HTML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"}


def escape_html(text: object) -> str:
    """Escape &, <, > and " for text and attribute positions.

    Example:
        >>> escape_html('a < b & "c"')
        'a &lt; b &amp; &quot;c&quot;'
    """
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in str(text))


def _attribute_string(attrs: dict[str, str]) -> str:
    return " ".join(f'{name}="{escape_html(value)}"' for name, value in attrs.items())


def _open_tag(tag: str, attrs: dict[str, str]) -> str:
    attribute_string = _attribute_string(attrs)
    return f"<{tag} {attribute_string}>" if attribute_string else f"<{tag}>"


def _markup_lines(html: str) -> list[str]:
    """Split verbatim markup into trimmed, non-empty lines."""
    return [line.strip() for line in html.split("\n") if line.strip()]


def _indent_block(block: str, level: int) -> str:
    prefix = INDENT * level
    return "\n".join(prefix + line.rstrip() for line in block.split("\n"))


class HtmlExporter:
    """Renders FormSchema trees as HTML.

    Fields are rendered with their original id/name so the exported markup
    stays addressable by the consuming system. The value written into a
    control is the binding token when bound, else the literal default.

    Example output (table section):
        ```html
        <table border="1">
          <tbody>
            <tr>
              <td>
                <input type="text" id="who" name="who" value="${applicantName}" />
              </td>
            </tr>
          </tbody>
        </table>
        ```
    """

    def render(self, schema: FormSchema) -> str:
        """Render a complete HTML document for a form.

        Args:
            schema: The form to export.

        Returns:
            str: Full document markup. A form without sections that still
            carries its imported document is returned unchanged.
        """
        if not schema.sections and schema.original_html:
            return schema.original_html

        generated = "\n".join(
            line for section in schema.sections for line in self.render_section(section, 2)
        )

        if schema.original_body_html:
            if schema.original_head_html and schema.original_head_html.strip():
                head = _indent_block(schema.original_head_html.strip(), 2)
            else:
                head = self._default_head(schema)
            retained = (
                schema.remaining_body_html
                if schema.remaining_body_html is not None
                else schema.original_body_html
            )
            body = "\n".join(part for part in (retained.strip(), generated) if part)
        else:
            head = self._default_head(schema)
            body = generated

        return (
            "<!doctype html>\n"
            "<html>\n"
            f"{INDENT}<head>\n"
            f"{head}\n"
            f"{INDENT}</head>\n"
            f"{INDENT}<body>\n"
            f"{body}\n"
            f"{INDENT}</body>\n"
            "</html>"
        )

    def _default_head(self, schema: FormSchema) -> str:
        return _indent_block(
            f'<meta charset="UTF-8" />\n<title>{escape_html(schema.name)}</title>', 2
        )

    # =========================================================================
    # Sections and tables
    # =========================================================================

    def render_section(self, section: Section, level: int = 0) -> list[str]:
        """Render one section as indented lines."""
        if section.layout == SectionLayout.TABLE:
            return self.render_table(section.rows, section.table_attributes, level, labels=False)
        return self._render_stack(section, level)

    def render_table(
        self,
        rows: list[Row],
        attributes: dict[str, str],
        level: int = 0,
        labels: bool = False,
    ) -> list[str]:
        """Render rows as a `<table>` with a single `<tbody>`."""
        prefix = INDENT * level
        lines = [prefix + _open_tag("table", attributes), f"{prefix}{INDENT}<tbody>"]
        for row in rows:
            lines.append(f"{prefix}{INDENT * 2}{_open_tag('tr', row.html_attributes)}")
            for column in row.columns:
                lines.extend(self._render_cell(column, level + 3, labels))
            lines.append(f"{prefix}{INDENT * 2}</tr>")
        lines.append(f"{prefix}{INDENT}</tbody>")
        lines.append(f"{prefix}</table>")
        return lines

    def _render_cell(self, column: Column, level: int, labels: bool) -> list[str]:
        prefix = INDENT * level
        attrs = dict(column.html_attributes)
        if column.col_span > 1:
            attrs["colspan"] = str(column.col_span)
        if column.row_span > 1:
            attrs["rowspan"] = str(column.row_span)

        lines = [prefix + _open_tag("td", attrs)]
        lines.extend(self._render_column_content(column, level + 1, labels))
        lines.append(f"{prefix}</td>")
        return lines

    def _render_column_content(self, column: Column, level: int, labels: bool) -> list[str]:
        """Static HTML, then static blocks, then fields, then nested tables."""
        prefix = INDENT * level
        lines: list[str] = []
        if column.static_html:
            lines.extend(prefix + line for line in _markup_lines(column.static_html))
        for block in column.static_blocks:
            lines.extend(prefix + line for line in _markup_lines(block.html))
        for field in column.fields:
            lines.extend(self.render_field(field, level, labels))
        for table in column.nested_tables:
            lines.extend(self.render_table(table.rows, table.table_attributes, level, labels))
        return lines

    def _render_stack(self, section: Section, level: int) -> list[str]:
        """Render a stack section as a <section> of flex rows.

        Each column becomes a flex item sized span/4. Its content is the full
        column, in table-cell order: static HTML and static blocks, then
        fields with labels, then nested tables. Authored stack columns can
        hold blocks and tables, and dropping them on export would lose them.
        """
        prefix = INDENT * level
        lines = [f"{prefix}<section>"]
        for row in section.rows:
            lines.append(f'{prefix}{INDENT}<div style="display:flex; gap:8px;">')
            for column in row.columns:
                ratio = _format_ratio(column.span / MAX_COLUMN_SPAN)
                lines.append(f'{prefix}{INDENT * 2}<div style="flex:{ratio}; padding:4px;">')
                lines.extend(self._render_column_content(column, level + 3, labels=True))
                lines.append(f"{prefix}{INDENT * 2}</div>")
            lines.append(f"{prefix}{INDENT}</div>")
        lines.append(f"{prefix}</section>")
        return lines

    # =========================================================================
    # Fields
    # =========================================================================

    def render_field(self, field: FormField, level: int = 0, labels: bool = True) -> list[str]:
        """Render one field as indented lines.

        Args:
            field: Field to render.
            level: Indentation level.
            labels: Whether imported fields get a label element. Authored
                fields always do; imported fields in table sections carry
                their visible label in the surrounding static HTML.
        """
        prefix = INDENT * level
        attrs = self._field_attributes(field)
        attribute_string = _attribute_string(attrs)
        value = escape_html(self._field_value(field))
        label = escape_html(field.label)
        with_label = labels or field.original_name is None
        label_line = f'{prefix}<label for="{escape_html(attrs["id"])}">{label}</label>'

        if field.type == FieldType.TEXTAREA:
            lines = [f"{prefix}<textarea {attribute_string}>{value}</textarea>"]
        elif field.type == FieldType.SELECT:
            lines = [f"{prefix}<select {attribute_string}>"]
            for option in field.options or []:
                selected = " selected" if self._is_selected(field, option.value) else ""
                lines.append(
                    f'{prefix}{INDENT}<option value="{escape_html(option.value)}"{selected}>'
                    f"{escape_html(option.label)}</option>"
                )
            lines.append(f"{prefix}</select>")
        elif field.type == FieldType.CHECKBOX:
            control = f'<input type="checkbox" {attribute_string} value="{value or "on"}" />'
            if with_label:
                return [f"{prefix}<label>{control} {label}</label>"]
            return [prefix + control]
        elif field.type == FieldType.RADIO:
            return self._render_radio(field, attribute_string, value, label, level, with_label)
        else:
            input_type = self._input_type(field)
            lines = [f'{prefix}<input type="{input_type}" {attribute_string} value="{value}" />']

        if with_label:
            lines.insert(0, label_line)
        return lines

    def _render_radio(
        self,
        field: FormField,
        attribute_string: str,
        value: str,
        label: str,
        level: int,
        with_label: bool,
    ) -> list[str]:
        prefix = INDENT * level
        if not field.options:
            control = f'<input type="radio" {attribute_string} value="{value}" />'
            if with_label:
                return [f"{prefix}<label>{control} {label}</label>"]
            return [prefix + control]

        lines = [f"{prefix}<div>", f"{prefix}{INDENT}{label}"]
        for option in field.options:
            checked = " checked" if self._is_selected(field, option.value) else ""
            lines.append(
                f'{prefix}{INDENT}<label><input type="radio" {attribute_string} '
                f'value="{escape_html(option.value)}"{checked} /> '
                f"{escape_html(option.label)}</label>"
            )
        lines.append(f"{prefix}</div>")
        return lines

    def _field_attributes(self, field: FormField) -> dict[str, str]:
        """Captured attributes with the original id/name restored."""
        attrs = {
            name: value
            for name, value in field.html_attributes.items()
            if name.lower() not in CONTROLLED_ATTRIBUTES
        }
        attrs["id"] = field.original_id or attrs.get("id") or field.name
        attrs["name"] = field.original_name or attrs.get("name") or field.name
        if field.placeholder and field.type in PLACEHOLDER_FIELD_TYPES:
            attrs.setdefault("placeholder", field.placeholder)
        return attrs

    def _field_value(self, field: FormField) -> str:
        if field.binding_token:
            return field.binding_token
        default = field.default_value
        if isinstance(default, bool) or default is None:
            return ""
        return str(default)

    def _is_selected(self, field: FormField, option_value: str) -> bool:
        return not field.binding_property and field.default_value == option_value

    def _input_type(self, field: FormField) -> str:
        if field.type != FieldType.TEXT:
            return field.type.value
        captured = field.html_attributes.get("type", "").strip().lower()
        if captured and captured not in MODELLED_INPUT_TYPES:
            return escape_html(captured)
        return "text"


def _format_ratio(ratio: float) -> str:
    """Format a flex ratio without a trailing `.0` (1 rather than 1.0)."""
    return f"{ratio:g}"


def schema_to_html(schema: FormSchema) -> str:
    """Export a form as a complete HTML document.

    Args:
        schema: The form to export.

    Returns:
        str: HTML document text.
    """
    return HtmlExporter().render(schema)


render = schema_to_html


# =============================================================================
# File names
# =============================================================================


def export_filename(schema: FormSchema, extension: str = "xml") -> str:
    """File name for an exported form, e.g. `Correspondence_CRE.xml`."""
    form_class = schema.form_class or UNKNOWN_CLASS
    action_code = schema.action_code or DEFAULT_ACTION_CODE
    return f"{form_class}_{action_code}.{extension}"


def schema_filename(schema: FormSchema) -> str:
    """File name for a saved form, e.g. `Change_Request_AMD.json`."""
    base = re.sub(r"\s+", "_", schema.name or "form")
    action = f"_{schema.action_code}" if schema.action_code else ""
    return f"{base}{action}.json"


__all__ = [
    "HtmlExporter",
    "escape_html",
    "schema_to_html",
    "render",
    "export_filename",
    "schema_filename",
]
