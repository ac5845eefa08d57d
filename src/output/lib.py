"""Output formatting for form visualization.

Generates human-readable text representations of FormSchema trees
for review on the command line and in MCP tool responses.
"""

from dataclasses import dataclass, field

from src.exporter import schema_to_html
from src.schema import Column, FormField, FormSchema, Row, Section, SectionLayout, Table
from src.validation import ValidationIssue, validate_form


@dataclass
class _TreeNode:
    text: str
    children: list["_TreeNode"] = field(default_factory=list)


@dataclass
class FormOutput:
    """Complete output for user review.

    Attributes:
        text_tree: Human-readable tree representation.
        html: Exported HTML document.
        schema: The form.
        issues: Validation issues found.
    """

    text_tree: str
    html: str
    schema: FormSchema
    issues: list[ValidationIssue]


def format_form_tree(schema: FormSchema) -> str:
    """Format a FormSchema as a human-readable tree.

    Example output:
        Change Request [form, Correspondence, CRE]
        └── Change Request [table section]
            ├── Row 1 [2 columns]
            │   ├── Column 1 [span 4]
            │   │   └── Static HTML
            │   └── Column 2 [span 4]
            │       └── Applicant [text, ${applicantName}]
            └── Row 2 [1 column]
                └── Column 1 [span 4, colspan 2]
                    └── Kind [select, 2 options]

    Args:
        schema: Form to format.

    Returns:
        Formatted tree string.
    """
    lines: list[str] = []
    _format_node(_form_node(schema), lines, "", is_last=True, is_root=True)
    return "\n".join(lines)


def _form_node(schema: FormSchema) -> _TreeNode:
    attrs = ["form"]
    if schema.form_class:
        attrs.append(schema.form_class)
    if schema.action_code:
        attrs.append(schema.action_code)
    return _TreeNode(
        f"{schema.name} [{', '.join(attrs)}]",
        [_section_node(section) for section in schema.sections],
    )


def _section_node(section: Section) -> _TreeNode:
    kind = "table section" if section.layout == SectionLayout.TABLE else "stack section"
    return _TreeNode(f"{section.title or section.id} [{kind}]", _row_nodes(section.rows))


def _row_nodes(rows: list[Row]) -> list[_TreeNode]:
    nodes = []
    for i, row in enumerate(rows, 1):
        count = len(row.columns)
        plural = "column" if count == 1 else "columns"
        nodes.append(
            _TreeNode(
                f"Row {i} [{count} {plural}]",
                [_column_node(column, j) for j, column in enumerate(row.columns, 1)],
            )
        )
    return nodes


def _column_node(column: Column, index: int) -> _TreeNode:
    attrs = [f"span {column.span}"]
    if column.col_span > 1:
        attrs.append(f"colspan {column.col_span}")
    if column.row_span > 1:
        attrs.append(f"rowspan {column.row_span}")

    children: list[_TreeNode] = []
    if column.static_html:
        children.append(_TreeNode("Static HTML"))
    children.extend(
        _TreeNode(f"{block.label or 'Static block'} [{block.kind.value}]")
        for block in column.static_blocks
    )
    children.extend(_TreeNode(_field_text(f)) for f in column.fields)
    children.extend(_table_node(table) for table in column.nested_tables)
    return _TreeNode(f"Column {index} [{', '.join(attrs)}]", children)


def _field_text(field: FormField) -> str:
    attrs = [field.type.value]
    if field.binding_token:
        attrs.append(field.binding_token)
    if field.options:
        attrs.append(f"{len(field.options)} options")
    return f"{field.label or field.name} [{', '.join(attrs)}]"


def _table_node(table: Table) -> _TreeNode:
    count = len(table.rows)
    return _TreeNode(
        f"Table [{count} {'row' if count == 1 else 'rows'}]", _row_nodes(table.rows)
    )


def _format_node(
    node: _TreeNode,
    lines: list[str],
    prefix: str,
    is_last: bool,
    is_root: bool = False,
) -> None:
    """Recursively format a node and its children."""
    if is_root:
        connector = ""
        child_prefix = ""
    else:
        connector = "└── " if is_last else "├── "
        child_prefix = prefix + ("    " if is_last else "│   ")

    lines.append(f"{prefix}{connector}{node.text}")

    for i, child in enumerate(node.children):
        _format_node(child, lines, child_prefix, i == len(node.children) - 1)


class OutputGenerator:
    """Generates complete output for user review.

    Produces the text tree, exported HTML and validation issues for a form
    in one pass.
    """

    def generate(self, schema: FormSchema) -> FormOutput:
        """Generate output for a form.

        Args:
            schema: Form to present.

        Returns:
            FormOutput with text tree, HTML and issues.
        """
        return FormOutput(
            text_tree=format_form_tree(schema),
            html=schema_to_html(schema),
            schema=schema,
            issues=validate_form(schema),
        )


__all__ = [
    "format_form_tree",
    "FormOutput",
    "OutputGenerator",
]
