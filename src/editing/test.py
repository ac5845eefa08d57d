"""Unit tests for copy-on-write editing operations."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.builder import create_empty_form
from src.schema import (
    Column,
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
    schema_to_json,
)

from .lib import (
    add_field,
    add_nested_table,
    add_row,
    add_section,
    add_static_block,
    add_table_section,
    change_form_class,
    find_node,
    remove_field,
    remove_row,
    remove_section,
    remove_static_block,
    reorder_fields,
    reorder_rows,
    update_column,
    update_field,
    update_form,
    update_row,
    update_section,
    update_static_block,
)


class FakeLookup:
    """Property lookup backed by a dict."""

    def __init__(self, classes: dict[str, set[str]]):
        self.classes = classes

    def property_names(self, class_name: str) -> set[str]:
        return self.classes.get(class_name, set())


@pytest.fixture
def nested_form() -> FormSchema:
    """A table section whose cell holds a nested table."""
    inner_field = FormField(id="f-inner", name="inner", binding_property="amount")
    inner_row = Row(id="r-inner", columns=[Column(id="c-inner", fields=[inner_field])])
    outer = Column(
        id="c-outer",
        fields=[
            FormField(id="f-a", name="a", binding_property="subject", default_value="x"),
            FormField(id="f-b", name="b", binding_property="gone", default_value="y"),
            FormField(id="f-c", name="c", default_value="z"),
        ],
        static_blocks=[StaticBlock(id="b-1", html="<p>one</p>")],
        nested_tables=[Table(id="t-inner", rows=[inner_row])],
    )
    return FormSchema(
        id="form",
        name="Nested",
        sections=[
            Section(
                id="s-1",
                layout=SectionLayout.TABLE,
                rows=[Row(id="r-1", columns=[outer]), Row(id="r-2", columns=[Column(id="c-2")])],
            )
        ],
    )


class TestCopyOnWrite:
    """Inputs are never mutated."""

    @pytest.mark.unit
    def test_input_unchanged(self, nested_form):
        """Every operation leaves its input as it was."""
        before = schema_to_json(nested_form)
        update_field(nested_form, "f-a", label="A")
        add_field(nested_form, "c-inner", "date")
        remove_row(nested_form, "r-inner")
        reorder_fields(nested_form, "c-outer", 0, 2)
        change_form_class(nested_form, "Invoice", FakeLookup({}))
        assert schema_to_json(nested_form) == before

    @pytest.mark.unit
    def test_unknown_ids_are_noops(self, nested_form):
        """Addressing a missing id returns an equal form."""
        assert update_field(nested_form, "missing", label="x") == nested_form
        assert remove_row(nested_form, "missing") == nested_form
        assert add_field(nested_form, "missing") == nested_form
        assert update_section(nested_form, "missing", title="x") == nested_form

    @pytest.mark.unit
    def test_only_changed_path_is_rebuilt(self, nested_form):
        """Untouched subtrees are shared with the input."""
        form = update_field(nested_form, "f-inner", label="Inner")
        old_rows, new_rows = nested_form.sections[0].rows, form.sections[0].rows
        assert new_rows[0] is not old_rows[0]
        assert new_rows[1] is old_rows[1]
        old_outer, new_outer = old_rows[0].columns[0], new_rows[0].columns[0]
        assert new_outer.fields[0] is old_outer.fields[0]
        assert new_outer.static_blocks[0] is old_outer.static_blocks[0]

    @pytest.mark.unit
    def test_noop_edit_returns_input(self, nested_form):
        """Tree edits that match nothing hand back the same form."""
        assert update_field(nested_form, "missing", label="x") is nested_form
        assert remove_row(nested_form, "missing") is nested_form

    @pytest.mark.unit
    def test_unknown_attribute_rejected(self, nested_form):
        """Changes must name existing attributes."""
        with pytest.raises(ValueError, match="Unknown FormField attribute"):
            update_field(nested_form, "f-a", colour="red")

    @pytest.mark.unit
    def test_invalid_value_rejected(self, nested_form):
        """Changes are validated."""
        with pytest.raises(PydanticValidationError):
            update_column(nested_form, "c-outer", span=9)


class TestUpdates:
    """Tests for update operations."""

    @pytest.mark.unit
    def test_update_form_and_section(self):
        """Form and section attributes change."""
        form = add_section(create_empty_form("A"))
        form = update_form(form, name="B", action_code="AMD")
        form = update_section(form, form.sections[0].id, title="Renamed")
        assert (form.name, form.action_code) == ("B", "AMD")
        assert form.sections[0].title == "Renamed"

    @pytest.mark.unit
    def test_update_nested_field(self, nested_form):
        """Fields inside nested tables are reachable."""
        form = update_field(nested_form, "f-inner", type=FieldType.NUMBER, label="Inner")
        field = find_node(form, "f-inner")
        assert field.type == FieldType.NUMBER
        assert field.label == "Inner"

    @pytest.mark.unit
    def test_update_nested_row(self, nested_form):
        """Rows inside nested tables are reachable."""
        form = update_row(nested_form, "r-inner", html_attributes={"class": "x"})
        assert find_node(form, "r-inner").html_attributes == {"class": "x"}

    @pytest.mark.unit
    def test_update_column_and_static_block(self, nested_form):
        """Column spans and static markup change."""
        form = update_column(nested_form, "c-2", span=2, col_span=3)
        form = update_static_block(form, "b-1", "<p>two</p>")
        assert (find_node(form, "c-2").span, find_node(form, "c-2").col_span) == (2, 3)
        assert find_node(form, "b-1").html == "<p>two</p>"


class TestAdditions:
    """Tests for add operations."""

    @pytest.mark.unit
    def test_add_sections(self):
        """Sections are appended in order."""
        form = add_table_section(add_section(create_empty_form()), "Grid", 3)
        assert [s.layout for s in form.sections] == [SectionLayout.STACK, SectionLayout.TABLE]
        assert len(form.sections[1].rows[0].columns) == 3

    @pytest.mark.unit
    def test_add_row(self, nested_form):
        """Rows are appended to the addressed section."""
        form = add_row(nested_form, "s-1")
        assert len(form.sections[0].rows) == 3

    @pytest.mark.unit
    def test_add_field_to_nested_column(self, nested_form):
        """A default field is appended to a nested column."""
        form = add_field(nested_form, "c-inner", "select")
        fields = find_node(form, "c-inner").fields
        assert [f.type for f in fields] == [FieldType.TEXT, FieldType.SELECT]
        assert len(fields[1].options) == 2

    @pytest.mark.unit
    def test_add_nested_table_and_block(self, nested_form):
        """Nested tables and static blocks are appended."""
        form = add_nested_table(nested_form, "c-2")
        form = add_static_block(form, "c-2", "richtext")
        column = find_node(form, "c-2")
        assert len(column.nested_tables) == 1
        assert column.static_blocks[0].kind == StaticBlockKind.RICHTEXT


class TestRemovals:
    """Tests for remove operations."""

    @pytest.mark.unit
    def test_remove_section(self, nested_form):
        """Sections are removed by id."""
        assert remove_section(nested_form, "s-1").sections == []

    @pytest.mark.unit
    def test_remove_nested_row(self, nested_form):
        """Rows of nested tables can be removed."""
        form = remove_row(nested_form, "r-inner")
        assert find_node(form, "t-inner").rows == []
        assert len(form.sections[0].rows) == 2

    @pytest.mark.unit
    def test_remove_field_and_block(self, nested_form):
        """Fields and static blocks are removed by id."""
        form = remove_static_block(remove_field(nested_form, "f-b"), "b-1")
        assert [f.name for f in find_node(form, "c-outer").fields] == ["a", "c"]
        assert find_node(form, "b-1") is None


class TestReordering:
    """Tests for reorder operations."""

    @pytest.mark.unit
    def test_reorder_rows(self, nested_form):
        """Rows move within their section."""
        form = reorder_rows(nested_form, "s-1", 1, 0)
        assert [r.id for r in form.sections[0].rows] == ["r-2", "r-1"]

    @pytest.mark.unit
    def test_reorder_fields(self, nested_form):
        """Fields move within their column."""
        form = reorder_fields(nested_form, "c-outer", 0, 2)
        assert [f.name for f in find_node(form, "c-outer").fields] == ["b", "c", "a"]

    @pytest.mark.unit
    def test_out_of_range_is_noop(self, nested_form):
        """Invalid indices leave the order unchanged."""
        assert reorder_fields(nested_form, "c-outer", 5, 0) == nested_form
        assert reorder_rows(nested_form, "s-1", 0, -1) == nested_form


class TestChangeFormClass:
    """Tests for switching the form class."""

    @pytest.mark.unit
    def test_clears_only_invalid_bindings(self, nested_form):
        """Unknown bindings and their defaults are cleared; others kept."""
        lookup = FakeLookup({"Correspondence": {"subject", "amount"}})
        form = change_form_class(nested_form, "Correspondence", lookup)
        fields = {f.name: f for f in iter_fields(form)}
        assert form.form_class == "Correspondence"
        assert (fields["a"].binding_property, fields["a"].default_value) == ("subject", "x")
        assert (fields["b"].binding_property, fields["b"].default_value) == (None, None)
        assert (fields["c"].binding_property, fields["c"].default_value) == (None, "z")
        assert fields["inner"].binding_property == "amount"

    @pytest.mark.unit
    def test_unknown_class_clears_all_bindings(self, nested_form):
        """A class without properties invalidates every binding."""
        form = change_form_class(nested_form, "Nope", FakeLookup({}))
        assert all(f.binding_property is None for f in iter_fields(form))
        assert find_node(form, "f-c").default_value == "z"


class TestFindNode:
    """Tests for node lookup."""

    @pytest.mark.unit
    def test_finds_every_kind(self, nested_form):
        """Sections, rows, columns, fields, blocks and tables are found."""
        for node_id, kind in [
            ("s-1", Section),
            ("r-1", Row),
            ("c-inner", Column),
            ("f-inner", FormField),
            ("b-1", StaticBlock),
            ("t-inner", Table),
        ]:
            assert isinstance(find_node(nested_form, node_id), kind)
        assert find_node(nested_form, "missing") is None
