"""Unit tests for the form schema module."""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from .lib import (
    Column,
    FieldOption,
    FieldType,
    FormField,
    FormSchema,
    Row,
    SchemaLoadError,
    Section,
    SectionLayout,
    StaticBlock,
    StaticBlockKind,
    Table,
    ValidationRule,
    ValidationType,
    create_id,
    export_json_schema,
    iter_columns,
    iter_fields,
    iter_tables,
    schema_from_json,
    schema_to_dict,
    schema_to_json,
)


def _nested_form() -> FormSchema:
    inner = Table(
        rows=[
            Row(
                columns=[
                    Column(fields=[FormField(id="f-inner", name="inner")]),
                ]
            )
        ]
    )
    outer = Column(
        fields=[FormField(id="f-outer", name="outer")],
        nested_tables=[inner],
    )
    trailing = Column(fields=[FormField(id="f-trailing", name="trailing")])
    return FormSchema(
        name="Nested",
        sections=[
            Section(
                layout=SectionLayout.TABLE,
                rows=[Row(columns=[outer, trailing])],
            )
        ],
    )


class TestIdentifiers:
    """Tests for id generation."""

    @pytest.mark.unit
    def test_ids_are_unique(self):
        """Generated ids never repeat."""
        ids = {create_id() for _ in range(500)}
        assert len(ids) == 500

    @pytest.mark.unit
    def test_nodes_get_fresh_ids(self):
        """Each constructed node receives its own id."""
        assert Row().id != Row().id


class TestModels:
    """Tests for model defaults and constraints."""

    @pytest.mark.unit
    def test_column_defaults(self):
        """Columns default to full span and empty collections."""
        column = Column()
        assert column.span == 4
        assert column.col_span == 1
        assert column.row_span == 1
        assert column.fields == []
        assert column.static_blocks == []
        assert column.nested_tables == []

    @pytest.mark.unit
    def test_span_out_of_range_rejected(self):
        """span must stay within 1-4."""
        with pytest.raises(PydanticValidationError):
            Column(span=5)
        with pytest.raises(PydanticValidationError):
            Column(span=0)

    @pytest.mark.unit
    def test_models_are_frozen(self):
        """Assigning to a model attribute fails."""
        field = FormField(name="a")
        with pytest.raises(PydanticValidationError):
            field.name = "b"

    @pytest.mark.unit
    def test_flex_ratio(self):
        """Two span-2 columns share a row equally."""
        columns = [Column(span=2), Column(span=2)]
        assert [c.flex_ratio for c in columns] == [0.5, 0.5]
        assert sum(c.flex_ratio for c in columns) == 1.0

    @pytest.mark.unit
    def test_binding_token(self):
        """Bound fields expose their ${property} token."""
        assert FormField(name="a", binding_property="applicantName").binding_token == (
            "${applicantName}"
        )
        assert FormField(name="a").binding_token is None

    @pytest.mark.unit
    def test_field_type_from_string(self):
        """Field types validate from their wire values."""
        field = FormField(name="a", type="select")
        assert field.type == FieldType.SELECT


class TestWalkers:
    """Tests for document-order walkers."""

    @pytest.mark.unit
    def test_iter_fields_document_order(self):
        """Nested fields come after their cell's fields, before later cells."""
        names = [f.name for f in iter_fields(_nested_form())]
        assert names == ["outer", "inner", "trailing"]

    @pytest.mark.unit
    def test_iter_columns_includes_nested(self):
        """Columns of nested tables are visited."""
        assert len(list(iter_columns(_nested_form()))) == 3

    @pytest.mark.unit
    def test_iter_tables(self):
        """Nested tables below a column are yielded."""
        form = _nested_form()
        column = form.sections[0].rows[0].columns[0]
        assert len(list(iter_tables(column))) == 1


class TestSerialization:
    """Tests for the JSON save format."""

    @pytest.mark.unit
    def test_round_trip_is_lossless(self):
        """A full form survives a JSON round trip unchanged."""
        form = FormSchema(
            name="Request",
            description="desc",
            form_class="Correspondence",
            action_code="CRE",
            version=3,
            sections=[
                Section(
                    title="Main",
                    layout=SectionLayout.TABLE,
                    table_attributes={"border": "1", "cellpadding": "6"},
                    rows=[
                        Row(
                            html_attributes={"class": "r"},
                            columns=[
                                Column(
                                    span=2,
                                    col_span=2,
                                    fields=[
                                        FormField(
                                            name="kind",
                                            type=FieldType.SELECT,
                                            label="Kind",
                                            options=[
                                                FieldOption(label="B", value="b"),
                                                FieldOption(label="A", value="a"),
                                            ],
                                            validations=[
                                                ValidationRule(
                                                    type=ValidationType.REQUIRED,
                                                    message="Pick one",
                                                )
                                            ],
                                        ),
                                        FormField(
                                            name="who",
                                            binding_property="applicantName",
                                            html_attributes={"data-x": "1", "class": "c"},
                                        ),
                                        FormField(name="ok", default_value=True),
                                    ],
                                    static_blocks=[
                                        StaticBlock(
                                            html="<b>x</b>", kind=StaticBlockKind.RICHTEXT
                                        )
                                    ],
                                    nested_tables=[Table(rows=[Row(columns=[Column()])])],
                                )
                            ],
                        )
                    ],
                )
            ],
            original_html="<html></html>",
        )
        restored = schema_from_json(schema_to_json(form))
        assert restored == form
        options = restored.sections[0].rows[0].columns[0].fields[0].options
        assert [o.value for o in options] == ["b", "a"]
        attrs = restored.sections[0].rows[0].columns[0].fields[1].html_attributes
        assert list(attrs) == ["data-x", "class"]

    @pytest.mark.unit
    def test_wire_names_are_camel_case(self):
        """Saved files use the browser builder's member names."""
        form = FormSchema(
            name="x",
            form_class="C",
            sections=[
                Section(
                    rows=[
                        Row(
                            columns=[
                                Column(
                                    col_span=2,
                                    fields=[FormField(name="a", binding_property="p")],
                                    static_blocks=[StaticBlock(html="<p/>")],
                                )
                            ]
                        )
                    ]
                )
            ],
        )
        data = schema_to_dict(form)
        column = data["sections"][0]["rows"][0]["columns"][0]
        assert data["formClass"] == "C"
        assert column["colSpan"] == 2
        assert column["nestedTables"] == []
        assert column["fields"][0]["bindingProperty"] == "p"
        assert column["staticBlocks"][0]["type"] == "html"

    @pytest.mark.unit
    def test_loads_browser_builder_file(self):
        """A file written by the browser builder loads."""
        text = json.dumps(
            {
                "id": "form-1",
                "name": "Legacy",
                "version": 1,
                "sections": [
                    {
                        "id": "s1",
                        "title": "T",
                        "layout": "table",
                        "rows": [
                            {
                                "id": "r1",
                                "columns": [
                                    {
                                        "id": "c1",
                                        "span": 4,
                                        "fields": [
                                            {
                                                "id": "f1",
                                                "type": "text",
                                                "name": "x",
                                                "label": "X",
                                                "originalName": "x",
                                            }
                                        ],
                                        "staticHtml": "<b>hi</b>",
                                    }
                                ],
                            }
                        ],
                    }
                ],
            }
        )
        form = schema_from_json(text)
        column = form.sections[0].rows[0].columns[0]
        assert column.static_html == "<b>hi</b>"
        assert column.fields[0].original_name == "x"

    @pytest.mark.unit
    def test_invalid_json_raises_load_error(self):
        """Malformed JSON reports a readable error."""
        with pytest.raises(SchemaLoadError, match="Invalid JSON"):
            schema_from_json("{not json")

    @pytest.mark.unit
    def test_missing_members_raise_load_error(self):
        """Objects without id, name and sections are rejected."""
        with pytest.raises(SchemaLoadError, match="missing required fields"):
            schema_from_json('{"name": "x"}')

    @pytest.mark.unit
    def test_bad_member_types_raise_load_error(self):
        """Structurally invalid members are rejected."""
        with pytest.raises(SchemaLoadError, match="Invalid form schema"):
            schema_from_json('{"id": "a", "name": "b", "sections": "nope"}')


class TestJsonSchemaExport:
    """Tests for JSON Schema export."""

    @pytest.mark.unit
    def test_export_json_schema(self):
        """Exported schema describes the wire names."""
        schema = export_json_schema()
        assert schema["title"] == "FormSchema"
        assert "sections" in schema["properties"]
        assert "originalHtml" in schema["properties"]
