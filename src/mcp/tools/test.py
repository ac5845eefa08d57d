"""Unit tests for MCP tools."""

import pytest

from src.schema import schema_to_dict

from .forms import create_form, export_html, import_html
from .library import list_action_codes, list_classes
from .validate import validate_form


class TestImportHtml:
    """Tests for import_html tool."""

    @pytest.mark.unit
    def test_returns_form_draft_and_stats(self, legacy_form_html):
        """Import returns camelCase JSON, a draft tree and counts."""
        result = import_html(legacy_form_html)
        assert result["form"]["name"] == "Change Request"
        assert "originalHtml" in result["form"]
        assert result["draft"].startswith("Change Request [form")
        assert result["stats"] == {
            "sections": 1,
            "table_sections": 1,
            "fields": 4,
            "bound_fields": 2,
        }

    @pytest.mark.unit
    def test_empty_html_rejected(self):
        """Blank input is an argument error."""
        with pytest.raises(ValueError, match="must not be empty"):
            import_html("   ")


class TestExportHtml:
    """Tests for export_html tool."""

    @pytest.mark.unit
    def test_exports_document(self, sample_form):
        """A form dict exports to HTML with a suggested file name."""
        result = export_html(schema_to_dict(sample_form))
        assert result["html"].startswith("<!doctype html>")
        assert result["filename"] == "Correspondence_CRE.html"

    @pytest.mark.unit
    def test_invalid_form_rejected(self):
        """Invalid dicts raise ValueError."""
        with pytest.raises(ValueError, match="missing required fields"):
            export_html({"name": "x"})


class TestCreateForm:
    """Tests for create_form tool."""

    @pytest.mark.unit
    def test_blank_form(self):
        """Without arguments a blank form is created."""
        result = create_form()
        assert result["form"]["name"] == "Untitled form"
        assert result["form"]["sections"] == []

    @pytest.mark.unit
    def test_table_form(self):
        """table_columns starts a table section, clamped to 4 cells."""
        result = create_form("Grid", table_columns=9, form_class="Invoice", action_code="AMD")
        section = result["form"]["sections"][0]
        assert section["layout"] == "table"
        assert len(section["rows"][0]["columns"]) == 4
        assert result["form"]["formClass"] == "Invoice"
        assert result["form"]["actionCode"] == "AMD"


class TestValidateForm:
    """Tests for validate_form tool."""

    @pytest.mark.unit
    def test_valid_form(self, sample_form):
        """A clean form is valid."""
        result = validate_form(schema_to_dict(sample_form))
        assert result["valid"] is True
        assert result["stats"]["sections"] == 2

    @pytest.mark.unit
    def test_schema_errors(self):
        """Undecodable forms are reported, not raised."""
        result = validate_form({"id": "x"})
        assert result["valid"] is False
        assert result["errors"][0]["issue_type"] == "schema_validation"

    @pytest.mark.unit
    def test_bindings_checked_with_library(self, legacy_form_html, properties_xml, monkeypatch):
        """An installed properties library flags unknown bindings."""
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(properties_xml))
        form = import_html(legacy_form_html)["form"]
        form["formClass"] = "Correspondence"

        result = validate_form(form)
        assert [e["issue_type"] for e in result["errors"]] == ["unknown_binding"]
        assert "remarks" in result["errors"][0]["message"]
        assert validate_form(form, check_bindings=False)["valid"] is True


class TestLibraryTools:
    """Tests for library lookup tools."""

    @pytest.mark.unit
    def test_action_codes_default(self):
        """Without a file the defaults are listed."""
        result = list_action_codes()
        assert result["source"] == "defaults"
        assert result["codes"][0] == {"value": "AMD", "label": "AMD", "description": "Amendment"}

    @pytest.mark.unit
    def test_list_classes(self, properties_xml, monkeypatch):
        """Classes come from the configured library."""
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(properties_xml))
        assert [c["name"] for c in list_classes()["classes"]] == ["Correspondence", "Invoice"]
        invoice = list_classes("Invoice")["classes"][0]
        assert invoice["properties"] == [{"name": "amount", "label": "Amount"}]
        with pytest.raises(ValueError, match="Unknown class"):
            list_classes("Nope")
