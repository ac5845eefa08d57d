"""Unit tests for the properties and action code libraries."""

import pytest

from .lib import (
    DEFAULT_ACTION_CODES,
    ActionCode,
    ActionCodeLibrary,
    LibraryError,
    PropertiesLibrary,
    validate_action_code,
)


class TestPropertiesLibrary:
    """Tests for PropertiesLibrary."""

    @pytest.mark.unit
    def test_reads_classes(self, properties_xml):
        """Classes and properties are read in file order."""
        library = PropertiesLibrary(properties_xml)
        assert library.class_names() == ["Correspondence", "Invoice"]
        labels = [p.label for p in library.properties_for("Correspondence")]
        assert labels == ["Subject", "Applicant name"]
        assert library.property_names("Invoice") == {"amount"}

    @pytest.mark.unit
    def test_unknown_class_is_empty(self, properties_xml):
        """An unknown class has no properties."""
        library = PropertiesLibrary(properties_xml)
        assert library.properties_for("Nope") == []
        assert library.property_names("Nope") == set()

    @pytest.mark.unit
    def test_missing_attributes_use_fallbacks(self, tmp_path):
        """A nameless class is UnknownClass; a label defaults to the name."""
        path = tmp_path / "props.xml"
        path.write_text('<Properties><Class><property name="x"/></Class></Properties>')
        entry = PropertiesLibrary(path).classes()[0]
        assert entry.name == "UnknownClass"
        assert entry.properties[0].label == "x"

    @pytest.mark.unit
    def test_missing_file_is_empty(self, tmp_path, caplog):
        """A missing file yields an empty library and a warning."""
        library = PropertiesLibrary(tmp_path / "absent.xml")
        assert library.classes() == []
        assert "not found" in caplog.text

    @pytest.mark.unit
    def test_malformed_file_raises(self, tmp_path):
        """Malformed XML raises LibraryError."""
        path = tmp_path / "bad.xml"
        path.write_text("<Properties><Class>")
        with pytest.raises(LibraryError, match="Malformed"):
            PropertiesLibrary(path).classes()

    @pytest.mark.unit
    def test_reload_rereads_file(self, properties_xml):
        """Changes on disk appear only after reload."""
        library = PropertiesLibrary(properties_xml)
        assert len(library.classes()) == 2
        properties_xml.write_text('<Properties><Class name="Only"/></Properties>')
        assert len(library.classes()) == 2
        assert [c.name for c in library.reload()] == ["Only"]

    @pytest.mark.unit
    def test_default_path_from_environment(self, properties_xml, monkeypatch):
        """The default path comes from PROPERTIES_LIBRARY_PATH."""
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(properties_xml))
        assert PropertiesLibrary().path == properties_xml


class TestActionCodeLibrary:
    """Tests for ActionCodeLibrary."""

    @pytest.mark.unit
    def test_defaults_when_missing(self, tmp_path):
        """A missing file gives the sorted default codes."""
        library = ActionCodeLibrary(tmp_path / "codes.xml")
        assert library.values() == ["AMD", "CI", "CO", "CPY", "CRE", "DF", "QRY", "REC", "SAS"]
        assert library.codes()[4].description == "Creation"

    @pytest.mark.unit
    def test_reads_and_sorts_file(self, tmp_path):
        """Entries need a value and a label and are sorted by value."""
        path = tmp_path / "codes.xml"
        path.write_text(
            "<actionCodes>"
            '<actionCode value="ZZ" label="Zed"/>'
            '<actionCode value="AA" label="Ay" description="First"/>'
            '<actionCode value="NOLABEL"/>'
            "</actionCodes>"
        )
        codes = ActionCodeLibrary(path).codes()
        assert [c.value for c in codes] == ["AA", "ZZ"]
        assert codes[0].description == "First"
        assert codes[1].description == ""

    @pytest.mark.unit
    def test_defaults_when_empty_or_malformed(self, tmp_path):
        """Unusable files fall back to the defaults."""
        empty = tmp_path / "empty.xml"
        empty.write_text("<actionCodes/>")
        broken = tmp_path / "broken.xml"
        broken.write_text("<actionCodes><actionCode")
        assert len(ActionCodeLibrary(empty).codes()) == len(DEFAULT_ACTION_CODES)
        assert len(ActionCodeLibrary(broken).codes()) == len(DEFAULT_ACTION_CODES)

    @pytest.mark.unit
    def test_save_and_reload(self, tmp_path):
        """Saved codes are written sorted and read back."""
        path = tmp_path / "nested" / "codes.xml"
        library = ActionCodeLibrary(path)
        library.save([ActionCode(value="X2", label="X2"), ActionCode(value="A1", label="A1")])
        assert path.exists()
        assert [c.value for c in ActionCodeLibrary(path).codes()] == ["A1", "X2"]

    @pytest.mark.unit
    def test_reset(self, tmp_path):
        """Reset removes the file and restores the defaults."""
        path = tmp_path / "codes.xml"
        library = ActionCodeLibrary(path)
        library.save([ActionCode(value="ONLY", label="ONLY")])
        assert library.values() == ["ONLY"]
        assert len(library.reset()) == len(DEFAULT_ACTION_CODES)
        assert not path.exists()


class TestValidateActionCode:
    """Tests for validate_action_code."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "code, message",
        [
            ("", "Action code cannot be empty"),
            ("   ", "Action code cannot be empty"),
            ("cre", "Action code must be all uppercase"),
            ("A B", "Action code cannot contain spaces"),
            ("A-B", "Action code can only contain uppercase letters and numbers"),
            ("ABCDEFGHIJK", "Action code cannot exceed 10 characters"),
            ("CRE", "Action code already exists"),
        ],
    )
    def test_rejections(self, code, message):
        """Each invalid shape has its own message."""
        assert validate_action_code(code, list(DEFAULT_ACTION_CODES)) == message

    @pytest.mark.unit
    def test_accepts_new_code(self):
        """A new uppercase alphanumeric code is accepted."""
        assert validate_action_code("NEW1", list(DEFAULT_ACTION_CODES)) is None
