"""Unit tests for the directory form store."""

import pytest

from src.schema import SchemaLoadError

from .lib import IMPORT_KEY, FormStore, set_form_for_import


@pytest.fixture
def store(tmp_path) -> FormStore:
    return FormStore(tmp_path / "forms")


class TestSchemas:
    """Tests for saving and loading schemas."""

    @pytest.mark.unit
    def test_save_uses_schema_filename(self, store, sample_form):
        """Without a key the file is named after the form."""
        path = store.save(sample_form)
        assert path.name == "Sample.json"
        assert store.exists("Sample")
        assert store.load("Sample") == sample_form

    @pytest.mark.unit
    def test_explicit_key(self, store, sample_form):
        """Keys may be given with or without the .json suffix."""
        store.save(sample_form, "draft")
        assert store.load("draft.json") == sample_form
        assert store.list_keys() == ["draft"]

    @pytest.mark.unit
    def test_missing_key(self, store):
        """Loading an unknown key raises KeyError."""
        with pytest.raises(KeyError):
            store.load("nothing")
        assert store.load_text("nothing") is None
        assert store.list_keys() == []

    @pytest.mark.unit
    def test_corrupt_file(self, store):
        """A stored file that is not a form raises SchemaLoadError."""
        store.root.mkdir(parents=True)
        (store.root / "bad.json").write_text("{not json")
        with pytest.raises(SchemaLoadError):
            store.load("bad")

    @pytest.mark.unit
    def test_delete(self, store, sample_form):
        """Deleting reports whether anything was removed."""
        store.save(sample_form, "x")
        assert store.delete("x") is True
        assert store.delete("x") is False

    @pytest.mark.unit
    def test_rejects_path_names(self, store, sample_form):
        """Keys cannot leave the store root."""
        with pytest.raises(ValueError, match="Invalid store name"):
            store.save(sample_form, "../escape")

    @pytest.mark.unit
    def test_set_form_for_import(self, store, sample_form):
        """Staged imports use the import key."""
        set_form_for_import(store, sample_form)
        assert store.load(IMPORT_KEY) == sample_form


class TestHtml:
    """Tests for the exported HTML library."""

    @pytest.mark.unit
    def test_save_and_load_html(self, store):
        """HTML is stored by file name."""
        store.save_html("Invoice_CRE.html", "<p>x</p>")
        assert store.load_html("Invoice_CRE.html") == "<p>x</p>"
        assert store.list_html() == ["Invoice_CRE.html"]
        assert store.load_html("missing.html") is None
