"""Unit tests for form loading."""

import base64

import httpx
import pytest

from src.schema import iter_fields, schema_to_json
from src.storage import IMPORT_KEY, FormStore

from .lib import (
    FormLoadSource,
    SourceKind,
    get_form_source_from_params,
    load_form_from_source,
    parse_form_content,
    prepare_form_data_for_import,
)


@pytest.fixture
def store(tmp_path) -> FormStore:
    return FormStore(tmp_path / "store")


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestParseFormContent:
    """Tests for content sniffing."""

    @pytest.mark.unit
    def test_json_by_leading_brace(self, sample_form):
        """JSON is detected without a content type."""
        result = parse_form_content(schema_to_json(sample_form), "", "x")
        assert result.success
        assert result.schema == sample_form

    @pytest.mark.unit
    def test_json_missing_members(self):
        """JSON without id, name and sections is rejected."""
        result = parse_form_content('{"name": "x"}', "application/json", "x")
        assert not result.success
        assert "missing required fields" in result.error

    @pytest.mark.unit
    def test_invalid_json(self):
        """Broken JSON is reported, not raised."""
        result = parse_form_content("{oops", "", "x")
        assert not result.success
        assert "Invalid JSON" in result.error

    @pytest.mark.unit
    def test_html_form(self, legacy_form_html):
        """HTML with controls is imported."""
        result = parse_form_content(legacy_form_html, "text/html", "request.html")
        assert result.success
        assert len(list(iter_fields(result.schema))) == 4

    @pytest.mark.unit
    def test_html_without_controls(self):
        """HTML pages without controls are rejected."""
        result = parse_form_content("<html><body><p>404</p></body></html>", "text/html", "x")
        assert result.error == "HTML content does not contain form elements"

    @pytest.mark.unit
    def test_legacy_without_content_type(self):
        """Legacy markup without a leading tag is still imported."""
        result = parse_form_content("Form: <input name='a'>", "", "legacy")
        assert result.success

    @pytest.mark.unit
    def test_unrecognized(self):
        """Plain text is rejected."""
        result = parse_form_content("hello", "text/plain", "x")
        assert result.error.startswith("Unrecognized form format")


class TestUrlSource:
    """Tests for loading by URL."""

    @pytest.mark.unit
    def test_fetches_html(self, legacy_form_html, store):
        """A successful fetch is parsed and named after the URL."""

        def handler(request):
            return httpx.Response(200, text=legacy_form_html, headers={"content-type": "text/html"})

        result = load_form_from_source(
            FormLoadSource.url("https://edms.example/forms/Request_CRE.html"),
            store=store,
            client=_client(handler),
        )
        assert result.success
        assert result.filename == "Request_CRE.html"
        assert result.schema.name == "Change Request"

    @pytest.mark.unit
    def test_http_error_status(self, store):
        """Non-2xx responses become an error."""
        result = load_form_from_source(
            FormLoadSource.url("https://edms.example/missing.html"),
            store=store,
            client=_client(lambda request: httpx.Response(404)),
        )
        assert not result.success
        assert result.error == "Failed to fetch form: 404 Not Found"

    @pytest.mark.unit
    def test_network_error(self, store):
        """Transport failures become an error."""

        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        result = load_form_from_source(
            FormLoadSource.url("https://down.example/x.html"), store=store, client=_client(handler)
        )
        assert not result.success
        assert result.error.startswith("Network error loading form")


class TestOtherSources:
    """Tests for path, data and store sources."""

    @pytest.mark.unit
    def test_local_file(self, tmp_path, legacy_form_html, store):
        """Local files are read and sniffed by suffix."""
        path = tmp_path / "request.html"
        path.write_text(legacy_form_html, encoding="utf-8")
        result = load_form_from_source(FormLoadSource.path(str(path)), store=store)
        assert result.success
        assert result.filename == "request.html"

    @pytest.mark.unit
    def test_missing_file(self, tmp_path, store):
        """A missing file is an error."""
        result = load_form_from_source(FormLoadSource.path(str(tmp_path / "no.html")), store=store)
        assert result.error.startswith("File not found")

    @pytest.mark.unit
    def test_forms_library(self, legacy_form_html, store):
        """forms/ paths read the exported HTML library."""
        store.save_html("Request_CRE.html", legacy_form_html)
        result = load_form_from_source(FormLoadSource.path("forms/Request_CRE.html"), store=store)
        assert result.success
        assert result.filename == "Request_CRE.html"

        missing = load_form_from_source(FormLoadSource.path("forms/Other.html"), store=store)
        assert "not found in the forms library" in missing.error

    @pytest.mark.unit
    def test_base64_round_trip(self, sample_form, store):
        """Prepared form data loads back to the same form."""
        data = prepare_form_data_for_import(sample_form)
        result = load_form_from_source(FormLoadSource.data(data), store=store)
        assert result.schema == sample_form

    @pytest.mark.unit
    def test_bad_base64(self, store):
        """Undecodable data is an error."""
        result = load_form_from_source(FormLoadSource.data("***"), store=store)
        assert result.error.startswith("Failed to decode base64 data")

    @pytest.mark.unit
    def test_non_json_payload(self, store):
        """Decoded data that is not a form is an error."""
        data = base64.b64encode(b"[1, 2]").decode()
        result = load_form_from_source(FormLoadSource.data(data), store=store)
        assert not result.success

    @pytest.mark.unit
    def test_store_key(self, sample_form, store):
        """Store keys load saved forms; unknown keys are errors."""
        store.save(sample_form, IMPORT_KEY)
        assert load_form_from_source(FormLoadSource.store(IMPORT_KEY), store=store).success
        missing = load_form_from_source(FormLoadSource.store("nope"), store=store)
        assert missing.error == "No data found in store for key: nope"

    @pytest.mark.unit
    def test_invalid_store_key_does_not_raise(self, store):
        """Unexpected errors are reported in the result."""
        result = load_form_from_source(FormLoadSource.store("../x"), store=store)
        assert not result.success
        assert "Invalid store name" in result.error


class TestSourceFromParams:
    """Tests for link parameter resolution."""

    @pytest.mark.unit
    def test_priority(self):
        """formUrl beats form beats formData beats import."""
        params = {"formUrl": "u", "form": "p", "formData": "d", "import": "k"}
        assert get_form_source_from_params(params) == FormLoadSource.url("u")
        del params["formUrl"]
        assert get_form_source_from_params(params).kind == SourceKind.PATH
        del params["form"]
        assert get_form_source_from_params(params).kind == SourceKind.DATA
        del params["formData"]
        assert get_form_source_from_params(params) == FormLoadSource.store("k")

    @pytest.mark.unit
    def test_import_local(self):
        """import=local maps to the staged import key."""
        assert get_form_source_from_params({"import": "local"}) == FormLoadSource.store(IMPORT_KEY)
        assert get_form_source_from_params({}) is None
