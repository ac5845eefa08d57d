"""Form loading from URLs, files, base64 payloads and the local store.

Other tools hand forms over by link parameters:

    ?formUrl=https://host/forms/Invoice_CRE.html   -> url
    ?form=forms/Invoice_CRE.html                   -> path (forms library)
    ?formData=<base64 JSON>                        -> data
    ?import=local                                  -> store key fusionforms_import

Loading never raises. Every failure comes back as a FormLoadResult with
`success=False` and a message suitable for showing to a user.
"""

import base64
import binascii
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

import httpx

from src.config import EnvVar, get_environment, get_store_dir
from src.importer import parse_html_to_schema
from src.schema import FormSchema, SchemaLoadError, schema_from_json, schema_to_json
from src.storage import IMPORT_KEY, FormStore

logger = logging.getLogger(__name__)

FORMS_LIBRARY_PREFIX = "forms/"

# Markers that make HTML content worth importing
FORM_CONTROL_MARKERS = ("<form", "<input", "<textarea", "<select")
LEGACY_FORM_MARKERS = ("<form", "<input", "<table")

_SUFFIX_CONTENT_TYPES = {
    ".json": "application/json",
    ".html": "text/html",
    ".htm": "text/html",
}


class SourceKind(str, Enum):
    """Where a form comes from."""

    URL = "url"
    PATH = "path"
    DATA = "data"
    STORE = "store"


@dataclass(frozen=True)
class FormLoadSource:
    """A form location.

    Attributes:
        kind: Source kind.
        value: URL, path, base64 payload or store key, depending on `kind`.
    """

    kind: SourceKind
    value: str

    @classmethod
    def url(cls, url: str) -> "FormLoadSource":
        return cls(SourceKind.URL, url)

    @classmethod
    def path(cls, path: str) -> "FormLoadSource":
        return cls(SourceKind.PATH, path)

    @classmethod
    def data(cls, base64_data: str) -> "FormLoadSource":
        return cls(SourceKind.DATA, base64_data)

    @classmethod
    def store(cls, key: str) -> "FormLoadSource":
        return cls(SourceKind.STORE, key)


@dataclass(frozen=True)
class FormLoadResult:
    """Outcome of a load.

    Attributes:
        success: Whether a schema was produced.
        schema: The loaded form when successful.
        error: Human-readable failure message.
        filename: File name of the source, when it has one.
    """

    success: bool
    schema: FormSchema | None = None
    error: str | None = None
    filename: str | None = None

    @classmethod
    def failure(cls, error: str) -> "FormLoadResult":
        return cls(success=False, error=error)


# =============================================================================
# Content parsing
# =============================================================================


def parse_form_content(content: str, content_type: str, source: str) -> FormLoadResult:
    """Turn fetched text into a form.

    JSON is recognised by content type or a leading `{`; HTML by content
    type, a leading `<` or an `<html` tag, and must contain form controls.

    Args:
        content: Raw text.
        content_type: Content type reported by the source (may be empty).
        source: Where the text came from; names HTML imports.

    Returns:
        FormLoadResult: Parsed form or failure.
    """
    stripped = content.strip()
    lowered = content.lower()
    content_type = content_type.lower()

    if "json" in content_type or stripped.startswith("{"):
        try:
            return FormLoadResult(success=True, schema=schema_from_json(content))
        except SchemaLoadError as e:
            return FormLoadResult.failure(str(e))

    if "html" in content_type or stripped.startswith("<") or "<html" in lowered:
        if not any(marker in lowered for marker in FORM_CONTROL_MARKERS):
            return FormLoadResult.failure("HTML content does not contain form elements")
        return FormLoadResult(success=True, schema=parse_html_to_schema(content, source))

    # Legacy forms served without a usable content type
    if any(marker in lowered for marker in LEGACY_FORM_MARKERS):
        return FormLoadResult(success=True, schema=parse_html_to_schema(content, source))

    return FormLoadResult.failure("Unrecognized form format. Expected JSON schema or HTML form.")


# =============================================================================
# Sources
# =============================================================================


def _url_filename(url: str) -> str | None:
    name = urlparse(url).path.rsplit("/", 1)[-1]
    return name or None


def _load_url(url: str, client: httpx.Client | None) -> FormLoadResult:
    owns_client = client is None
    if client is None:
        client = httpx.Client(
            timeout=get_environment(EnvVar.LOADER_TIMEOUT),
            verify=get_environment(EnvVar.LOADER_VERIFY_TLS),
            follow_redirects=True,
        )
    try:
        response = client.get(url)
    except httpx.HTTPError as e:
        return FormLoadResult.failure(f"Network error loading form: {e}")
    finally:
        if owns_client:
            client.close()

    if not response.is_success:
        return FormLoadResult.failure(
            f"Failed to fetch form: {response.status_code} {response.reason_phrase}"
        )

    content_type = response.headers.get("content-type", "")
    result = parse_form_content(response.text, content_type, url)
    if not result.success:
        return result
    return FormLoadResult(success=True, schema=result.schema, filename=_url_filename(url))


def _load_library_form(filename: str, store: FormStore) -> FormLoadResult:
    html = store.load_html(filename)
    if html is None:
        return FormLoadResult.failure(
            f'Form "{filename}" not found in the forms library ({store.html_root}).'
        )
    result = parse_form_content(html, "text/html", filename)
    if not result.success:
        return result
    return FormLoadResult(success=True, schema=result.schema, filename=filename)


def _load_path(
    path: str, store: FormStore, client: httpx.Client | None
) -> FormLoadResult:
    if path.startswith(FORMS_LIBRARY_PREFIX):
        return _load_library_form(path[len(FORMS_LIBRARY_PREFIX) :], store)

    if path.startswith(("http://", "https://")):
        return _load_url(path, client)

    file_path = Path(path).expanduser()
    if not file_path.is_file():
        return FormLoadResult.failure(f"File not found: {file_path}")

    content_type = _SUFFIX_CONTENT_TYPES.get(file_path.suffix.lower(), "")
    result = parse_form_content(file_path.read_text(encoding="utf-8"), content_type, file_path.stem)
    if not result.success:
        return result
    return FormLoadResult(success=True, schema=result.schema, filename=file_path.name)


def _load_data(base64_data: str) -> FormLoadResult:
    try:
        decoded = base64.b64decode(base64_data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        return FormLoadResult.failure(f"Failed to decode base64 data: {e}")
    return parse_form_content(decoded, "application/json", "base64 data")


def _load_store(key: str, store: FormStore) -> FormLoadResult:
    text = store.load_text(key)
    if text is None:
        return FormLoadResult.failure(f"No data found in store for key: {key}")
    return parse_form_content(text, "application/json", "store")


def load_form_from_source(
    source: FormLoadSource,
    *,
    store: FormStore | None = None,
    client: httpx.Client | None = None,
) -> FormLoadResult:
    """Load a form from any supported source.

    Args:
        source: Where to load from.
        store: Local store for `forms/...` paths and store keys. Defaults to
            the configured store directory.
        client: HTTP client for URLs. A short-lived client using the
            configured timeout is created when omitted.

    Returns:
        FormLoadResult: Never raises; failures carry an error message.
    """
    store = store or FormStore(get_store_dir())
    try:
        if source.kind == SourceKind.URL:
            result = _load_url(source.value, client)
        elif source.kind == SourceKind.PATH:
            result = _load_path(source.value, store, client)
        elif source.kind == SourceKind.DATA:
            result = _load_data(source.value)
        elif source.kind == SourceKind.STORE:
            result = _load_store(source.value, store)
        else:
            result = FormLoadResult.failure("Unknown source type")
    except Exception as e:
        logger.exception(f"Unexpected error loading form from {source.kind.value}")
        result = FormLoadResult.failure(f"Error loading form: {e}")

    if not result.success:
        logger.warning(f"Form load from {source.kind.value} failed: {result.error}")
    return result


# =============================================================================
# Hand-over helpers
# =============================================================================


def get_form_source_from_params(params: Mapping[str, str]) -> FormLoadSource | None:
    """Pick the load source from link parameters.

    Priority: formUrl, form, formData, import. `import=local` means the
    staged import key.
    """
    if params.get("formUrl"):
        return FormLoadSource.url(params["formUrl"])
    if params.get("form"):
        return FormLoadSource.path(params["form"])
    if params.get("formData"):
        return FormLoadSource.data(params["formData"])

    import_key = params.get("import")
    if import_key == "local":
        return FormLoadSource.store(IMPORT_KEY)
    if import_key:
        return FormLoadSource.store(import_key)
    return None


def prepare_form_data_for_import(schema: FormSchema) -> str:
    """Encode a form as base64 JSON for a `formData` parameter."""
    return base64.b64encode(schema_to_json(schema, indent=None).encode("utf-8")).decode("ascii")


__all__ = [
    "SourceKind",
    "FormLoadSource",
    "FormLoadResult",
    "parse_form_content",
    "load_form_from_source",
    "get_form_source_from_params",
    "prepare_form_data_for_import",
]
