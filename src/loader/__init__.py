"""Loader module - fetch forms from URLs, files, base64 data and the store.

Example usage:
    >>> from src.loader import FormLoadSource, load_form_from_source
    >>> result = load_form_from_source(FormLoadSource.path("legacy/request.html"))
    >>> result.success, result.filename
    (True, 'request.html')
"""

from .lib import (
    FormLoadResult,
    FormLoadSource,
    SourceKind,
    get_form_source_from_params,
    load_form_from_source,
    parse_form_content,
    prepare_form_data_for_import,
)

__all__ = [
    "SourceKind",
    "FormLoadSource",
    "FormLoadResult",
    "parse_form_content",
    "load_form_from_source",
    "get_form_source_from_params",
    "prepare_form_data_for_import",
]
