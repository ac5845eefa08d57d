"""Storage module - saved forms and the exported HTML library.

Example usage:
    >>> from src.storage import FormStore
    >>> store = FormStore("~/.formbridge/forms")
    >>> store.list_keys()
    []
"""

from .lib import IMPORT_KEY, FormStore, set_form_for_import

__all__ = [
    "FormStore",
    "IMPORT_KEY",
    "set_form_for_import",
]
