"""Directory backed store for saved forms.

Layout under the store root:
    ```
    <root>/
      Change_Request_AMD.json   # saved schemas, one per key
      html/
        Correspondence_CRE.html # exported forms library
    ```

Keys are file stems. Saved schemas use the same camelCase JSON as the
browser builder, so files can be moved between the two.
"""

import logging
from pathlib import Path

from src.exporter import schema_filename
from src.schema import FormSchema, schema_from_json, schema_to_json

logger = logging.getLogger(__name__)

SCHEMA_SUFFIX = ".json"
HTML_DIR = "html"

# Key the loader reads for `import=local`
IMPORT_KEY = "fusionforms_import"


def _check_name(name: str) -> str:
    """Reject empty names and names that would escape the store root."""
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"Invalid store name: {name!r}")
    return name


class FormStore:
    """Saved form schemas and exported HTML in a directory.

    Example:
        >>> store = FormStore(tmp_path)
        >>> path = store.save(form)
        >>> store.load(path.stem) == form
        True
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    @property
    def html_root(self) -> Path:
        return self.root / HTML_DIR

    def _schema_path(self, key: str) -> Path:
        key = _check_name(key)
        if key.endswith(SCHEMA_SUFFIX):
            key = key[: -len(SCHEMA_SUFFIX)]
        return self.root / f"{key}{SCHEMA_SUFFIX}"

    # =========================================================================
    # Schemas
    # =========================================================================

    def save(self, schema: FormSchema, key: str | None = None) -> Path:
        """Write a form as JSON.

        Args:
            schema: Form to save.
            key: Store key. Defaults to the form's file name stem
                (`Change_Request_AMD` for "Change Request" / AMD).

        Returns:
            Path: The written file.
        """
        path = self._schema_path(key or schema_filename(schema))
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_text(schema_to_json(schema), encoding="utf-8")
        logger.debug(f"Saved form '{schema.name}' to {path}")
        return path

    def load(self, key: str) -> FormSchema:
        """Read a saved form.

        Raises:
            KeyError: If nothing is stored under `key`.
            SchemaLoadError: If the stored file is not a valid form.
        """
        path = self._schema_path(key)
        if not path.exists():
            raise KeyError(key)
        return schema_from_json(path.read_text(encoding="utf-8"))

    def load_text(self, key: str) -> str | None:
        """Raw stored JSON text, or None if nothing is stored under `key`."""
        path = self._schema_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def exists(self, key: str) -> bool:
        return self._schema_path(key).exists()

    def delete(self, key: str) -> bool:
        """Remove a saved form. Returns False if it did not exist."""
        path = self._schema_path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_keys(self) -> list[str]:
        """Keys of all saved forms, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob(f"*{SCHEMA_SUFFIX}") if p.is_file())

    # =========================================================================
    # Exported HTML (forms library)
    # =========================================================================

    def save_html(self, filename: str, html: str) -> Path:
        """Store exported HTML under `filename` in the forms library."""
        path = self.html_root / _check_name(filename)
        self.html_root.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        logger.debug(f"Saved HTML to {path}")
        return path

    def load_html(self, filename: str) -> str | None:
        """Stored HTML for `filename`, or None."""
        path = self.html_root / _check_name(filename)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def list_html(self) -> list[str]:
        if not self.html_root.is_dir():
            return []
        return sorted(p.name for p in self.html_root.iterdir() if p.is_file())


def set_form_for_import(store: FormStore, schema: FormSchema, key: str = IMPORT_KEY) -> Path:
    """Stage a form for another tool to pick up with `import=local`."""
    return store.save(schema, key)


__all__ = [
    "FormStore",
    "IMPORT_KEY",
    "set_form_for_import",
]
