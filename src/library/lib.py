"""EDMS properties library and action code library.

Both libraries are read-only lookup services backed by XML files. They load
lazily on first access and only re-read their file on `reload()`.

Properties library format:
    ```xml
    <Properties>
      <Class name="Correspondence">
        <property name="subject" label="Subject" />
      </Class>
    </Properties>
    ```

Action codes library format:
    ```xml
    <actionCodes>
      <actionCode value="CRE" label="CRE" description="Creation" />
    </actionCodes>
    ```
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from src.config import get_action_codes_path, get_properties_library_path

logger = logging.getLogger(__name__)

UNKNOWN_CLASS = "UnknownClass"

MAX_ACTION_CODE_LENGTH = 10

_ACTION_CODE_RE = re.compile(r"^[A-Z0-9]+$")


class LibraryError(RuntimeError):
    """Raised when a library file exists but cannot be parsed."""


# =============================================================================
# Properties library
# =============================================================================


class PropertyDefinition(BaseModel):
    """One bindable property of an EDMS class."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str


class ClassProperties(BaseModel):
    """An EDMS class and the properties a form of that class can bind."""

    model_config = ConfigDict(frozen=True)

    name: str
    properties: list[PropertyDefinition] = Field(default_factory=list)


class PropertiesLibrary:
    """Lookup of EDMS classes and their properties.

    A missing file is an empty library. A file that exists but is not well
    formed XML raises LibraryError on first access.

    Example:
        >>> library = PropertiesLibrary("propertiesLibrary.xml")
        >>> "subject" in library.property_names("Correspondence")
        True
    """

    def __init__(self, path: Path | str | None = None):
        self.path = get_properties_library_path(path)
        self._classes: list[ClassProperties] | None = None

    def classes(self) -> list[ClassProperties]:
        """All classes in file order."""
        if self._classes is None:
            self._classes = self._load()
        return self._classes

    def class_names(self) -> list[str]:
        return [c.name for c in self.classes()]

    def properties_for(self, class_name: str) -> list[PropertyDefinition]:
        """Properties of a class; empty for an unknown class."""
        for entry in self.classes():
            if entry.name == class_name:
                return entry.properties
        return []

    def property_names(self, class_name: str) -> set[str]:
        return {p.name for p in self.properties_for(class_name)}

    def reload(self) -> list[ClassProperties]:
        """Drop the cached classes and re-read the file."""
        self._classes = None
        return self.classes()

    def _load(self) -> list[ClassProperties]:
        if not self.path.exists():
            logger.warning(f"Properties library not found: {self.path}")
            return []

        try:
            root = ET.parse(self.path).getroot()
        except ET.ParseError as e:
            raise LibraryError(f"Malformed properties library {self.path}: {e}") from e

        classes = [_parse_class(node) for node in root.iter("Class")]
        logger.debug(f"Loaded {len(classes)} classes from {self.path}")
        return classes


def _parse_class(node: ET.Element) -> ClassProperties:
    properties = [
        PropertyDefinition(
            name=prop.get("name") or "",
            label=prop.get("label") or prop.get("name") or "",
        )
        for prop in node.iter("property")
    ]
    return ClassProperties(name=node.get("name") or UNKNOWN_CLASS, properties=properties)


# =============================================================================
# Action codes library
# =============================================================================


class ActionCode(BaseModel):
    """An EDMS action code such as CRE (creation) or AMD (amendment)."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    description: str = ""


DEFAULT_ACTION_CODES: tuple[ActionCode, ...] = tuple(
    ActionCode(value=value, label=value, description=description)
    for value, description in (
        ("AMD", "Amendment"),
        ("CI", "Check in"),
        ("CO", "Check out"),
        ("CPY", "Copy"),
        ("CRE", "Creation"),
        ("DF", "Details"),
        ("QRY", "Query"),
        ("REC", "Re-categorize"),
        ("SAS", "Save document"),
    )
)


def _sorted_codes(codes: list[ActionCode] | tuple[ActionCode, ...]) -> list[ActionCode]:
    return sorted(codes, key=lambda code: code.value)


class ActionCodeLibrary:
    """Action codes sorted by value.

    Falls back to the built-in defaults whenever the file is missing, holds
    no usable entries, or is not well formed XML.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = get_action_codes_path(path)
        self._codes: list[ActionCode] | None = None

    def codes(self) -> list[ActionCode]:
        if self._codes is None:
            self._codes = _sorted_codes(self._load())
        return self._codes

    def values(self) -> list[str]:
        return [code.value for code in self.codes()]

    def reload(self) -> list[ActionCode]:
        """Drop the cached codes and re-read the file."""
        self._codes = None
        return self.codes()

    def save(self, codes: list[ActionCode]) -> Path:
        """Write `codes` to the library file, sorted by value.

        Returns:
            Path: The written file.
        """
        ordered = _sorted_codes(codes)
        root = ET.Element("actionCodes")
        for code in ordered:
            ET.SubElement(
                root,
                "actionCode",
                value=code.value,
                label=code.label,
                description=code.description,
            )
        ET.indent(root)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        ET.ElementTree(root).write(self.path, encoding="utf-8", xml_declaration=True)
        self._codes = ordered
        logger.info(f"Saved {len(ordered)} action codes to {self.path}")
        return self.path

    def reset(self) -> list[ActionCode]:
        """Remove the library file and return to the default codes."""
        self.path.unlink(missing_ok=True)
        self._codes = _sorted_codes(DEFAULT_ACTION_CODES)
        return self._codes

    def _load(self) -> list[ActionCode]:
        if not self.path.exists():
            logger.warning(f"Action codes library not found: {self.path}, using defaults")
            return list(DEFAULT_ACTION_CODES)

        try:
            root = ET.parse(self.path).getroot()
        except ET.ParseError as e:
            logger.warning(f"Malformed action codes library {self.path}: {e}, using defaults")
            return list(DEFAULT_ACTION_CODES)

        codes = [
            ActionCode(
                value=node.get("value"),
                label=node.get("label"),
                description=node.get("description") or "",
            )
            for node in root.iter("actionCode")
            if node.get("value") and node.get("label")
        ]
        if not codes:
            logger.warning(f"No action codes in {self.path}, using defaults")
            return list(DEFAULT_ACTION_CODES)
        return codes


def validate_action_code(code: str, existing: list[ActionCode]) -> str | None:
    """Check a new action code.

    Args:
        code: Candidate code.
        existing: Codes already in the library.

    Returns:
        The first problem found as a user-facing message, or None if the
        code is acceptable.
    """
    if not code.strip():
        return "Action code cannot be empty"
    if code != code.upper():
        return "Action code must be all uppercase"
    if re.search(r"\s", code):
        return "Action code cannot contain spaces"
    if not _ACTION_CODE_RE.match(code):
        return "Action code can only contain uppercase letters and numbers"
    if len(code) > MAX_ACTION_CODE_LENGTH:
        return f"Action code cannot exceed {MAX_ACTION_CODE_LENGTH} characters"
    if any(item.value == code for item in existing):
        return "Action code already exists"
    return None


__all__ = [
    "LibraryError",
    "PropertyDefinition",
    "ClassProperties",
    "PropertiesLibrary",
    "ActionCode",
    "DEFAULT_ACTION_CODES",
    "ActionCodeLibrary",
    "validate_action_code",
]
