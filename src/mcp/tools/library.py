"""Properties and action code library tools for MCP server."""

from typing import Any

from src.library import ActionCodeLibrary, PropertiesLibrary


def list_action_codes() -> dict[str, Any]:
    """List the action codes forms can declare.

    Returns:
        Dictionary with the codes (value, label, description) sorted by
        value and the library file they came from.
    """
    library = ActionCodeLibrary()
    return {
        "codes": [code.model_dump() for code in library.codes()],
        "source": str(library.path) if library.path.exists() else "defaults",
    }


def list_classes(class_name: str | None = None) -> dict[str, Any]:
    """List EDMS classes and their bindable properties.

    Args:
        class_name: Only return this class.

    Returns:
        Dictionary with the classes and the library path.
    """
    library = PropertiesLibrary()
    classes = library.classes()
    if class_name is not None:
        classes = [c for c in classes if c.name == class_name]
        if not classes:
            raise ValueError(f"Unknown class '{class_name}'. Known: {library.class_names()}")
    return {
        "classes": [c.model_dump() for c in classes],
        "path": str(library.path),
    }


__all__ = ["list_action_codes", "list_classes"]
