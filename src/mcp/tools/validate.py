"""Validate form tool for MCP server.

This tool validates form structures for errors and provides
structural statistics.
"""

import logging
from typing import Any

from src.library import LibraryError, PropertiesLibrary
from src.schema import SchemaLoadError, schema_from_dict
from src.validation import Severity
from src.validation import validate_form as run_validation

from .forms import form_stats

logger = logging.getLogger(__name__)


def _binding_lookup() -> PropertiesLibrary | None:
    """The configured properties library, if one is installed and readable."""
    library = PropertiesLibrary()
    if not library.path.exists():
        return None
    try:
        library.classes()
    except LibraryError as e:
        logger.warning(f"Skipping binding checks: {e}")
        return None
    return library


def validate_form(
    form: dict[str, Any],
    check_bindings: bool = True,
) -> dict[str, Any]:
    """Validate a form structure for errors.

    Checks for duplicate IDs, span ranges, option-less selects and radios,
    field names, numeric min/max rules and, when a properties library is
    installed, bindings unknown to the form class.

    Args:
        form: Form JSON to validate.
        check_bindings: Check bindings against the properties library.

    Returns:
        Dictionary containing:
        - valid: Boolean indicating if the form passes all checks
        - errors: List of error objects with node_id, message, issue_type
        - warnings: List of warning objects (non-blocking issues)
        - stats: Section and field counts

    Example:
        >>> result = validate_form(form)
        >>> if not result["valid"]:
        ...     for error in result["errors"]:
        ...         print(f"Error in {error['node_id']}: {error['message']}")
    """
    try:
        schema = schema_from_dict(form)
    except SchemaLoadError as e:
        return {
            "valid": False,
            "errors": [{"node_id": "form", "message": str(e), "issue_type": "schema_validation"}],
            "warnings": [],
            "stats": {},
        }

    lookup = _binding_lookup() if check_bindings else None
    errors: list[dict[str, str]] = []
    warnings: list[dict[str, str]] = []
    for issue in run_validation(schema, lookup):
        entry = {"node_id": issue.node_id, "message": issue.message, "issue_type": issue.issue_type}
        (warnings if issue.severity == Severity.WARNING else errors).append(entry)

    return {
        "valid": not errors,
        "errors": errors,
        "warnings": warnings,
        "stats": form_stats(schema),
    }


__all__ = ["validate_form"]
