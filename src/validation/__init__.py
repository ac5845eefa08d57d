"""Validation module for form tree analysis."""

from .lib import Severity, ValidationIssue, is_valid, validate_form

__all__ = ["Severity", "ValidationIssue", "validate_form", "is_valid"]
