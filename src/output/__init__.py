"""Output generation module for form visualization.

Provides human-readable text representation of forms
and utilities for formatting review displays.
"""

from src.output.lib import FormOutput, OutputGenerator, format_form_tree

__all__ = [
    "format_form_tree",
    "FormOutput",
    "OutputGenerator",
]
