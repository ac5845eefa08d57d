"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Isolation of configuration from the developer's environment
- Sample legacy HTML documents and form schemas shared across modules
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from src.schema import FormSchema

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Sample Documents
# =============================================================================

LEGACY_FORM_HTML = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>Change Request</title></head>
<body>
<h1>Change Request</h1>
<p class="intro">Fill in every field.</p>
<table border="1" cellpadding="6" cellspacing="0">
  <tr class="header-row">
    <td><label for="applicant">Applicant</label></td>
    <td><input type="text" id="applicant" name="applicant" value="${applicantName}" class="wide"></td>
  </tr>
  <tr>
    <td>Amount</td>
    <td><input type="number" name="amount" value="12"></td>
  </tr>
  <tr>
    <td colspan="2">
      <label>Kind
        <select name="kind">
          <option value="a">Alpha</option>
          <option value="b" selected>Beta</option>
        </select>
      </label>
    </td>
  </tr>
  <tr>
    <td rowspan="2">Notes</td>
    <td><textarea name="notes">${remarks}</textarea></td>
  </tr>
</table>
</body>
</html>
"""

INTERLEAVED_FORM_HTML = """<table border="0">
<tr><td><p>Intro</p><input name="top"><table id="t1"><tr><td><input name="inner1"></td></tr></table><p>Between</p><table id="t2"><tr><td><input name="inner2"></td></tr></table><p>Outro</p></td></tr>
</table>"""

STACK_FORM_HTML = """<html><body>
<h2>Contact</h2>
<label for="first">First name</label><input id="first" name="first_name">
<label>Email <input type="email" name="email"></label>
<br><input type="checkbox" name="subscribe">
</body></html>"""


@pytest.fixture
def legacy_form_html() -> str:
    """A table based legacy form with bindings, spans and a nested label."""
    return LEGACY_FORM_HTML


@pytest.fixture
def interleaved_form_html() -> str:
    """A single cell interleaving static text with two nested tables."""
    return INTERLEAVED_FORM_HTML


@pytest.fixture
def stack_form_html() -> str:
    """A table-free form that imports as a stack section."""
    return STACK_FORM_HTML


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def sample_form() -> FormSchema:
    """Create a small authored form for testing.

    Returns:
        A form with one table section (two cells) and one stack section.
    """
    from src.builder import create_empty_form, create_empty_section, create_table_section

    form = create_empty_form("Sample")
    return form.model_copy(
        update={
            "form_class": "Correspondence",
            "sections": [create_table_section("Grid", 2), create_empty_section("Notes")],
        }
    )


@pytest.fixture
def properties_xml(tmp_path: Path) -> Path:
    """Write a small EDMS properties library file.

    Returns:
        Path to the XML file.
    """
    path = tmp_path / "properties.xml"
    path.write_text(
        """<?xml version="1.0" encoding="UTF-8"?>
<Properties>
  <Class name="Correspondence">
    <property name="subject" label="Subject"/>
    <property name="applicantName" label="Applicant name"/>
  </Class>
  <Class name="Invoice">
    <property name="amount" label="Amount"/>
  </Class>
</Properties>
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Point every configured path at a per-test temporary directory."""
    monkeypatch.setenv("FORMBRIDGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("FORMBRIDGE_STORE_DIR", str(tmp_path / "store"))
    monkeypatch.delenv("PROPERTIES_LIBRARY_PATH", raising=False)
    monkeypatch.delenv("ACTION_CODES_PATH", raising=False)
