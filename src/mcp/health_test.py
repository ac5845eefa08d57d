"""Unit tests for health checking module."""

import pytest

from .health import (
    HealthStatus,
    ServiceStatus,
    check_action_codes,
    check_form_store,
    check_properties_library,
    format_startup_banner,
    get_server_health,
)


class TestHealthStatus:
    """Tests for HealthStatus enum."""

    @pytest.mark.unit
    def test_status_is_string_enum(self):
        """HealthStatus inherits from str for JSON serialization."""
        assert isinstance(HealthStatus.HEALTHY, str)
        assert HealthStatus.DEGRADED == "degraded"


class TestServiceStatus:
    """Tests for ServiceStatus dataclass."""

    @pytest.mark.unit
    def test_to_dict_merges_details(self):
        """Details are flattened next to availability and message."""
        status = ServiceStatus(available=True, message="OK", details={"path": "/x"})
        assert status.to_dict() == {"available": True, "message": "OK", "path": "/x"}


class TestChecks:
    """Tests for individual dependency checks."""

    @pytest.mark.unit
    def test_properties_library_missing(self):
        """A missing properties file is unavailable."""
        result = check_properties_library()
        assert result.available is False
        assert "PROPERTIES_LIBRARY_PATH" in result.message

    @pytest.mark.unit
    def test_properties_library_loaded(self, properties_xml, monkeypatch):
        """A readable file reports its class count."""
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(properties_xml))
        result = check_properties_library()
        assert result.available is True
        assert result.details["class_count"] == 2

    @pytest.mark.unit
    def test_properties_library_malformed(self, tmp_path, monkeypatch):
        """A malformed file is unavailable with the parse error."""
        path = tmp_path / "bad.xml"
        path.write_text("<Properties>")
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(path))
        result = check_properties_library()
        assert result.available is False
        assert "Malformed" in result.message

    @pytest.mark.unit
    def test_action_codes_defaults(self):
        """Action codes are always available."""
        result = check_action_codes()
        assert result.available is True
        assert result.details == {"source": "defaults", "code_count": 9}

    @pytest.mark.unit
    def test_form_store_created(self):
        """The store directory is created on demand."""
        result = check_form_store()
        assert result.available is True
        assert result.details["form_count"] == 0


class TestServerHealth:
    """Tests for the overall health report."""

    @pytest.mark.unit
    def test_degraded_without_properties(self):
        """Missing properties library degrades the server."""
        health = get_server_health()
        assert health.status == HealthStatus.DEGRADED
        assert health.can_check_bindings is False
        assert health.to_dict()["capabilities"]["import_html"] is True

    @pytest.mark.unit
    def test_healthy_with_properties(self, properties_xml, monkeypatch):
        """All dependencies available means healthy."""
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(properties_xml))
        health = get_server_health()
        assert health.status == HealthStatus.HEALTHY
        assert set(health.to_dict()["services"]) == {
            "properties_library",
            "action_codes",
            "form_store",
        }

    @pytest.mark.unit
    def test_banner(self):
        """The banner lists services and required actions."""
        banner = format_startup_banner(get_server_health())
        assert "formbridge MCP Server" in banner
        assert "DEGRADED" in banner
        assert "PROPERTIES_LIBRARY_PATH" in banner
