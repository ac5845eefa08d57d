"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_action_codes_path,
    get_data_dir,
    get_environment,
    get_environment_info,
    get_properties_library_path,
    get_store_dir,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("MCP_PORT", raising=False)
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 18080

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("MCP_PORT", "9999")
        result = get_environment(EnvVar.MCP_PORT, override=5000)
        assert result == 5000

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("MCP_PORT", "12345")
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 12345
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("LOADER_TIMEOUT", "2.5")
        result = get_environment(EnvVar.LOADER_TIMEOUT)
        assert result == 2.5
        assert isinstance(result, float)

    @pytest.mark.unit
    def test_bool_type_conversion_true(self, monkeypatch):
        """Boolean type conversion for true values."""
        for value in ("true", "1", "yes", "TRUE", "Yes"):
            monkeypatch.setenv("LOADER_VERIFY_TLS", value)
            assert get_environment(EnvVar.LOADER_VERIFY_TLS) is True

    @pytest.mark.unit
    def test_bool_type_conversion_false(self, monkeypatch):
        """Boolean type conversion for false values."""
        for value in ("false", "0", "no", "FALSE", "No"):
            monkeypatch.setenv("LOADER_VERIFY_TLS", value)
            assert get_environment(EnvVar.LOADER_VERIFY_TLS) is False

    @pytest.mark.unit
    def test_unrecognized_bool_returns_default(self, monkeypatch):
        """Unrecognized boolean text falls back to the default."""
        monkeypatch.setenv("LOADER_VERIFY_TLS", "maybe")
        assert get_environment(EnvVar.LOADER_VERIFY_TLS) is True

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String type returns as-is."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert get_environment(EnvVar.LOG_LEVEL) == "DEBUG"

    @pytest.mark.unit
    def test_path_type_expands_user(self, monkeypatch):
        """Path values expand a leading ~."""
        monkeypatch.setenv("ACTION_CODES_PATH", "~/codes.xml")
        result = get_environment(EnvVar.ACTION_CODES_PATH)
        assert result == Path.home() / "codes.xml"

    @pytest.mark.unit
    def test_invalid_number_returns_default(self, monkeypatch):
        """Invalid numeric values return the default."""
        monkeypatch.setenv("MCP_PORT", "not-a-number")
        monkeypatch.setenv("LOADER_TIMEOUT", "soon")
        assert get_environment(EnvVar.MCP_PORT) == 18080
        assert get_environment(EnvVar.LOADER_TIMEOUT) == 10.0


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.MCP_PORT)
        assert isinstance(info, EnvConfig)
        assert info.name == "MCP_PORT"
        assert info.default == 18080
        assert info.var_type is int
        assert info.category == "service"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        info = get_environment_info(EnvVar.PROPERTIES_LIBRARY_PATH)
        assert "properties" in info.description


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)
        assert all(isinstance(v, EnvVar) for v in result)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        storage_vars = list_environment_variables("storage")
        assert EnvVar.ACTION_CODES_PATH in storage_vars
        assert EnvVar.FORMBRIDGE_DATA_DIR in storage_vars
        assert EnvVar.MCP_PORT not in storage_vars

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        """Unknown categories match nothing."""
        assert list_environment_variables("nope") == []


# =============================================================================
# Tests for path helpers
# =============================================================================


class TestGetDataDir:
    """Tests for data directory resolution."""

    @pytest.mark.unit
    def test_override_takes_priority(self, tmp_path):
        """Override parameter takes highest priority."""
        custom_path = tmp_path / "custom_override"
        assert get_data_dir(custom_path) == custom_path

    @pytest.mark.unit
    def test_string_override(self, tmp_path):
        """Override parameter accepts string paths."""
        custom_path = tmp_path / "custom_string"
        assert get_data_dir(str(custom_path)) == custom_path

    @pytest.mark.unit
    def test_env_var_used(self, tmp_path, monkeypatch):
        """FORMBRIDGE_DATA_DIR env var used when no override."""
        env_path = tmp_path / "from_env"
        monkeypatch.setenv("FORMBRIDGE_DATA_DIR", str(env_path))
        assert get_data_dir() == env_path

    @pytest.mark.unit
    def test_default_is_home(self, monkeypatch):
        """Default is ~/.formbridge."""
        monkeypatch.delenv("FORMBRIDGE_DATA_DIR", raising=False)
        assert get_data_dir() == Path.home() / ".formbridge"


class TestDataPaths:
    """Tests for paths derived from the data directory."""

    @pytest.mark.unit
    def test_defaults_under_data_dir(self, tmp_path, monkeypatch):
        """Library files and the store live under the data directory."""
        monkeypatch.setenv("FORMBRIDGE_DATA_DIR", str(tmp_path))
        monkeypatch.delenv("FORMBRIDGE_STORE_DIR", raising=False)
        assert get_store_dir() == tmp_path / "forms"
        assert get_properties_library_path() == tmp_path / "propertiesLibrary.xml"
        assert get_action_codes_path() == tmp_path / "actionCodesLibrary.xml"

    @pytest.mark.unit
    def test_env_var_beats_data_dir(self, tmp_path, monkeypatch):
        """A specific env var wins over the data directory."""
        monkeypatch.setenv("PROPERTIES_LIBRARY_PATH", str(tmp_path / "props.xml"))
        assert get_properties_library_path() == tmp_path / "props.xml"

    @pytest.mark.unit
    def test_override_beats_env_var(self, tmp_path, monkeypatch):
        """Override takes precedence over environment variable."""
        monkeypatch.setenv("ACTION_CODES_PATH", str(tmp_path / "env.xml"))
        assert get_action_codes_path(tmp_path / "arg.xml") == tmp_path / "arg.xml"
