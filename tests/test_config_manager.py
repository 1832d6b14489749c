"""
Test cases for the configuration management system.
Tests config loading, environment overrides, and access functionality.
"""

import os
import json
from unittest.mock import patch, mock_open
import pytest

from config_manager import (
    ConfigManager,
    TelemetryConfig,
    AppConfig,
    PathsConfig,
)


@pytest.fixture
def clean_env():
    """Run without any TELEMETRY_/APP_ variables from the host."""
    with patch.dict(os.environ, {}, clear=True):
        yield


class TestConfigManager:
    """Test the ConfigManager class functionality."""

    def test_defaults_when_file_missing(self, tmp_path, clean_env):
        """Missing config file loads the default sections."""
        manager = ConfigManager(str(tmp_path / "missing.json"))

        assert set(manager._config) == {"telemetry", "app", "paths"}
        assert manager.get_telemetry_config() == TelemetryConfig()
        assert manager.get_app_config().port == 22582
        assert manager.get_paths_config().data_dir == "telemetry_data"

    def test_load_config_from_file(self, tmp_path, clean_env):
        """File values are merged over the defaults section by section."""
        config_file = tmp_path / "telemetry_config.json"
        config_file.write_text(json.dumps({
            "telemetry": {"environment": "production", "window_size": 20},
            "app": {"port": 9000},
        }))

        manager = ConfigManager(str(config_file))
        telemetry = manager.get_telemetry_config()

        assert telemetry.environment == "production"
        assert telemetry.window_size == 20
        # untouched keys keep their defaults
        assert telemetry.endpoint == "http://localhost:22582/api/analytics"
        assert manager.get_app_config().host == "0.0.0.0"
        assert manager.get_app_config().port == 9000

    def test_invalid_json_keeps_defaults(self, clean_env):
        """A corrupt file is ignored."""
        with patch('builtins.open', mock_open(read_data="{not json")):
            with patch('config_manager.Path') as mock_path:
                mock_path.return_value.exists.return_value = True
                manager = ConfigManager()

        assert manager.get_telemetry_config().environment == "development"

    def test_override_with_env_variables(self, tmp_path):
        """Environment variables override file values."""
        config_file = tmp_path / "telemetry_config.json"
        config_file.write_text(json.dumps({"telemetry": {"environment": "staging"}}))

        env_vars = {
            "TELEMETRY_ENV": "Production",
            "TELEMETRY_ENDPOINT": "https://collector.example/api/analytics",
            "TELEMETRY_WINDOW_SIZE": "50",
            "TELEMETRY_REQUEST_TIMEOUT": "2.5",
            "APP_HOST": "localhost",
            "APP_PORT": "8080",
            "APP_DEBUG": "true",
            "TELEMETRY_DATA_DIR": "/var/lib/telemetry",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            manager = ConfigManager(str(config_file))

        telemetry = manager.get_telemetry_config()
        assert telemetry.environment == "production"
        assert telemetry.is_production
        assert telemetry.endpoint == "https://collector.example/api/analytics"
        assert telemetry.window_size == 50
        assert telemetry.request_timeout == 2.5

        app_config = manager.get_app_config()
        assert isinstance(app_config, AppConfig)
        assert (app_config.host, app_config.port, app_config.debug) == ("localhost", 8080, True)

        paths_config = manager.get_paths_config()
        assert isinstance(paths_config, PathsConfig)
        assert paths_config.data_dir == "/var/lib/telemetry"

    def test_save_and_reload(self, tmp_path, clean_env):
        """Saved configuration is picked up on reload."""
        config_file = tmp_path / "telemetry_config.json"
        manager = ConfigManager(str(config_file))

        manager._config["telemetry"]["window_size"] = 7
        manager.save_config()
        manager._config["telemetry"]["window_size"] = 999
        manager.reload()

        assert manager.get_telemetry_config().window_size == 7
        assert json.loads(config_file.read_text())["telemetry"]["window_size"] == 7

    def test_get_config_returns_copy(self, tmp_path, clean_env):
        """Test that the raw config is returned as a copy."""
        manager = ConfigManager(str(tmp_path / "missing.json"))
        config = manager.get_config()
        config["extra"] = True

        assert "extra" not in manager._config


class TestTelemetryConfig:
    """Test the TelemetryConfig dataclass."""

    @pytest.mark.parametrize("environment, expected", [
        ("production", True),
        ("development", False),
        ("test", False),
    ])
    def test_is_production(self, environment, expected):
        """Test production detection."""
        assert TelemetryConfig(environment=environment).is_production is expected
