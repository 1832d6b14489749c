"""
Configuration management for the telemetry pipeline and its collection server.
Handles loading, validating, and providing access to settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class TelemetryConfig:
    """Telemetry pipeline settings."""
    environment: str = "development"
    endpoint: str = "http://localhost:22582/api/analytics"
    window_size: int = 100
    request_timeout: Optional[float] = None
    anonymous_id_key: str = "anonymous_id"
    storage_file: Optional[str] = "telemetry_storage.json"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@dataclass
class AppConfig:
    """Collection server settings."""
    host: str
    port: int
    debug: bool


@dataclass
class PathsConfig:
    """Path configuration settings."""
    data_dir: str


class ConfigManager:
    """Manages configuration loading and access."""

    def __init__(self, config_file: str = "telemetry_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "telemetry": {
                "environment": "development",
                "endpoint": "http://localhost:22582/api/analytics",
                "window_size": 100,
                "request_timeout": None,
                "anonymous_id_key": "anonymous_id",
                "storage_file": "telemetry_storage.json"
            },
            "app": {
                "host": "0.0.0.0",
                "port": 22582,
                "debug": False
            },
            "paths": {
                "data_dir": "telemetry_data"
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # Telemetry settings
        if os.getenv("TELEMETRY_ENV"):
            self._config["telemetry"]["environment"] = os.getenv("TELEMETRY_ENV").lower()

        if os.getenv("TELEMETRY_ENDPOINT"):
            self._config["telemetry"]["endpoint"] = os.getenv("TELEMETRY_ENDPOINT")

        if os.getenv("TELEMETRY_WINDOW_SIZE"):
            self._config["telemetry"]["window_size"] = int(os.getenv("TELEMETRY_WINDOW_SIZE"))

        if os.getenv("TELEMETRY_REQUEST_TIMEOUT"):
            self._config["telemetry"]["request_timeout"] = float(os.getenv("TELEMETRY_REQUEST_TIMEOUT"))

        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        # Paths
        if os.getenv("TELEMETRY_DATA_DIR"):
            self._config["paths"]["data_dir"] = os.getenv("TELEMETRY_DATA_DIR")

    def get_telemetry_config(self) -> TelemetryConfig:
        """Get telemetry pipeline configuration."""
        telemetry_config = self._config["telemetry"]
        return TelemetryConfig(
            environment=telemetry_config["environment"],
            endpoint=telemetry_config["endpoint"],
            window_size=telemetry_config["window_size"],
            request_timeout=telemetry_config["request_timeout"],
            anonymous_id_key=telemetry_config["anonymous_id_key"],
            storage_file=telemetry_config["storage_file"]
        )

    def get_app_config(self) -> AppConfig:
        """Get collection server configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"]
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(
            data_dir=paths_config["data_dir"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_telemetry_config() -> TelemetryConfig:
    """Get telemetry pipeline configuration."""
    return config_manager.get_telemetry_config()


def get_app_config() -> AppConfig:
    """Get collection server configuration."""
    return config_manager.get_app_config()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
