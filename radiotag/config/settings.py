"""
Configuration management for radiotag

This module handles loading, validation, and management of application settings
from YAML files and environment variables.

The configuration is organized into logical sections using dataclasses:
- Catalog API settings (endpoint, station, batch size)
- Scheduler tuning (upcoming list low-water mark, progress tick)
- Logging and console output
- Network behaviour of the catalog client

Values that identify a deployment (station id, catalog endpoint) can be
supplied via environment variables or a .env file so the same YAML file
works for several stations.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class CatalogConfig:
    """
    Station catalog API configuration

    The catalog serves station details and the list of songs coming up next.
    """
    base_url: str = "https://api.vagalume.fm/v2/"
    station_id: str = ""
    next_count: int = 20
    image_base_url: str = "https://s2.vagalume.com/"


@dataclass
class SchedulerConfig:
    """
    Metadata scheduler tuning

    low_water_mark is the size below which the upcoming list is refilled from
    the catalog; progress_interval is the position extrapolation tick in seconds.
    """
    low_water_mark: int = 5
    progress_interval: float = 1.0


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls application logging behavior including log levels, file output,
    rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings for the catalog client
    """
    user_agent: str = "radiotag/0.1"
    request_timeout: int = 30


@dataclass
class UIConfig:
    """
    Console now-playing display settings
    """
    show_progress_bar: bool = True
    upcoming_display_count: int = 5


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then overrides them with
    environment variables, and offers validation and persistence helpers.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".radiotag"

        self.catalog = CatalogConfig()
        self.scheduler = SchedulerConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()
        self.ui = UIConfig()

        # Load configuration from various sources in order of precedence
        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'catalog': self.catalog,
            'scheduler': self.scheduler,
            'logging': self.logging,
            'network': self.network,
            'ui': self.ui
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes that exist in both the config file and the dataclass
        definition are updated; unknown sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        if not isinstance(config_data, dict):
            return

        config_mapping = self._sections()
        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load deployment specific configuration from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'RADIOTAG_STATION_ID': lambda v: setattr(self.catalog, 'station_id', v),
            'RADIOTAG_CATALOG_URL': lambda v: setattr(self.catalog, 'base_url', v),
            'RADIOTAG_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_config_directory(self) -> Path:
        """Get the expanded config directory path"""
        return self.config_dir.expanduser()

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to a YAML file

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path the configuration was written to

        Raises:
            OSError: If the configuration cannot be written
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        config_data = {name: dict(section.__dict__) for name, section in self._sections().items()}

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2)
        return target

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Plain dictionary view of every section, used by `config show`"""
        return {name: dict(section.__dict__) for name, section in self._sections().items()}

    def validate(self) -> bool:
        """
        Validate current configuration

        Returns:
            True if configuration is valid, False otherwise
        """
        errors = []

        if not str(self.catalog.base_url).startswith(('http://', 'https://')):
            errors.append(f"Invalid catalog base_url: {self.catalog.base_url}")

        if not isinstance(self.catalog.next_count, int) or self.catalog.next_count < 2:
            errors.append(f"catalog.next_count must be an integer >= 2: {self.catalog.next_count}")

        if not isinstance(self.scheduler.low_water_mark, int) or self.scheduler.low_water_mark < 0:
            errors.append(f"scheduler.low_water_mark must be a non-negative integer: {self.scheduler.low_water_mark}")

        try:
            if float(self.scheduler.progress_interval) <= 0:
                errors.append(f"scheduler.progress_interval must be positive: {self.scheduler.progress_interval}")
        except (TypeError, ValueError):
            errors.append(f"scheduler.progress_interval is not a number: {self.scheduler.progress_interval}")

        if str(self.logging.level).upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append(f"Invalid logging level: {self.logging.level}")

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def __str__(self) -> str:
        sections = [
            f"Catalog: {self.catalog.base_url}",
            f"Station: {self.catalog.station_id or '-'}",
            f"Low-water: {self.scheduler.low_water_mark}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
