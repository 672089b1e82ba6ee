"""
Configuration management for the ffmpeg monitor.

This module handles loading, validating, and saving configuration from YAML files.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from rich.markup import escape

from ffmpeg_monitor.config.models import MonitorConfig
from ffmpeg_monitor.utils import ConfigurationError, get_logger

logger = get_logger(__name__)

CONFIG_ENV_VAR = "FFMPEG_MONITOR_CONFIG"
FFMPEG_PATH_ENV_VAR = "FFMPEG_PATH"


class ConfigManager:
    """Manages monitor configuration."""

    DEFAULT_CONFIG_LOCATIONS = [
        Path.home() / ".ffmpeg-monitor.yaml",
        Path.home() / ".config" / "ffmpeg-monitor" / "config.yaml",
        Path.cwd() / ".ffmpeg-monitor.yaml",
    ]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file
        """
        self.config_path = config_path
        self._config: Optional[MonitorConfig] = None

    @property
    def config(self) -> MonitorConfig:
        """
        Get current configuration, loading it if necessary.

        Raises:
            ConfigurationError: If configuration cannot be loaded
        """
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self, config_path: Optional[Path] = None) -> MonitorConfig:
        """
        Load configuration and make it current.

        Lookup order: explicit path, $FFMPEG_MONITOR_CONFIG, default locations,
        built-in defaults. $FFMPEG_PATH then overrides the executable path.

        Args:
            config_path: Optional path to configuration file

        Returns:
            Loaded MonitorConfig

        Raises:
            ConfigurationError: If an explicit or environment path is missing,
                or any file found is invalid
        """
        path = self.resolve_path(config_path)

        if path is None:
            logger.debug("No configuration file found, using defaults")
            config = MonitorConfig.create_default()
        else:
            config = self._load_from_file(path)

        executable = os.getenv(FFMPEG_PATH_ENV_VAR, "").strip()
        if executable:
            logger.debug(f"Using ffmpeg from ${FFMPEG_PATH_ENV_VAR}: {escape(executable)}")
            config.ffmpeg.path = executable

        self._config = config
        return config

    def resolve_path(self, config_path: Optional[Path] = None) -> Optional[Path]:
        """
        Find the configuration file to load.

        Returns:
            Path of the file, or None when only defaults apply

        Raises:
            ConfigurationError: If an explicit or environment path does not exist
        """
        env_value = os.getenv(CONFIG_ENV_VAR, "").strip()
        path = config_path or self.config_path or (Path(env_value).expanduser() if env_value else None)

        if path is not None:
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")
            return path

        for default_path in self.DEFAULT_CONFIG_LOCATIONS:
            if default_path.exists():
                logger.info(f"Loading configuration from {escape(str(default_path))}")
                return default_path

        return None

    def _load_from_file(self, path: Path) -> MonitorConfig:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

        if data is None:
            raise ConfigurationError(f"Configuration file is empty: {path}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {path}")

        try:
            config = MonitorConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

        logger.debug(f"Successfully loaded configuration from {escape(str(path))}")
        return config

    def save(self, path: Optional[Path] = None, config: Optional[MonitorConfig] = None) -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save configuration (uses default if None)
            config: Configuration to save (uses current if None)

        Raises:
            ConfigurationError: If configuration cannot be saved
        """
        cfg = config or self.config
        save_path = path or self.config_path or self.DEFAULT_CONFIG_LOCATIONS[0]

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            data = cfg.model_dump(mode="json")

            with open(save_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2)

            logger.info(f"Configuration saved to {escape(str(save_path))}")

        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

    def init_default_config(self, path: Optional[Path] = None, force: bool = False) -> Path:
        """
        Initialize default configuration file.

        Args:
            path: Path to create configuration file (uses default if None)
            force: Overwrite existing file

        Returns:
            Path to created configuration file

        Raises:
            ConfigurationError: If file already exists and force=False
        """
        target_path = path or self.DEFAULT_CONFIG_LOCATIONS[0]

        if target_path.exists() and not force:
            raise ConfigurationError(
                f"Configuration file already exists: {target_path}. Use force=True to overwrite."
            )

        self.save(target_path, MonitorConfig.create_default())
        return target_path

    def reload(self) -> MonitorConfig:
        """Reload configuration from file."""
        self._config = None
        return self.load()


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """
    Get global configuration manager instance.

    Args:
        config_path: Optional path to configuration file

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None:
        _config_manager = ConfigManager(config_path)

    return _config_manager


def get_config(config_path: Optional[Path] = None) -> MonitorConfig:
    """Get monitor configuration."""
    return get_config_manager(config_path).config
