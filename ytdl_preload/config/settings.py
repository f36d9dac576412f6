"""
Configuration management for ytdl-preload

This module handles loading, validation, and management of application settings
from YAML files and environment variables. Every value has a safe default so the
preloader can start with no configuration at all.

The configuration is organized into logical sections using dataclasses:
- Preload behavior (cache directory, format selector, lookahead, trusted domains)
- yt-dlp invocation (executable override)
- mpv connection (IPC socket, OSD duration, command timeout)
- Logging output
"""

import os
import tempfile
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


DEFAULT_PRELOAD_LIMIT = 5

DEFAULT_TRUSTED_DOMAINS = [
    "onedrive.live.com",
    "sharepoint.com",
    "1drv.ms",
]


def _default_cache_directory() -> str:
    return str(Path(tempfile.gettempdir()) / "ytdl-preload")


@dataclass
class PreloadConfig:
    """
    Preload behavior settings

    Controls where cached files are written, how many upcoming playlist
    entries are kept downloaded, and which yt-dlp options every fetch uses.
    """
    temp: str = field(default_factory=_default_cache_directory)
    format: str = "bestvideo+bestaudio/best"
    ytdl_opt1: str = ""
    ytdl_opt2: str = ""
    preload_limit: int = DEFAULT_PRELOAD_LIMIT
    extension: str = "mkv"
    trusted_domains: list = field(default_factory=lambda: list(DEFAULT_TRUSTED_DOMAINS))
    cleanup_on_shutdown: bool = True


@dataclass
class FetcherConfig:
    """
    yt-dlp invocation settings

    An empty executable runs the yt-dlp module installed alongside this
    package with the current interpreter.
    """
    executable: str = ""


@dataclass
class PlayerConfig:
    """mpv JSON IPC connection settings"""
    socket: str = "/tmp/mpvsocket"
    osd_duration_ms: int = 3000
    command_timeout: float = 5.0


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls log level, optional rotating log file, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then applies environment
    variable overrides, then clamps values that would break the preloader.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".ytdl-preload"
        self.loaded_from: Optional[Path] = None

        self.preload = PreloadConfig()
        self.fetcher = FetcherConfig()
        self.player = PlayerConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_environment_variables()
        self._apply_safe_defaults()

    def _sections(self) -> Dict[str, Any]:
        return {
            'preload': self.preload,
            'fetcher': self.fetcher,
            'player': self.player,
            'logging': self.logging,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in order of precedence. The first
        readable file wins; a broken file is reported and skipped.
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
                    self.loaded_from = Path(path)
                    break
                except (OSError, yaml.YAMLError) as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        if not isinstance(config_data, dict):
            print(f"Warning: Ignoring config from {self.loaded_from}: top level is not a mapping")
            config_data = {}

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes that exist on the target dataclass are updated;
        unknown sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load overrides from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'YTDL_PRELOAD_TEMP': lambda v: setattr(self.preload, 'temp', v),
            'YTDL_PRELOAD_FORMAT': lambda v: setattr(self.preload, 'format', v),
            'YTDL_PRELOAD_LIMIT': lambda v: setattr(self.preload, 'preload_limit', v),
            'YTDL_PRELOAD_SOCKET': lambda v: setattr(self.player, 'socket', v),
            'YTDL_PRELOAD_YTDLP': lambda v: setattr(self.fetcher, 'executable', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def _apply_safe_defaults(self) -> None:
        """
        Replace missing or unusable values with defaults

        Configuration absence must never stop the preloader, so values that
        cannot be interpreted fall back instead of raising.
        """
        try:
            limit = int(self.preload.preload_limit)
        except (TypeError, ValueError):
            limit = DEFAULT_PRELOAD_LIMIT
        self.preload.preload_limit = limit if limit >= 1 else DEFAULT_PRELOAD_LIMIT

        if not self.preload.temp:
            self.preload.temp = _default_cache_directory()
        if not self.preload.format:
            self.preload.format = PreloadConfig.format
        if not self.preload.extension:
            self.preload.extension = PreloadConfig.extension
        self.preload.extension = str(self.preload.extension).lstrip('.')

        if self.preload.trusted_domains is None:
            self.preload.trusted_domains = list(DEFAULT_TRUSTED_DOMAINS)
        elif isinstance(self.preload.trusted_domains, str):
            self.preload.trusted_domains = [self.preload.trusted_domains]

        self.preload.ytdl_opt1 = self.preload.ytdl_opt1 or ""
        self.preload.ytdl_opt2 = self.preload.ytdl_opt2 or ""

        try:
            self.player.command_timeout = float(self.player.command_timeout)
        except (TypeError, ValueError):
            self.player.command_timeout = PlayerConfig.command_timeout

    def get_cache_directory(self) -> Path:
        """
        Get the expanded, absolute cache directory path

        mpv resolves loadfile paths against its own working directory, so a
        relative setting is anchored to ours here.

        Returns:
            Path object for the preload cache directory
        """
        return Path(self.preload.temp).expanduser().absolute()

    def get_config_directory(self) -> Path:
        """Get the expanded config directory path"""
        return self.config_dir.expanduser()

    def get_passthrough_options(self) -> List[str]:
        """Return the configured yt-dlp passthrough options, skipping empty ones"""
        return [opt for opt in (self.preload.ytdl_opt1, self.preload.ytdl_opt2) if opt]

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to file

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path the configuration was written to

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        from ..exceptions import ConfigError

        if not path:
            target = self.get_config_directory() / "config.yaml"
        else:
            target = Path(path)

        config_data = {
            name: self._dataclass_to_dict(section)
            for name, section in self._sections().items()
        }

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(
                f"Failed to save config to {target}: {e}",
                details={'path': str(target), 'original_error': e}
            )
        return target

    def _dataclass_to_dict(self, obj) -> Dict[str, Any]:
        result = {}
        for key, value in obj.__dict__.items():
            result[key] = value
        return result

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is valid
        """
        from ..utils.validation import (
            validate_preload_limit,
            validate_format_selector,
            validate_trusted_domains,
            validate_socket_path,
        )

        errors = []
        checks = [
            validate_preload_limit(self.preload.preload_limit),
            validate_format_selector(self.preload.format),
            validate_trusted_domains(self.preload.trusted_domains),
            validate_socket_path(self.player.socket),
        ]
        for is_valid, error_msg in checks:
            if not is_valid:
                errors.append(error_msg)

        return errors

    def __str__(self) -> str:
        sections = [
            f"Cache: {self.preload.temp}",
            f"Limit: {self.preload.preload_limit}",
            f"Format: {self.preload.format}",
            f"Socket: {self.player.socket}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance, created on first access
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
