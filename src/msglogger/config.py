"""Configuration management for msglogger.

Supports layered configuration with priority: CLI args > ENV vars > .env file > defaults.
Directories picked interactively are kept separately in ``directories.json``
under the config directory (see ``DirectoryPreferences``).
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import platformdirs
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from msglogger.storage.errors import StorageError, StorageNotFoundError
from msglogger.storage.helpers import load_json, save_model

logger = logging.getLogger(__name__)

APP_NAME = "MessageLogger"
DEFAULT_NAMESPACE = "MessageLoggerData"
SAVED_IMAGES_DIRNAME = "savedImages"


def _get_default_data_dir() -> Path:
    """Get platform-appropriate default data directory using platformdirs.

    Uses OS-specific conventions:
    - macOS: ~/Library/Application Support/MessageLogger
    - Windows: %APPDATA%/MessageLogger
    - Linux: ~/.local/share/MessageLogger

    Returns:
        Path to platform-specific user data directory
    """
    return Path(platformdirs.user_data_dir(APP_NAME, appauthor=False))


def get_user_log_dir() -> Path:
    """Get platform-appropriate directory for the application's own log files."""
    return Path(platformdirs.user_log_dir(APP_NAME, appauthor=False))


class Settings(BaseSettings):
    """Application settings with layered configuration support.

    Configuration is loaded in the following priority (highest to lowest):
    1. Keyword arguments (the CLI passes its overrides this way)
    2. Environment variables (prefixed with MSGLOGGER_)
    3. .env file (if present in current directory)
    4. Default values

    Environment variables:
        MSGLOGGER_DATA_DIR: Base data directory
        MSGLOGGER_LOGS_DIR: Directory holding the message log blob
        MSGLOGGER_IMAGE_CACHE_DIR: Directory holding cached attachment images
        MSGLOGGER_LOG_LEVEL: Logging level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="MSGLOGGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)",
    )

    # Paths
    data_dir: Path = Field(
        default_factory=_get_default_data_dir,
        description="Base directory for application data",
    )
    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        description="Subdirectory of data_dir that holds the logger's files",
    )
    logs_dir: Path | None = Field(
        default=None,
        description="Directory for the message log blob (default: <data_dir>/<namespace>)",
    )
    image_cache_dir: Path | None = Field(
        default=None,
        description="Directory for cached images (default: <data_dir>/<namespace>/savedImages)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file (in addition to console)",
    )
    log_file_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024 * 1024,
        le=100 * 1024 * 1024,
        description="Maximum size of each log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Number of backup log files to keep",
    )
    log_format: str = Field(
        default="text",
        description="Log format: 'text' for human-readable, 'json' for structured logging",
    )
    log_module_levels: dict[str, str] = Field(
        default_factory=dict,
        description="Per-module log levels (e.g., {'msglogger.storage': 'DEBUG'})",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is supported."""
        valid_formats = {"text", "json"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of: {', '.join(valid_formats)}")
        return v_lower

    @property
    def default_logs_dir(self) -> Path:
        """Default directory for the message log blob."""
        return self.data_dir / self.namespace

    @property
    def default_image_cache_dir(self) -> Path:
        """Default directory for cached attachment images."""
        return self.default_logs_dir / SAVED_IMAGES_DIRNAME

    @property
    def config_dir(self) -> Path:
        """Directory for configuration files."""
        return self.data_dir / "config"

    @property
    def preferences_path(self) -> Path:
        """Path to the saved directory preferences."""
        return self.config_dir / "directories.json"

    @property
    def log_dir(self) -> Path:
        """Directory for the application's own log files."""
        return get_user_log_dir()

    @property
    def log_file_path(self) -> Path:
        """Path to the application's main log file."""
        return self.log_dir / "msglogger.log"

    def check(self) -> list[str]:
        """Validate configuration and return any warnings.

        Returns:
            List of warning messages (empty if all is well)
        """
        warnings = []

        candidates = [
            ("data", self.data_dir),
            ("logs", self.logs_dir),
            ("image cache", self.image_cache_dir),
        ]
        for name, path in candidates:
            if path is not None and path.exists() and not path.is_dir():
                warnings.append(
                    f"{name.capitalize()} path exists but is not a directory: {path}"
                )

        if self.logs_dir is not None and self.image_cache_dir is not None:
            if self.logs_dir == self.image_cache_dir:
                warnings.append(
                    f"Logs and image cache share one directory: {self.logs_dir}\n"
                    f"  → The log file will be indexed as a cached image"
                )

        return warnings

    def print_config(self) -> None:
        """Print current configuration to stdout."""
        print("msglogger Configuration:")
        print(f"  Debug: {self.debug}")
        print(f"  Log Level: {self.log_level}")
        print(f"  Log Format: {self.log_format}")
        print(f"  Log to File: {self.log_to_file}")
        if self.log_to_file:
            print(f"  Log File: {self.log_file_path}")
        if self.log_module_levels:
            print(f"  Module Log Levels: {self.log_module_levels}")
        print(f"  Data Directory: {self.data_dir}")
        print(f"  Logs Directory: {self.logs_dir or self.default_logs_dir}")
        print(f"  Image Cache Directory: {self.image_cache_dir or self.default_image_cache_dir}")
        print(f"  Preferences File: {self.preferences_path}")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload settings,
    call get_settings.cache_clear() first.
    """
    return Settings()


def reset_settings() -> None:
    """Clear settings cache to force reload on next get_settings() call."""
    get_settings.cache_clear()


class DirectoryPreferences(BaseModel):
    """Directories chosen by the user, persisted across restarts."""

    logs_dir: Path | None = None
    image_cache_dir: Path | None = None


def load_directory_preferences(path: Path) -> DirectoryPreferences:
    """Load directory preferences from file.

    Returns:
        DirectoryPreferences instance (defaults if file is missing or invalid)
    """
    try:
        data = load_json(path)
    except StorageNotFoundError:
        return DirectoryPreferences()
    except StorageError as e:
        logger.warning(f"Failed to load directory preferences: {e}, using defaults")
        return DirectoryPreferences()

    try:
        return DirectoryPreferences.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid directory preferences in {path}: {e}, using defaults")
        return DirectoryPreferences()


def save_directory_preferences(path: Path, preferences: DirectoryPreferences) -> None:
    """Save directory preferences to file.

    Raises:
        StorageError: If the file cannot be written
    """
    save_model(path, preferences)
    logger.info(f"Directory preferences saved to {path}")
