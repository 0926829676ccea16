"""
Configuration management for the Parcel Tracker application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
- Site settings (site name, notification toggle, upload limits)

Settings are read once when a Config is built and then treated as
read-only; services receive them through get_config().
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DEFAULT_MAX_UPLOAD_MB,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "PARCEL_TRACKER"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_name(key: str) -> str:
    return f"{ENV_PREFIX}_{key}"


def _read_int(key: str, default: int) -> int:
    """Read a positive integer setting, falling back to default with a warning."""
    name = _env_name(key)
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}', using default {default}")
        return default
    if value <= 0:
        logger.warning(f"Invalid {name} value '{raw}', using default {default}")
        return default
    return value


def _read_bool(key: str, default: bool) -> bool:
    """Read a boolean setting, falling back to default with a warning."""
    name = _env_name(key)
    raw = os.environ.get(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid {name} value '{raw}', using default {default}")
    return default


class Config:
    """
    Application configuration manager.

    Handles database location, environment mode and the site settings
    consumed by the service layer.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_data_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME
        self._database_url_override = os.environ.get(_env_name("DB_URL"))

        # Site settings
        self._site_name = os.environ.get(_env_name("SITE_NAME"), APP_NAME)
        self._db_timeout = _read_int("DB_TIMEOUT", 30)
        self._notifications_enabled = _read_bool("NOTIFICATIONS", True)
        self._max_upload_mb = _read_int("MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB)

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_data_dir(self) -> Path:
        """
        Get the per-user data directory for production.

        Returns:
            Path to ~/.parcel_tracker
        """
        return Path.home() / ".parcel_tracker"

    def ensure_directories(self) -> None:
        """Create the database directory if it doesn't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        PARCEL_TRACKER_DB_URL takes precedence over the file-based default.

        Returns:
            Database URL string for SQLAlchemy
        """
        if self._database_url_override:
            return self._database_url_override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def db_timeout(self) -> int:
        """SQLite busy timeout in seconds."""
        return self._db_timeout

    @property
    def site_name(self) -> str:
        """Display name used in notification texts."""
        return self._site_name

    @property
    def notifications_enabled(self) -> bool:
        """Whether workflow events create notification records."""
        return self._notifications_enabled

    @property
    def max_upload_bytes(self) -> int:
        """Largest accepted package file, in bytes."""
        return self._max_upload_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    PARCEL_TRACKER_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(_env_name("ENV"), "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
