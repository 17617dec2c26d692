"""
Configuration Management

Uses Pydantic BaseSettings to load configuration from environment variables.
All settings can be overridden via .env file or environment variables.

Environment Variables:
    DATA_DIR: Directory holding the CSV data files (default: data)
    BOOKINGS_FILE: Booking CSV file name, the only file rewritten at runtime
    ACTIVITY_RULES_FILE: Optional JSON file overriding the compatibility rules
    APP_ENV: Environment name (development/staging/production)
    DEBUG: Enable debug mode (default: False)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Data files
    data_dir: Path = Path("data")
    """Directory containing the CSV data files.

    Relative paths are resolved against the working directory.
    """

    doctors_file: str = "Doctors.csv"
    """Doctor reference data (read once at startup)."""

    spaces_file: str = "Spaces.csv"
    """Space/room reference data (read once at startup)."""

    calendars_file: str = "DoctorCalendars.csv"
    """Doctor schedule entries (read once at startup)."""

    bookings_file: str = "SpaceBookings.csv"
    """Space bookings.

    Rewritten in full after every successful booking via a temp file
    followed by an atomic replace.
    """

    activity_rules_file: Optional[Path] = None
    """Optional JSON file with `activity_rules` and `specialty_rules` tables.

    When unset, the built-in tables in
    `carespace.core.scheduling.compatibility` are used.
    """

    # Availability defaults
    default_duration_hours: float = 1.0
    """Duration used when a request does not specify one."""

    max_duration_hours: float = 24.0
    """Longest duration accepted by availability queries."""

    alternative_slot_start_hour: int = 8
    """First hour probed when suggesting alternative slots."""

    alternative_slot_end_hour: int = 17
    """Last hour probed when suggesting alternative slots (inclusive)."""

    max_alternative_slots: int = 3
    """Maximum alternative slots suggested per space."""

    # Application Environment
    app_env: Literal["development", "staging", "production"] = "development"
    """Current application environment.

    Options:
    - development: Local development, verbose logging, debug enabled
    - staging: Pre-production testing environment
    - production: Live production environment, minimal logging
    """

    debug: bool = False
    """Enable debug mode.

    When True:
    - Detailed error messages in responses
    - Request duration logging
    """

    # Application Configuration
    app_name: str = "carespace"
    """Application name."""

    host: str = "0.0.0.0"
    """Host to bind the application server."""

    port: int = 3000
    """Port to bind the application server."""

    # CORS Configuration
    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins."""

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Split cors_origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def doctors_path(self) -> Path:
        return self.data_dir / self.doctors_file

    @property
    def spaces_path(self) -> Path:
        return self.data_dir / self.spaces_file

    @property
    def calendars_path(self) -> Path:
        return self.data_dir / self.calendars_file

    @property
    def bookings_path(self) -> Path:
        return self.data_dir / self.bookings_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache so settings are loaded only once and reused across
    the application.

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from carespace.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.bookings_path)
        data/SpaceBookings.csv
    """
    return Settings()


# Module-level settings instance for easy imports
settings = get_settings()
