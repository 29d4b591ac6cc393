"""
Configuration Management for Money Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets entry store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    income_sheet_name: str = Field(
        default="Income",
        description="Name of the sheet for income entries"
    )
    expense_sheet_name: str = Field(
        default="Expenses",
        description="Name of the sheet for expense entries"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class FirebaseSettings(BaseSettings):
    """Firebase Authentication (REST) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    web_api_key: str = Field(
        ...,
        min_length=1,
        description="Firebase Web API key"
    )
    auth_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit REST endpoint"
    )
    token_base_url: str = Field(
        default="https://securetoken.googleapis.com/v1",
        description="Secure Token REST endpoint (refresh)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
        description="Minimum level for the structured log"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol shown in front of amounts"
    )
    recent_entries_limit: int = Field(
        default=8,
        ge=1,
        le=100,
        description="How many income entries the dashboard lists"
    )

    # Network
    request_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        le=120,
        description="Timeout for calls to the identity provider"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "google_sheets": lambda: settings.google_sheets,
        "firebase": lambda: settings.firebase,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
