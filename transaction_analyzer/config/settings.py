"""
Configuration Management for the Transaction Analyzer

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every setting has a working default, so the reader and the analysis
engine run with no environment at all. The environment only tunes them.
"""

from functools import lru_cache
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transaction_analyzer.models.transaction import INTERNAL_TRANSFER_TYPE


class ReaderSettings(BaseSettings):
    """CSV decoding configuration."""

    model_config = SettingsConfigDict(
        env_prefix="READER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    encoding: str = Field(
        default="utf-8-sig",
        description="Text encoding of exported files (utf-8-sig tolerates a BOM)"
    )
    delimiter: str = Field(
        default=",",
        min_length=1,
        max_length=1,
        description="Field delimiter"
    )


class AnalysisSettings(BaseSettings):
    """Analysis engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ANALYSIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    internal_transfer_type: str = Field(
        default=INTERNAL_TRANSFER_TYPE,
        min_length=1,
        description="Transaction type excluded when ignoring internal transfers"
    )
    largest_transactions_limit: int = Field(
        default=3,
        ge=0,
        le=100,
        description="How many of the largest transactions to report per currency"
    )
    recent_transactions_limit: int = Field(
        default=10,
        ge=0,
        le=100,
        description="How many recent transactions to report"
    )
    income_trend_months: int = Field(
        default=3,
        ge=0,
        le=24,
        description="How many recent months to compare month-over-month"
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

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False = human-readable console output)"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum upload file size in MB"
    )
    supported_file_formats: str = Field(
        default="csv,txt",
        description="Comma-separated list of accepted file extensions"
    )
    supported_mime_types: str = Field(
        default="text/csv,text/plain,application/csv",
        description="Comma-separated list of accepted MIME types"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only allow standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported extensions as a list."""
        return [fmt.strip().lower() for fmt in self.supported_file_formats.split(",")]

    @property
    def supported_mime_types_list(self) -> list[str]:
        return [mime.strip().lower() for mime in self.supported_mime_types.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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

    @property
    def reader(self) -> ReaderSettings:
        return ReaderSettings()

    @property
    def analysis(self) -> AnalysisSettings:
        return AnalysisSettings()

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


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<setting_name>_error" entry for each one that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("reader", "analysis", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
