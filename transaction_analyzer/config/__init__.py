"""Configuration package."""

from transaction_analyzer.config.settings import (
    AnalysisSettings,
    AppSettings,
    ReaderSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AnalysisSettings",
    "AppSettings",
    "ReaderSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
