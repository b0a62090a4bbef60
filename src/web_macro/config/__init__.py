"""
Configuration module - Centralized settings management.

This module provides type-safe configuration management using Pydantic,
supporting environment variables, YAML files, and CLI arguments.

Usage:
    from web_macro.config import get_settings, load_config
    
    # Get global settings (loaded once)
    settings = get_settings()
    
    # Or load fresh settings with overrides
    settings = load_config(browser={"headless": False})

Environment Variables:
    WEB_MACRO__BROWSER__HEADLESS=false
    WEB_MACRO__LOGIN__LOGIN_URL=https://example.com/login
    WEB_MACRO__LOGIN__PASSWORD=...
    WEB_MACRO__EXECUTION__DELAY_BETWEEN_ACCOUNTS_S=10
"""

from web_macro.config.settings import (
    Settings,
    BrowserSettings,
    ReplaySettings,
    LoginSettings,
    ExecutionSettings,
    StorageSettings,
    LoggingSettings,
)
from web_macro.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).
    
    Settings are loaded once from environment variables and config files.
    Call reset_settings() to reload.
    
    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "BrowserSettings",
    "ReplaySettings",
    "LoginSettings",
    "ExecutionSettings",
    "StorageSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
