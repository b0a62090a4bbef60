"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.

Example:
    >>> from web_macro.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.browser.zoom)
    60
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserSettings(BaseModel):
    """
    Browser settings applied when a session is opened.
    
    Attributes:
        headless: Run browser in headless mode
        browser_type: Playwright browser engine
        timeout_ms: Default timeout for browser operations
        zoom: Page zoom percentage applied to every document
        maximized: Start the browser window maximized (headed mode only)
        incognito: Request private browsing; contexts are always isolated
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
        user_agent: Custom user agent string
        slow_mo: Slow down operations by this amount (ms) - useful for debugging
    """
    headless: bool = True
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    zoom: int = Field(default=60, ge=25, le=500)
    maximized: bool = True
    incognito: bool = True
    viewport_width: int = Field(default=1920, ge=320, le=3840)
    viewport_height: int = Field(default=1080, ge=240, le=2160)
    user_agent: Optional[str] = None
    slow_mo: int = Field(default=0, ge=0, le=5000)


class ReplaySettings(BaseModel):
    """
    Macro replay behavior.
    
    Attributes:
        resolve_timeout_ms: Per-strategy timeout when resolving a selector
        action_delay_min_ms: Lower bound of the pause after each action
        action_delay_max_ms: Upper bound of the pause after each action
        navigation_timeout_ms: Timeout for navigation and network idle
    """
    resolve_timeout_ms: int = Field(default=2000, ge=100, le=60000)
    action_delay_min_ms: int = Field(default=500, ge=0, le=60000)
    action_delay_max_ms: int = Field(default=2000, ge=0, le=60000)
    navigation_timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    
    @model_validator(mode="after")
    def _check_delay_range(self) -> "ReplaySettings":
        if self.action_delay_min_ms > self.action_delay_max_ms:
            raise ValueError("action_delay_min_ms must not exceed action_delay_max_ms")
        return self


class LoginSettings(BaseModel):
    """
    Login performed when a session is opened.
    
    Attributes:
        login_url: Login page; when unset, sessions skip login
        password: Password shared by all accounts
        field_timeout_ms: Timeout for each login selector candidate
        settle_ms: Pause after submitting before checking for errors
    """
    login_url: Optional[str] = None
    password: Optional[SecretStr] = None
    field_timeout_ms: int = Field(default=2000, ge=100, le=60000)
    settle_ms: int = Field(default=3000, ge=0, le=60000)


class ExecutionSettings(BaseModel):
    """
    Multi-account execution settings.
    
    Attributes:
        delay_between_accounts_s: Base pause between two accounts
        randomize_delay: Add random jitter to the pause
        max_jitter_s: Upper bound of the jitter
        session_retry_attempts: Extra attempts after a session-level failure
        mode: Default account ordering
    """
    delay_between_accounts_s: float = Field(default=5.0, ge=0, le=3600)
    randomize_delay: bool = True
    max_jitter_s: float = Field(default=3.0, ge=0, le=600)
    session_retry_attempts: int = Field(default=1, ge=0, le=5)
    mode: Literal["sequential", "selected"] = "sequential"


class StorageSettings(BaseModel):
    """
    Repository location.
    
    Attributes:
        path: JSON file holding accounts, macros and results
    """
    path: str = "./data/web_macro.json"


class LoggingSettings(BaseModel):
    """
    Logging configuration.
    
    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.
    
    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with WEB_MACRO__)
    3. Config file (YAML)
    4. Default values
    
    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(browser=BrowserSettings(headless=False))  # Override
    """
    
    model_config = SettingsConfigDict(
        env_prefix="WEB_MACRO__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
    
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    replay: ReplaySettings = Field(default_factory=ReplaySettings)
    login: LoginSettings = Field(default_factory=LoginSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    
    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.
        
        Args:
            overrides: Dictionary of values to override
            
        Returns:
            New Settings instance with overrides applied
        """
        current = self.model_dump()
        
        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base
        
        merged = deep_merge(current, overrides)
        return Settings(**merged)
