"""
Base exceptions for Web Macro.
"""


class WebMacroError(Exception):
    """
    Base exception for all Web Macro errors.
    
    All custom exceptions inherit from this class, making it easy
    to catch any error from the library.
    
    Attributes:
        message: Human-readable error message
        details: Optional additional error details
    """
    
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(WebMacroError):
    """
    Error in configuration.
    
    Raised when there's an issue with settings, environment variables,
    or configuration files.
    """
    pass


class StorageError(WebMacroError):
    """
    Error reading or writing the persistent repository.
    
    Raised when the repository file exists but cannot be parsed or written.
    """
    
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message, {"path": path})
        self.path = path


class InvalidStateError(WebMacroError):
    """
    An entity was asked to make a transition its current state forbids.
    
    Raised for example when an account that is already running is marked
    running again.
    """
    
    def __init__(self, message: str, current: str, requested: str):
        super().__init__(message, {"current": current, "requested": requested})
        self.current = current
        self.requested = requested
