"""
Authentication exceptions.
"""

from web_macro.exceptions.base import WebMacroError


class LoginFailedError(WebMacroError):
    """
    Login did not succeed.
    
    Raised inside the session manager when credentials are rejected or
    when the email field, password field or submit control cannot be
    located. It is converted into a failed login outcome and never
    escapes ``SessionManager.open``.
    """
    
    def __init__(self, message: str, email: str | None = None, stage: str | None = None):
        super().__init__(message, {"email": email, "stage": stage})
        self.email = email
        self.stage = stage
