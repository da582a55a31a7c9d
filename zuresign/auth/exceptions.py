"""
Signing exceptions for ZureSign.

Both error kinds are raised before any network call and are never retried.
"""


class SigningError(Exception):
    """Base exception for request signing errors."""
    
    def __init__(self, message: str, error_code: str = "SigningError"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(SigningError):
    """Raised when a mandatory signing option is missing or invalid."""
    
    def __init__(self, message: str = "Invalid signing configuration"):
        super().__init__(message, "ConfigurationError")


class KeyFormatError(SigningError):
    """Raised when the account key is not valid base64."""
    
    def __init__(self, message: str = "account_key is not valid base64"):
        super().__init__(message, "KeyFormatError")
