from typing import Optional, Dict, Any

class NimbusException(Exception):
    """Base exception for all Nimbus errors."""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

class ValidationError(NimbusException):
    """Raised when caller input is missing or malformed. User-correctable."""
    def __init__(self, message: str, code: str = "validation_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=400, details=details)

class AuthError(NimbusException):
    """Raised when authentication fails. The message stays generic."""
    def __init__(self, message: str = "Not authorized", code: str = "auth_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=401, details=details)

class ResourceNotFoundError(NimbusException):
    """
    Raised when a requested resource is absent or owned by someone else.
    Both cases share one message so ownership cannot be probed.
    """
    def __init__(self, message: str, code: str = "not_found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=404, details=details)

class ConflictError(NimbusException):
    """Raised when a unique field (e.g. email) is already taken."""
    def __init__(self, message: str, code: str = "conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=400, details=details)

class ConfigurationError(NimbusException):
    """Raised when application configuration is invalid or missing."""
    def __init__(self, message: str, code: str = "config_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=500, details=details)
