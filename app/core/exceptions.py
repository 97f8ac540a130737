from typing import Optional, Any

class SubSplitError(Exception):
    """
    Base exception for SubSplit application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ConfigurationError(SubSplitError):
    """
    Raised when required configuration is missing. Fatal at startup.
    """
    def __init__(self, message: str = "Invalid configuration", details: Optional[Any] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", status_code=500, details=details)

class AuthorizationError(SubSplitError):
    """
    Raised when a non-admin chat calls an admin-only command.
    """
    def __init__(self, message: str = "Not authorized", details: Optional[Any] = None):
        super().__init__(message, code="UNAUTHORIZED", status_code=403, details=details)

class ValidationError(SubSplitError):
    """
    Raised when user input is rejected (bad image type, empty reference).
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

class InvalidTransitionError(SubSplitError):
    """
    Raised when a session is moved to a stage it cannot reach from its current one.
    """
    def __init__(self, message: str = "Invalid stage transition", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TRANSITION", status_code=409, details=details)

class ExternalServiceError(SubSplitError):
    """
    Raised when an external service (Telegram, Cloudinary, sheet webhook) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)

class TelegramAPIError(ExternalServiceError):
    """
    Raised when the Telegram Bot API answers with ok=false.
    """

class TelegramServerError(TelegramAPIError):
    """
    Telegram failed on its side (5xx, or 429 flood control). Safe to retry.
    """

class SheetWebhookError(ExternalServiceError):
    """
    Raised when the spreadsheet webhook does not accept a submission.
    """
