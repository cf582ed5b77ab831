"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    """Raised when request input fails validation."""

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class AuthError(AppError):
    """Raised when the authentication backend rejects a request."""

    def __init__(self, message="Authentication failed."):
        """Initialize the error."""
        super().__init__(message, 401)
