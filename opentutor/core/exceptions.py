"""
Custom exceptions for the application.
"""


class OpenTutorException(Exception):
    """Base exception for all OpenTutor application exceptions."""
    pass


class ValidationError(OpenTutorException):
    """Raised when validation fails."""
    pass


class NotFoundError(OpenTutorException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(OpenTutorException):
    """Raised when there's a conflict (e.g., mutating a completed session)."""
    pass


class AuthenticationError(OpenTutorException):
    """Raised when the caller's identity is missing."""
    pass


class AuthorizationError(OpenTutorException):
    """Raised when authorization fails."""
    pass


class UpstreamServiceError(OpenTutorException):
    """Raised when an external dependency (AI model, storage) fails."""

    def __init__(self, message: str, service: str = "upstream"):
        super().__init__(message)
        self.service = service
