from typing import Optional, Any


class UserDirectoryError(Exception):
    """
    Base exception for the user directory application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class UserNotFoundError(UserDirectoryError):
    """
    Raised when no user record exists at the given identifier.
    """
    def __init__(self, user_id: Any, details: Optional[Any] = None):
        self.user_id = user_id
        super().__init__(f"User not found with id: {user_id}", code="NOT_FOUND", status_code=404, details=details)


class DuplicateEmailError(UserDirectoryError):
    """
    Raised when an email is already taken by another user record.
    """
    def __init__(self, email: str, details: Optional[Any] = None):
        self.email = email
        super().__init__(f"User with email {email} already exists", code="DUPLICATE_EMAIL", status_code=409, details=details)


class AuthenticationError(UserDirectoryError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Unauthorized. Please provide valid credentials.", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class PayloadValidationError(UserDirectoryError):
    """
    Raised when a user payload violates field constraints.

    `details` holds (field, message) pairs, one per violated rule.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class MalformedPayloadError(UserDirectoryError):
    """
    Raised when a request body cannot be read as a user XML document.
    """
    def __init__(self, message: str = "Malformed XML payload", details: Optional[Any] = None):
        super().__init__(message, code="MALFORMED_PAYLOAD", status_code=400, details=details)


class UnsupportedMediaTypeError(UserDirectoryError):
    """
    Raised when a request body is sent with a non-XML content type.
    """
    def __init__(self, content_type: str, details: Optional[Any] = None):
        super().__init__(f"Content type '{content_type}' not supported, use application/xml", code="UNSUPPORTED_MEDIA_TYPE", status_code=415, details=details)
