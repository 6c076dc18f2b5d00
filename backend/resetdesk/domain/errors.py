"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Authentication & Authorization Errors
class AuthenticationError(DomainError):
    """Token missing"""
    error_code = "AUTHENTICATION_ERROR"
    http_status = 401


class InvalidCredentialError(AuthenticationError):
    """Password does not match the stored hash"""
    error_code = "INVALID_CREDENTIAL"


class InvalidTokenError(AuthenticationError):
    """Token malformed, expired or signed with another secret"""
    error_code = "INVALID_TOKEN"
    http_status = 403


class AuthorizationError(DomainError):
    """User lacks permission for action"""
    error_code = "AUTHORIZATION_ERROR"
    http_status = 403


class PermissionDeniedError(AuthorizationError):
    """Specific permission denied"""
    error_code = "PERMISSION_DENIED"


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class WeakPasswordError(ValidationError):
    """Issued password is weak and the caller has not confirmed it"""
    error_code = "WEAK_PASSWORD_CONFIRMATION_REQUIRED"
    http_status = 422


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found (or outside the caller's scope)"""
    error_code = "NOT_FOUND"
    http_status = 404


class PersonnelNotFoundError(NotFoundError):
    """Personnel not found"""
    error_code = "PERSONNEL_NOT_FOUND"


class RequestNotFoundError(NotFoundError):
    """Reset request not found"""
    error_code = "REQUEST_NOT_FOUND"


class UnitNotFoundError(NotFoundError):
    """Unit not found"""
    error_code = "UNIT_NOT_FOUND"


class NotRegisteredError(NotFoundError):
    """Registration number has no matching personnel"""
    error_code = "NOT_REGISTERED"


# Conflict Errors
class ConflictError(DomainError):
    """Resource conflict"""
    error_code = "CONFLICT"
    http_status = 409


class InvalidTransitionError(ConflictError):
    """Status transition not allowed from the current status"""
    error_code = "INVALID_TRANSITION"


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    error_code = "ALREADY_EXISTS"


# Storage Errors
class StorageError(DomainError):
    """Underlying data store failure"""
    error_code = "STORAGE_FAILURE"
    http_status = 500
