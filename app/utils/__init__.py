"""
Utility modules for the Real Estate CRM API.
"""

from .auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
    generate_temporary_password,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    BadRequestError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    InsufficientPermissionsError,
    BusinessRuleViolationError,
    DuplicateResourceError,
    SchedulingConflictError,
    FileUploadError,
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "generate_temporary_password",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "BadRequestError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "InsufficientPermissionsError",
    "BusinessRuleViolationError",
    "DuplicateResourceError",
    "SchedulingConflictError",
    "FileUploadError",
]
