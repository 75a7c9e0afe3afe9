from boosteam.exceptions.handlers import (
    AuthenticationError,
    BoosteamException,
    ConfigurationError,
    ConflictError,
    DuplicatePermissionError,
    DuplicateRoleError,
    InvalidCredentialError,
    MissingCredentialError,
    NotFoundError,
    PermissionError,
    PrincipalNotFoundError,
    RoleInUseError,
    StorageUnavailableError,
    UnauthenticatedError,
    ValidationError,
)

__all__ = [
    "BoosteamException",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthenticationError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "PrincipalNotFoundError",
    "UnauthenticatedError",
    "PermissionError",
    "RoleInUseError",
    "DuplicateRoleError",
    "DuplicatePermissionError",
    "StorageUnavailableError",
    "ConfigurationError",
]
