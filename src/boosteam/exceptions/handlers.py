from __future__ import annotations

from typing import Any, Dict, Optional


class BoosteamException(Exception):
    """
    Base exception for every policy failure raised by the service layer.

    Routers translate it at the request boundary:
    - attributes: message/code/status_code/details/user_message
    - method: to_dict()
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "BOOSTEAM_ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details: Dict[str, Any] = details or {}
        self.user_message = user_message or message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ValidationError(BoosteamException):
    def __init__(
        self, message: str, field: Optional[str] = None, *, status_code: int = 422, **kwargs: Any
    ):
        details: Dict[str, Any] = {"field": field} if field else {}
        details.update(kwargs)
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=status_code,
            details=details,
            user_message=f"Validation failed: {message}",
        )


class NotFoundError(BoosteamException):
    def __init__(self, resource: str, resource_id: Any = None):
        super().__init__(
            message=f"{resource.capitalize()} not found",
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "id": resource_id},
        )


class ConflictError(BoosteamException):
    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message=message, code="CONFLICT", status_code=409, details=dict(kwargs))


# Authentication


class AuthenticationError(BoosteamException):
    """Raised while resolving a bearer credential into a principal."""

    def __init__(self, message: str, *, code: str, status_code: int = 401) -> None:
        super().__init__(message=message, code=code, status_code=status_code)


class MissingCredentialError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("No token provided", code="MISSING_CREDENTIAL")


class InvalidCredentialError(AuthenticationError):
    def __init__(self, reason: str = "Invalid token") -> None:
        super().__init__(reason, code="INVALID_CREDENTIAL")


class PrincipalNotFoundError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("User not found", code="PRINCIPAL_NOT_FOUND", status_code=404)


class UnauthenticatedError(AuthenticationError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="UNAUTHENTICATED")


# Authorization


class PermissionError(BoosteamException):
    def __init__(self, action: str, resource: Optional[str] = None, **kwargs: Any):
        if resource is None:
            # Named-role and ownership denials carry a free form message.
            super().__init__(
                message=action,
                code="PERMISSION_DENIED",
                status_code=403,
                details=dict(kwargs),
                user_message=action,
            )
            return

        message = f"Missing permission to {action} {resource}"
        details: Dict[str, Any] = {"action": action, "resource": resource}
        details.update(kwargs)
        super().__init__(
            message=message,
            code="PERMISSION_DENIED",
            status_code=403,
            details=details,
            user_message="You don't have permission to perform this action",
        )


# RBAC integrity


class RoleInUseError(BoosteamException):
    def __init__(self, role_id: int, user_count: int):
        super().__init__(
            message="Cannot delete role that is assigned to users",
            code="ROLE_IN_USE",
            status_code=400,
            details={"role_id": role_id, "user_count": user_count},
        )


class DuplicateRoleError(BoosteamException):
    def __init__(self, name: str):
        super().__init__(
            message="Role already exists",
            code="DUPLICATE_ROLE",
            status_code=409,
            details={"name": name},
        )


class DuplicatePermissionError(BoosteamException):
    def __init__(self, action: str, resource: str):
        super().__init__(
            message=f"Permission already exists: {action} {resource}",
            code="DUPLICATE_PERMISSION",
            status_code=409,
            details={"action": action, "resource": resource},
        )


class StorageUnavailableError(BoosteamException):
    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Storage unavailable",
            code="STORAGE_UNAVAILABLE",
            status_code=503,
            details=details or {},
            user_message="The service is temporarily unavailable",
        )


class ConfigurationError(BoosteamException):
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs: Any):
        details: Dict[str, Any] = {"config_key": config_key} if config_key else {}
        details.update(kwargs)
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            status_code=500,
            details=details,
            user_message="System configuration error",
        )
