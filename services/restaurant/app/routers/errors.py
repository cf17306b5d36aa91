from fastapi import HTTPException, status

from app.core.exceptions import (
    DependencyMissingError,
    EntityNotFoundError,
    PermissionDeniedError,
    ServiceError,
    TenantAssignmentError,
    TenantScopeError,
)

_STATUS_BY_ERROR = {
    EntityNotFoundError: status.HTTP_404_NOT_FOUND,
    DependencyMissingError: status.HTTP_404_NOT_FOUND,
    TenantAssignmentError: status.HTTP_400_BAD_REQUEST,
    TenantScopeError: status.HTTP_403_FORBIDDEN,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
}


def to_http_exception(exc: ServiceError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=exc.detail)
