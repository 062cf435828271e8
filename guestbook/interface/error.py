"""Interface layer error mapping."""

from fastapi import HTTPException, status

from guestbook.domain.error import (
    DomainError,
    MutationInProgressError,
    NotFoundError,
    PermissionDeniedError,
    RemoteError,
    ValidationError,
)

# Checked in order; subclasses of ValidationError map through their base
STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (MutationInProgressError, status.HTTP_409_CONFLICT),
    (RemoteError, status.HTTP_502_BAD_GATEWAY),
]


def to_http_exception(error: DomainError) -> HTTPException:
    """Translate a domain error to the HTTP error shown to the client."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
