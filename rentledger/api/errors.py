"""Mapping of ledger errors to HTTP responses."""

from fastapi import HTTPException, status

from rentledger.services.errors import (
    AuthenticationError,
    DuplicateReadingError,
    InvalidReadingError,
    LedgerError,
    UnknownRoomError,
)
from rentledger.services.localizer import t

_STATUS_BY_ERROR: list[tuple[type[LedgerError], int]] = [
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (UnknownRoomError, status.HTTP_404_NOT_FOUND),
    (DuplicateReadingError, status.HTTP_409_CONFLICT),
    (InvalidReadingError, status.HTTP_400_BAD_REQUEST),
]


def http_status_for(error: LedgerError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(error: LedgerError) -> HTTPException:
    """Convert a ledger error into an HTTPException with a readable detail."""
    if isinstance(error, UnknownRoomError):
        detail = t("errors.room_not_found", room_id=error.room_id)
    else:
        detail = str(error)
    return HTTPException(status_code=http_status_for(error), detail=detail)


def reading_not_found(room_id: str, period: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=t("errors.reading_not_found", room_id=room_id, period=period),
    )


__all__ = ["http_status_for", "to_http_exception", "reading_not_found"]
