"""Translate domain exceptions into HTTP errors."""
from __future__ import annotations

from fastapi import HTTPException, status

from dailystride.core.errors import (
    Conflict,
    DailyStrideError,
    InvalidInput,
    NotFound,
    PersistenceFailure,
)


def to_http_exception(exc: DailyStrideError) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, Conflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, PersistenceFailure):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save changes")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")
