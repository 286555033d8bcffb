"""
Translation of domain errors into HTTP errors for the v1 routers.
"""

import logging
from fastapi import HTTPException, status

from library_api.core.exceptions import (
    LibraryError, NotFound, OutOfStock, InvalidState, DuplicateBookCode,
    BookHasActiveLoans, PersistenceFailure, CompensationFailure
)

logger = logging.getLogger(__name__)

_CONFLICTS = (OutOfStock, InvalidState, DuplicateBookCode, BookHasActiveLoans)


def http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, _CONFLICTS):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, CompensationFailure):
        logger.error(f"Data may be inconsistent: {exc}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    if isinstance(exc, (PersistenceFailure, LibraryError)):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
