"""Map domain errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from avatarvoice.domain.exceptions import (
    AvatarVoiceError,
    BlobError,
    DeletionInProgressError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
    RepositoryStateError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases.
STATUS_BY_ERROR: tuple[tuple[type[AvatarVoiceError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidArgumentError, 422),
    (DeletionInProgressError, status.HTTP_409_CONFLICT),
    (RepositoryStateError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (BlobError, status.HTTP_502_BAD_GATEWAY),
)


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert an AvatarVoiceError into a JSON error response."""
    assert isinstance(exc, AvatarVoiceError)
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AvatarVoiceError, domain_exception_handler)
