from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..errors import (
    AnchorHandshakeError,
    ChallengeExpired,
    ChallengeInvalid,
    CodecError,
    DuplicateSignature,
    InvalidStateTransition,
    MissingField,
    OriginSignatureMissing,
    SigningError,
    SigningKeyUnavailable,
    SubjectSignatureMissing,
    UnsupportedMode,
)

logger = logging.getLogger(__name__)

_LOCAL_ERRORS = (
    ChallengeExpired,
    ChallengeInvalid,
    CodecError,
    DuplicateSignature,
    InvalidStateTransition,
    MissingField,
    OriginSignatureMissing,
    SubjectSignatureMissing,
    UnsupportedMode,
)


def status_for(err: AnchorHandshakeError) -> int:
    if isinstance(err, _LOCAL_ERRORS):
        return 400
    if isinstance(err, (SigningKeyUnavailable, SigningError)):
        return 500
    return 502


async def handshake_error_handler(request: Request, err: AnchorHandshakeError) -> JSONResponse:
    status = status_for(err)
    if status >= 500:
        logger.error(f"{request.url.path} failed: {err.message} {err.details!r}")
    return JSONResponse(err.to_dict(), status_code=status)


async def http_error_handler(request: Request, err: HTTPException) -> JSONResponse:
    return JSONResponse({"error": err.detail, "details": None}, status_code=err.status_code)
