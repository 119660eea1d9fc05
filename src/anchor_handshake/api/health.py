from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


async def health(request: Request) -> JSONResponse:
    return JSONResponse(
        {"status": "ok", "origin_key": request.app.state.origin_signer.available}
    )
