from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..directory import EndpointResolver
from ..errors import MissingField
from ..transfer import SessionTracker
from ..types import AccessToken
from .security import require_bearer_token

router = APIRouter(prefix="/api/sep24")


class StartRequestBody(BaseModel):
    mode: str | None = None
    assetCode: str | None = None
    account: str | None = None
    amount: str | None = None


class StatusRequestBody(BaseModel):
    id: str | None = None


def _tracker(request: Request) -> SessionTracker:
    state = request.app.state
    return SessionTracker(
        state.settings.home_domain,
        state.transport,
        resolver=EndpointResolver(state.transport, state.settings.dev_mode),
    )


@router.get("/info")
def transfer_info(request: Request) -> dict[str, Any]:
    return _tracker(request).fetch_info(timeout=request.app.state.settings.http_timeout)


@router.post("/start")
def start(
    body: StartRequestBody,
    request: Request,
    token: AccessToken = Depends(require_bearer_token),
) -> dict:
    missing = [name for name in ("mode", "assetCode", "account") if not getattr(body, name)]
    if missing:
        raise MissingField(*missing)

    session = _tracker(request).initiate(
        body.mode,
        body.assetCode,
        body.account,
        token,
        amount=body.amount,
        timeout=request.app.state.settings.http_timeout,
    )
    return {"id": session.id, "url": session.interactive_url, "type": session.type}


@router.post("/transaction")
def transaction_status(
    body: StatusRequestBody,
    request: Request,
    token: AccessToken = Depends(require_bearer_token),
) -> dict[str, Any]:
    if not body.id:
        raise MissingField("id")
    status = _tracker(request).poll_status(
        token, body.id, timeout=request.app.state.settings.http_timeout
    )
    return status.raw
