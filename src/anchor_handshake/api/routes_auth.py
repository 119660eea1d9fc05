from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from ..directory import EndpointResolver
from ..errors import MissingField
from ..handshake import HandshakeEngine

router = APIRouter()


class ChallengeRequestBody(BaseModel):
    account: str | None = None


class SubmitRequestBody(BaseModel):
    signedTransaction: str | None = None
    networkPassphrase: str | None = None


def _engine(request: Request) -> HandshakeEngine:
    state = request.app.state
    return HandshakeEngine(
        state.settings.home_domain,
        state.settings.client_domain,
        state.origin_signer,
        state.transport,
        resolver=EndpointResolver(state.transport, state.settings.dev_mode),
        policy=state.policy,
        clock=state.clock,
    )


@router.get("/.well-known/stellar.toml")
def origin_directory(request: Request) -> PlainTextResponse:
    """Serve the Origin's own directory so the anchor can verify client_domain."""
    state = request.app.state
    if not state.origin_signer.available:
        raise HTTPException(status_code=503, detail="CLIENT_SIGNING_KEY not configured on server")
    lines = [f'SIGNING_KEY = "{state.origin_signer.public_key}"']
    if state.settings.network_passphrase:
        lines.append(f'NETWORK_PASSPHRASE = "{state.settings.network_passphrase}"')
    return PlainTextResponse("\n".join(lines) + "\n")


@router.post("/api/sep10/get-challenge")
def get_challenge(body: ChallengeRequestBody, request: Request) -> dict:
    if not body.account:
        raise MissingField("account")
    settings = request.app.state.settings
    if not settings.client_domain:
        raise HTTPException(status_code=500, detail="CLIENT_DOMAIN not configured on server")

    challenge = _engine(request).request_challenge(body.account, timeout=settings.http_timeout)
    return {
        "transaction": challenge.envelope,
        "network_passphrase": challenge.network_id,
        "webAuthEndpoint": challenge.auth_endpoint,
    }


@router.post("/api/sep10/submit")
def submit(body: SubmitRequestBody, request: Request) -> dict:
    missing = [
        name for name in ("signedTransaction", "networkPassphrase") if not getattr(body, name)
    ]
    if missing:
        raise MissingField(*missing)

    token = _engine(request).complete(
        body.signedTransaction,
        body.networkPassphrase,
        timeout=request.app.state.settings.http_timeout,
    )
    return {"token": token.value}
