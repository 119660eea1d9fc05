from __future__ import annotations

from fastapi import Header, HTTPException

from ..types import AccessToken


async def require_bearer_token(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> AccessToken:
    """Extract the anchor-issued bearer token forwarded by the client."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")
    token = authorization[len("Bearer ") :].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")
    return AccessToken(token)
