from __future__ import annotations

import logging
import time
from collections.abc import Callable

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..client.http import HttpTransport
from ..config import Settings
from ..envelope import ChallengePolicy
from ..errors import AnchorHandshakeError
from ..security import OriginSigner
from .errors import handshake_error_handler, http_error_handler
from .health import health
from .routes_auth import router as auth_router
from .routes_transfer import router as transfer_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    *,
    transport: HttpTransport | None = None,
    origin_signer: OriginSigner | None = None,
    policy: ChallengePolicy | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Build the Origin backend.

    Long-lived collaborators (transport, signer, policy) are created once and
    shared read-only; every request gets its own engine or tracker.
    """
    app = FastAPI(title="anchor-handshake")
    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
    )

    app.state.settings = settings
    app.state.transport = transport or HttpTransport(timeout=settings.http_timeout)
    app.state.origin_signer = origin_signer or OriginSigner.from_seed(settings.client_signing_key)
    app.state.policy = policy or ChallengePolicy()
    app.state.clock = clock

    app.add_exception_handler(AnchorHandshakeError, handshake_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_api_route("/health", health, methods=["GET"])
    app.include_router(auth_router)
    app.include_router(transfer_router)

    logger.info(
        f"Origin backend configured: home domain {settings.home_domain}, "
        f"client domain {settings.client_domain}, "
        f"client key set: {'Yes' if app.state.origin_signer.available else 'No'}"
    )
    return app
