from __future__ import annotations

import logging

from ..config import Settings


def run() -> None:
    """Main entry point: serve the Origin backend with uvicorn."""
    import uvicorn

    from ..api import create_app

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger = logging.getLogger(__name__)

    settings = Settings.from_env()
    app = create_app(settings)

    logger.info("=" * 50)
    logger.info("Client domain auth server")
    logger.info(f"Port: {settings.port}")
    logger.info(f"Home Domain: {settings.home_domain}")
    logger.info(f"Client Domain: {settings.client_domain}")
    logger.info("=" * 50)

    config = uvicorn.Config(app, host=settings.host, port=settings.port)
    server = uvicorn.Server(config)
    server.run()
