"""Configuration settings for the Origin backend."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() == "true"


@dataclass
class Settings:
    """Process-wide settings, read once at startup.

    ``client_signing_key`` is the Origin's secret seed. It is only handed to
    ``OriginSigner.from_seed`` and is masked in ``repr``.
    """

    home_domain: str = "anchor-stage.owlpay.com"
    client_domain: str | None = None
    client_signing_key: str | None = field(default=None, repr=False)
    network_passphrase: str | None = None
    http_timeout: float = 30.0
    dev_mode: bool = False
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3001

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            home_domain=os.getenv("HOME_DOMAIN", cls.home_domain),
            client_domain=os.getenv("CLIENT_DOMAIN") or None,
            client_signing_key=os.getenv("CLIENT_SIGNING_KEY") or None,
            network_passphrase=os.getenv("NETWORK_PASSPHRASE") or None,
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            dev_mode=_env_flag("SDK_DEV_MODE"),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", "3001")),
        )
