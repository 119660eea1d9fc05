"""Service directory (stellar.toml) resolution."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from typing import Any

from ..client.http import HttpTransport
from ..errors import DirectoryMalformed, DirectoryUnreachable, EndpointNotAdvertised, TransportError

logger = logging.getLogger(__name__)

DIRECTORY_PATH = "/.well-known/stellar.toml"
AUTH_ENDPOINT_KEY = "WEB_AUTH_ENDPOINT"
TRANSFER_ENDPOINT_KEY = "TRANSFER_SERVER_SEP0024"
SIGNING_KEY_KEY = "SIGNING_KEY"
NETWORK_PASSPHRASE_KEY = "NETWORK_PASSPHRASE"


def directory_url(domain: str, dev_mode: bool = False) -> str:
    """Build the directory URL for a domain; an explicit scheme is kept as-is."""
    base = domain.rstrip("/")
    if "://" not in base:
        base = f"{'http' if dev_mode else 'https'}://{base}"
    return f"{base}{DIRECTORY_PATH}"


@dataclass(frozen=True)
class Directory:
    domain: str
    entries: dict[str, Any]

    @classmethod
    def parse(cls, domain: str, text: str) -> Directory:
        try:
            entries = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise DirectoryMalformed(f"{domain} directory is not valid TOML: {e}") from e
        return cls(domain=domain, entries=entries)

    def endpoint(self, key: str) -> str:
        value = self.entries.get(key)
        if not value:
            raise EndpointNotAdvertised(key, self.domain)
        if not isinstance(value, str):
            raise DirectoryMalformed(f"{key} in {self.domain} directory is not a string")
        return value.rstrip("/")

    @property
    def auth_endpoint(self) -> str:
        return self.endpoint(AUTH_ENDPOINT_KEY)

    @property
    def transfer_endpoint(self) -> str:
        return self.endpoint(TRANSFER_ENDPOINT_KEY)

    @property
    def signing_key(self) -> str | None:
        value = self.entries.get(SIGNING_KEY_KEY)
        return value if isinstance(value, str) and value else None

    @property
    def network_passphrase(self) -> str | None:
        value = self.entries.get(NETWORK_PASSPHRASE_KEY)
        return value if isinstance(value, str) and value else None


class EndpointResolver:
    """Resolves a domain to its advertised endpoints.

    One fetch per domain for the lifetime of the resolver, so a handshake or
    session that resolves twice makes a single round trip.
    """

    def __init__(self, transport: HttpTransport, dev_mode: bool = False) -> None:
        self.transport = transport
        self.dev_mode = dev_mode
        self._cache: dict[str, Directory] = {}

    def resolve(self, domain: str, timeout: float | None = None) -> Directory:
        cached = self._cache.get(domain)
        if cached is not None:
            return cached

        url = directory_url(domain, self.dev_mode)
        logger.info(f"Fetching directory from: {url}")
        try:
            resp = self.transport.get(url, timeout=timeout)
        except TransportError as e:
            raise DirectoryUnreachable(f"{url} could not be fetched", details=e.message) from e
        if not resp.ok:
            raise DirectoryUnreachable(
                f"{url} returned HTTP {resp.status_code}", details=resp.details
            )

        directory = Directory.parse(domain, resp.text)
        self._cache[domain] = directory
        return directory

    def auth_endpoint(self, domain: str, timeout: float | None = None) -> str:
        return self.resolve(domain, timeout=timeout).auth_endpoint

    def transfer_endpoint(self, domain: str, timeout: float | None = None) -> str:
        return self.resolve(domain, timeout=timeout).transfer_endpoint
