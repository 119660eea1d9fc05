"""Shared fixtures: an in-memory anchor and real keypairs."""

import json
import os
import time
from dataclasses import dataclass, field

import pytest
from stellar_sdk import Account, Asset, Keypair, Network, TransactionBuilder

from anchor_handshake.client.http import HttpResponse
from anchor_handshake.errors import TransportError

NETWORK = Network.TESTNET_NETWORK_PASSPHRASE
HOME_DOMAIN = "anchor.example"
CLIENT_DOMAIN = "example.com"
DIRECTORY_URL = f"https://{HOME_DOMAIN}/.well-known/stellar.toml"
AUTH_URL = f"https://{HOME_DOMAIN}/auth"
TRANSFER_URL = f"https://{HOME_DOMAIN}/sep24"


def json_response(body, status=200):
    return HttpResponse(status_code=status, text=json.dumps(body), body=body)


@dataclass
class Call:
    method: str
    url: str
    params: dict | None
    json: dict | None
    headers: dict | None
    timeout: float | None


class FakeTransport:
    """Stands in for HttpTransport; routes are keyed by (method, url)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, url, response):
        self.routes[(method, url)] = response

    def request(self, method, url, *, params=None, json=None, headers=None, timeout=None):
        call = Call(method, url, params, json, headers, timeout)
        self.calls.append(call)
        route = self.routes.get((method, url))
        if route is None:
            return HttpResponse(status_code=404, text="not found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(call)
        return route

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def calls_to(self, method, url):
        return [c for c in self.calls if c.method == method and c.url == url]


@dataclass
class FakeAnchor:
    transport: FakeTransport
    server: Keypair
    subject: Keypair
    origin: Keypair
    now: int
    issued: list = field(default_factory=list)

    def directory(self, auth=True, transfer=True, signing_key=True):
        lines = []
        if auth:
            lines.append(f'WEB_AUTH_ENDPOINT = "{AUTH_URL}"')
        if transfer:
            lines.append(f'TRANSFER_SERVER_SEP0024 = "{TRANSFER_URL}"')
        if signing_key:
            lines.append(f'SIGNING_KEY = "{self.server.public_key}"')
        lines.append(f'NETWORK_PASSPHRASE = "{NETWORK}"')
        return "\n".join(lines) + "\n"

    def publish_directory(self, **kwargs):
        text = self.directory(**kwargs)
        self.transport.add("GET", DIRECTORY_URL, HttpResponse(status_code=200, text=text))

    def build_challenge(
        self,
        account=None,
        *,
        issued_at=None,
        timeout=900,
        sequence=-1,
        client_domain=CLIENT_DOMAIN,
        client_domain_source=None,
        blank_client_domain=False,
        sign=True,
    ):
        issued_at = self.now if issued_at is None else issued_at
        builder = TransactionBuilder(
            source_account=Account(self.server.public_key, sequence),
            network_passphrase=NETWORK,
            base_fee=100,
        )
        builder.add_time_bounds(issued_at, issued_at + timeout)
        builder.append_manage_data_op(
            data_name=f"{HOME_DOMAIN} auth",
            data_value=os.urandom(48).hex()[:64],
            source=account or self.subject.public_key,
        )
        builder.append_manage_data_op(
            data_name="web_auth_domain",
            data_value=HOME_DOMAIN,
            source=self.server.public_key,
        )
        if client_domain:
            builder.append_manage_data_op(
                data_name="client_domain",
                data_value=None if blank_client_domain else client_domain,
                source=client_domain_source or self.origin.public_key,
            )
        envelope = builder.build()
        if sign:
            envelope.sign(self.server)
        return envelope.to_xdr()

    def build_payment(self, sequence=12345):
        """A subject-signable transaction that moves funds out of the origin account."""
        builder = TransactionBuilder(
            source_account=Account(self.origin.public_key, sequence),
            network_passphrase=NETWORK,
            base_fee=100,
        )
        builder.add_time_bounds(self.now, self.now + 900)
        builder.append_manage_data_op(
            data_name=f"{HOME_DOMAIN} auth",
            data_value="x" * 64,
            source=self.subject.public_key,
        )
        builder.append_payment_op(
            destination=self.subject.public_key,
            asset=Asset.native(),
            amount="1000",
            source=self.origin.public_key,
        )
        return builder.build().to_xdr()

    def serve_challenges(self, **kwargs):
        def handler(call):
            xdr = self.build_challenge(call.params["account"], **kwargs)
            self.issued.append(xdr)
            return json_response({"transaction": xdr, "network_passphrase": NETWORK})

        self.transport.add("GET", AUTH_URL, handler)

    def serve_token(self, token="eyJhbGciOiJFZERTQSJ9.test-token.sig"):
        self.transport.add("POST", AUTH_URL, json_response({"token": token}))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def anchor(transport):
    fake = FakeAnchor(
        transport=transport,
        server=Keypair.random(),
        subject=Keypair.random(),
        origin=Keypair.random(),
        now=int(time.time()),
    )
    fake.publish_directory()
    return fake


@pytest.fixture
def transport_error():
    return TransportError("GET https://anchor.example timed out")
