"""Tests for service directory resolution."""

import pytest

from anchor_handshake.client.http import HttpResponse
from anchor_handshake.directory import Directory, EndpointResolver, directory_url
from anchor_handshake.errors import (
    DirectoryError,
    DirectoryMalformed,
    DirectoryUnreachable,
    EndpointNotAdvertised,
)

from conftest import AUTH_URL, DIRECTORY_URL, HOME_DOMAIN, TRANSFER_URL


@pytest.mark.parametrize(
    "domain,dev_mode,expected",
    [
        ("anchor.example", False, "https://anchor.example/.well-known/stellar.toml"),
        ("anchor.example", True, "http://anchor.example/.well-known/stellar.toml"),
        ("https://anchor.example/", False, "https://anchor.example/.well-known/stellar.toml"),
        ("http://localhost:8000", False, "http://localhost:8000/.well-known/stellar.toml"),
    ],
)
def test_directory_url(domain, dev_mode, expected):
    assert directory_url(domain, dev_mode) == expected


class TestEndpointResolver:
    def test_resolves_both_endpoints(self, anchor, transport):
        directory = EndpointResolver(transport).resolve(HOME_DOMAIN)
        assert directory.auth_endpoint == AUTH_URL
        assert directory.transfer_endpoint == TRANSFER_URL
        assert directory.signing_key == anchor.server.public_key
        assert directory.network_passphrase is not None

    def test_reuses_a_single_fetch(self, anchor, transport):
        resolver = EndpointResolver(transport)
        resolver.auth_endpoint(HOME_DOMAIN)
        resolver.transfer_endpoint(HOME_DOMAIN)
        resolver.resolve(HOME_DOMAIN)
        assert len(transport.calls_to("GET", DIRECTORY_URL)) == 1

    def test_resolvers_do_not_share_cache(self, anchor, transport):
        EndpointResolver(transport).resolve(HOME_DOMAIN)
        EndpointResolver(transport).resolve(HOME_DOMAIN)
        assert len(transport.calls_to("GET", DIRECTORY_URL)) == 2

    def test_transport_failure(self, transport, transport_error):
        transport.add("GET", DIRECTORY_URL, transport_error)
        with pytest.raises(DirectoryUnreachable) as exc_info:
            EndpointResolver(transport).resolve(HOME_DOMAIN)
        assert "timed out" in exc_info.value.details

    def test_http_error(self, transport):
        transport.add("GET", DIRECTORY_URL, HttpResponse(status_code=404, text="no such file"))
        with pytest.raises(DirectoryUnreachable) as exc_info:
            EndpointResolver(transport).resolve(HOME_DOMAIN)
        assert exc_info.value.details == "no such file"

    def test_failed_fetch_is_not_cached(self, anchor, transport):
        transport.add("GET", DIRECTORY_URL, HttpResponse(status_code=503, text="busy"))
        resolver = EndpointResolver(transport)
        with pytest.raises(DirectoryError):
            resolver.resolve(HOME_DOMAIN)
        anchor.publish_directory()
        assert resolver.auth_endpoint(HOME_DOMAIN) == AUTH_URL

    def test_missing_transfer_key_only_fails_transfer(self, anchor, transport):
        anchor.publish_directory(transfer=False)
        resolver = EndpointResolver(transport)
        assert resolver.auth_endpoint(HOME_DOMAIN) == AUTH_URL
        with pytest.raises(EndpointNotAdvertised) as exc_info:
            resolver.transfer_endpoint(HOME_DOMAIN)
        assert exc_info.value.key == "TRANSFER_SERVER_SEP0024"

    def test_missing_auth_key(self, anchor, transport):
        anchor.publish_directory(auth=False)
        with pytest.raises(EndpointNotAdvertised) as exc_info:
            EndpointResolver(transport).auth_endpoint(HOME_DOMAIN)
        assert exc_info.value.key == "WEB_AUTH_ENDPOINT"


class TestDirectoryParse:
    def test_invalid_toml(self):
        with pytest.raises(DirectoryMalformed):
            Directory.parse(HOME_DOMAIN, 'WEB_AUTH_ENDPOINT = "unterminated')

    def test_duplicate_keys(self):
        text = 'WEB_AUTH_ENDPOINT = "https://a/auth"\nWEB_AUTH_ENDPOINT = "https://b/auth"\n'
        with pytest.raises(DirectoryMalformed):
            Directory.parse(HOME_DOMAIN, text)

    def test_non_string_endpoint(self):
        directory = Directory.parse(HOME_DOMAIN, "WEB_AUTH_ENDPOINT = 42\n")
        with pytest.raises(DirectoryMalformed):
            directory.auth_endpoint

    def test_ignores_unrelated_sections(self):
        text = (
            'WEB_AUTH_ENDPOINT = "https://anchor.example/auth/"\n'
            "[DOCUMENTATION]\n"
            'ORG_NAME = "Anchor"\n'
            "[[CURRENCIES]]\n"
            'code = "USDC"\n'
        )
        directory = Directory.parse(HOME_DOMAIN, text)
        assert directory.auth_endpoint == "https://anchor.example/auth"
        assert directory.signing_key is None
