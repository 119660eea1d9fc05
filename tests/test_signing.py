"""Tests for Origin and Subject signature providers."""

import pickle
from pathlib import Path

import pytest
from stellar_sdk import Keypair

from anchor_handshake.envelope import ChallengeCodec
from anchor_handshake.errors import SigningError, SigningKeyUnavailable
from anchor_handshake.security import OriginSigner, SignatureProvider
from subject_wallet import SubjectSigner, WalletError

from conftest import NETWORK


class TestOriginSigner:
    def test_public_key_matches_seed(self):
        kp = Keypair.random()
        signer = OriginSigner.from_seed(kp.secret)
        assert signer.available
        assert signer.public_key == kp.public_key

    def test_signature_is_deterministic_and_verifies(self, anchor):
        signer = OriginSigner.from_seed(anchor.origin.secret)
        envelope = anchor.build_challenge()

        first = signer.sign(envelope, NETWORK)
        second = signer.sign(envelope, NETWORK)
        assert first.signature == second.signature
        assert first.signature_hint == anchor.origin.signature_hint()

        codec = ChallengeCodec()
        view = codec.decode(envelope, NETWORK)
        signed = codec.decode(codec.append_signature(view, first), NETWORK)
        assert signed.signed_by(anchor.origin.public_key)

    def test_matches_reference_keypair_signature(self, anchor):
        envelope = anchor.build_challenge()
        view = ChallengeCodec().decode(envelope, NETWORK)
        expected = anchor.origin.sign(view.tx_hash)
        signer = OriginSigner.from_seed(anchor.origin.secret)
        assert signer.sign(envelope, NETWORK).signature == expected

    def test_missing_key(self, anchor, caplog):
        signer = OriginSigner.from_seed(None)
        assert not signer.available
        assert signer.public_key is None
        assert "CLIENT_SIGNING_KEY not set" in caplog.text
        with pytest.raises(SigningKeyUnavailable):
            signer.sign(anchor.build_challenge(), NETWORK)

    def test_invalid_seed_is_not_echoed(self):
        bad_seed = "SBADSEED" + "A" * 48
        with pytest.raises(SigningError) as exc_info:
            OriginSigner.from_seed(bad_seed)
        assert bad_seed not in str(exc_info.value)
        assert exc_info.value.__cause__ is None

    def test_unparseable_envelope(self):
        signer = OriginSigner.from_seed(Keypair.random().secret)
        with pytest.raises(SigningError):
            signer.sign("garbage", NETWORK)

    def test_secret_never_exposed(self):
        kp = Keypair.random()
        signer = OriginSigner.from_seed(kp.secret)
        assert kp.secret not in repr(signer)
        assert not hasattr(signer, "__dict__")
        with pytest.raises(TypeError):
            pickle.dumps(signer)

    def test_satisfies_provider_protocol(self):
        assert isinstance(OriginSigner.from_seed(Keypair.random().secret), SignatureProvider)


class TestSubjectSigner:
    def test_sign_envelope_appends_subject_signature(self, anchor):
        wallet = SubjectSigner(anchor.subject)
        signed = wallet.sign_envelope(anchor.build_challenge(), NETWORK)

        view = ChallengeCodec().decode(signed, NETWORK)
        assert len(view.signatures) == 2
        assert view.signed_by(anchor.subject.public_key)

    def test_detached_signature_matches(self, anchor):
        wallet = SubjectSigner.from_secret(anchor.subject.secret)
        envelope = anchor.build_challenge()
        view = ChallengeCodec().decode(envelope, NETWORK)
        assert wallet.sign(envelope, NETWORK).signature == anchor.subject.sign(view.tx_hash)

    def test_requires_a_secret(self):
        with pytest.raises(WalletError):
            SubjectSigner(Keypair.from_public_key(Keypair.random().public_key))
        with pytest.raises(WalletError):
            SubjectSigner.from_secret("not-a-seed")

    def test_unparseable_envelope(self):
        with pytest.raises(WalletError):
            SubjectSigner(Keypair.random()).sign_envelope("garbage", NETWORK)

    def test_not_serializable(self):
        with pytest.raises(TypeError):
            pickle.dumps(SubjectSigner(Keypair.random()))

    def test_satisfies_provider_protocol(self):
        assert isinstance(SubjectSigner(Keypair.random()), SignatureProvider)

    def test_wallet_package_is_independent_of_origin_package(self):
        import subject_wallet

        package_dir = Path(subject_wallet.__file__).parent
        for source in package_dir.glob("*.py"):
            text = source.read_text()
            assert "import anchor_handshake" not in text
            assert "from anchor_handshake" not in text
