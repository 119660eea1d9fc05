from __future__ import annotations

from dataclasses import dataclass

from ..errors import ChallengeExpired, ChallengeInvalid
from .codec import EnvelopeView

CLIENT_DOMAIN_OP = "client_domain"


@dataclass
class ChallengePolicy:
    """Structural checks applied to a challenge before the Subject signs it.

    Anchors differ in the details, so every rule can be switched off.
    """

    require_zero_sequence: bool = True
    require_manage_data_only: bool = True
    require_subject_match: bool = True
    require_client_domain_op: bool = True
    verify_server_signature: bool = True
    require_time_bounds: bool = True
    home_domain: str | None = None
    expiry_grace_seconds: int = 0
    not_before_grace_seconds: int = 300

    def check_expiry(self, view: EnvelopeView, now: float) -> None:
        bounds = view.time_bounds
        if bounds is None:
            if self.require_time_bounds:
                raise ChallengeInvalid("challenge has no time bounds")
            return
        if self.require_time_bounds and bounds.not_after == 0:
            raise ChallengeInvalid("challenge has no upper time bound")
        if bounds.is_expired(now, self.expiry_grace_seconds):
            raise ChallengeExpired(
                f"challenge expired at {bounds.not_after} (now {int(now)})",
                details={"not_before": bounds.not_before, "not_after": bounds.not_after},
            )

    def validate(
        self,
        view: EnvelopeView,
        *,
        subject_account: str,
        now: float,
        client_domain: str | None = None,
        origin_account: str | None = None,
        server_account: str | None = None,
    ) -> None:
        self.check_structure(
            view,
            client_domain=client_domain,
            origin_account=origin_account,
            server_account=server_account,
        )
        if self.require_subject_match and view.subject_account != subject_account:
            raise ChallengeInvalid(
                f"challenge was issued for {view.subject_account}, not {subject_account}"
            )

        bounds = view.time_bounds
        if bounds is not None and bounds.is_not_yet_valid(now, self.not_before_grace_seconds):
            raise ChallengeInvalid(f"challenge is not valid before {bounds.not_before}")
        self.check_expiry(view, now)

    def check_structure(
        self,
        view: EnvelopeView,
        *,
        client_domain: str | None = None,
        origin_account: str | None = None,
        server_account: str | None = None,
        require_client_domain: bool = False,
    ) -> None:
        """Shape checks that hold for any challenge, whoever asked for it.

        Run again right before the Origin key signs, since a resumed handshake
        may be handed an envelope this process never requested.
        """
        if not view.operations:
            raise ChallengeInvalid("challenge has no operations")
        if self.require_zero_sequence and view.sequence != 0:
            raise ChallengeInvalid(f"challenge sequence number is {view.sequence}, expected 0")
        if self.require_manage_data_only:
            kinds = {op.kind for op in view.operations}
            if kinds != {"ManageData"}:
                raise ChallengeInvalid(f"challenge contains non ManageData operations: {kinds}")
        if self.home_domain is not None:
            expected = f"{self.home_domain} auth"
            if view.operations[0].name != expected:
                raise ChallengeInvalid(
                    f"first operation is {view.operations[0].name!r}, expected {expected!r}"
                )
        if self.require_client_domain_op and (client_domain or require_client_domain):
            self._check_client_domain(view, client_domain, origin_account)
        if self.verify_server_signature and server_account:
            if view.transaction_source != server_account:
                raise ChallengeInvalid("challenge source is not the anchor signing key")
            if not view.signed_by(server_account):
                raise ChallengeInvalid("challenge is not signed by the anchor signing key")

    @staticmethod
    def _check_client_domain(
        view: EnvelopeView, client_domain: str | None, origin_account: str | None
    ) -> None:
        op = view.operation_named(CLIENT_DOMAIN_OP)
        if op is None:
            raise ChallengeInvalid("challenge has no client_domain operation")
        if op.value is None:
            raise ChallengeInvalid("client_domain operation has no value")
        if client_domain and op.value.decode("utf-8", "replace") != client_domain:
            raise ChallengeInvalid(f"client_domain operation does not name {client_domain}")
        if origin_account is not None and op.source != origin_account:
            raise ChallengeInvalid("client_domain operation is not sourced by the origin key")
