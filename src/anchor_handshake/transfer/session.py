"""Interactive deposit/withdraw session tracking (SEP-24)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..client.http import HttpTransport
from ..directory import EndpointResolver
from ..errors import (
    AnchorHandshakeError,
    InitiationFailed,
    MissingField,
    PollTransportError,
    StatusQueryRejected,
    TransportError,
    UnsupportedMode,
)
from ..types import AccessToken, TransferMode, TransferSession, TransferStatus

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    INITIATING = "initiating"
    AWAITING_INTERACTION = "awaiting_interaction"
    POLLING = "polling"
    TERMINAL = "terminal"


def _bearer(token: AccessToken | str) -> dict[str, str]:
    if isinstance(token, str):
        token = AccessToken(token)
    return token.authorization_header()


class SessionTracker:
    """Tracks one interactive transfer. Polling cadence is the caller's business."""

    def __init__(
        self,
        home_domain: str,
        transport: HttpTransport,
        resolver: EndpointResolver | None = None,
    ) -> None:
        self.home_domain = home_domain
        self.transport = transport
        self.resolver = resolver or EndpointResolver(transport)
        self.state = SessionState.NOT_STARTED
        self.session: TransferSession | None = None

    def reset(self) -> None:
        self.state = SessionState.NOT_STARTED
        self.session = None

    def fetch_info(self, timeout: float | None = None) -> dict[str, Any]:
        """Unauthenticated ``/info`` lookup of the transfer server's capabilities."""
        transfer_server = self.resolver.transfer_endpoint(self.home_domain, timeout=timeout)
        try:
            resp = self.transport.get(f"{transfer_server}/info", timeout=timeout)
        except TransportError as e:
            raise InitiationFailed("Failed to fetch transfer info", details=e.message) from e
        if not resp.ok or not isinstance(resp.body, dict):
            raise InitiationFailed("Failed to fetch transfer info", details=resp.details)
        return resp.body

    def initiate(
        self,
        mode: TransferMode | str,
        asset_code: str,
        account: str,
        token: AccessToken | str,
        amount: str | None = None,
        timeout: float | None = None,
    ) -> TransferSession:
        required = (("assetCode", asset_code), ("account", account))
        missing = [name for name, value in required if not value]
        if missing:
            raise MissingField(*missing)
        try:
            mode = TransferMode(mode)
        except ValueError:
            raise UnsupportedMode(str(mode)) from None
        self.reset()
        self.state = SessionState.INITIATING
        logger.info(
            f"Starting {mode.value.upper()}: asset {asset_code}, "
            f"amount {amount or 'not specified'}, account {account}"
        )
        try:
            return self._initiate(mode, asset_code, account, token, amount, timeout)
        except AnchorHandshakeError:
            self.state = SessionState.NOT_STARTED
            raise

    def _initiate(
        self,
        mode: TransferMode,
        asset_code: str,
        account: str,
        token: AccessToken | str,
        amount: str | None,
        timeout: float | None,
    ) -> TransferSession:
        transfer_server = self.resolver.transfer_endpoint(self.home_domain, timeout=timeout)
        url = f"{transfer_server}/transactions/{mode.value}/interactive"

        payload = {"asset_code": asset_code, "account": account}
        if amount is not None:
            payload["amount"] = amount

        try:
            resp = self.transport.post(url, json=payload, headers=_bearer(token), timeout=timeout)
        except TransportError as e:
            raise InitiationFailed(f"Failed to start {mode.value}", details=e.message) from e
        if not resp.ok or not isinstance(resp.body, dict):
            logger.warning(f"{mode.value} initiation rejected: {resp.details}")
            raise InitiationFailed(f"Failed to start {mode.value}", details=resp.details)

        tx_id = resp.body.get("id")
        interactive_url = resp.body.get("url")
        if not tx_id or not interactive_url:
            raise InitiationFailed(
                f"{mode.value} response is missing id or url", details=resp.body
            )

        self.session = TransferSession(
            id=str(tx_id),
            interactive_url=interactive_url,
            mode=mode,
            type=resp.body.get("type"),
        )
        self.state = SessionState.AWAITING_INTERACTION
        logger.info(f"Interactive URL received for transaction {tx_id}")
        return self.session

    def poll_status(
        self,
        token: AccessToken | str,
        transaction_id: str | None = None,
        timeout: float | None = None,
    ) -> TransferStatus:
        """Fetch the current status; a failed poll leaves the session as it was."""
        tx_id = transaction_id or (self.session.id if self.session else None)
        if not tx_id:
            raise MissingField("id")

        transfer_server = self.resolver.transfer_endpoint(self.home_domain, timeout=timeout)
        try:
            resp = self.transport.get(
                f"{transfer_server}/transaction",
                params={"id": tx_id},
                headers=_bearer(token),
                timeout=timeout,
            )
        except TransportError as e:
            raise PollTransportError(details=e.message) from e
        if not resp.ok or not isinstance(resp.body, dict):
            raise StatusQueryRejected(details=resp.details)

        transaction = resp.body.get("transaction")
        if not isinstance(transaction, dict) or not transaction.get("status"):
            raise StatusQueryRejected(
                "status response has no transaction status", details=resp.body
            )

        status = TransferStatus(
            id=str(transaction.get("id") or tx_id),
            status=str(transaction["status"]),
            message=transaction.get("message"),
            raw=transaction,
        )
        logger.info(f"Transaction {status.id} status: {status.status}")
        if status.message:
            logger.info(f"Message: {status.message}")

        if self.session is not None and self.session.id == tx_id:
            self.session.status = status.status
            self.session.message = status.message
        if self.session is None or self.session.id == tx_id:
            self.state = SessionState.TERMINAL if status.is_terminal else SessionState.POLLING
        return status
