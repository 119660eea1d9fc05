"""Type definitions for the anchor handshake."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

TERMINAL_STATUSES = frozenset({"completed", "error"})


@dataclass(frozen=True)
class TimeBounds:
    not_before: int
    not_after: int  # 0 means unbounded

    def is_expired(self, now: float, grace: int = 0) -> bool:
        if self.not_after == 0:
            return False
        return now > self.not_after + grace

    def is_not_yet_valid(self, now: float, grace: int = 0) -> bool:
        return now + grace < self.not_before


@dataclass(frozen=True)
class SignatureEntry:
    hint: bytes
    signature: bytes


@dataclass(frozen=True)
class OperationView:
    kind: str
    source: str | None
    name: str | None = None
    value: bytes | None = None


@dataclass
class Challenge:
    envelope: str  # base64 XDR, replaced as signatures are appended
    network_id: str
    source_account: str
    time_bounds: TimeBounds | None
    auth_endpoint: str | None = None


@dataclass(frozen=True)
class AccessToken:
    value: str

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.value}"}

    def masked(self) -> str:
        return f"{self.value[:8]}..." if len(self.value) > 8 else "***"

    def __repr__(self) -> str:
        return f"AccessToken({self.masked()!r})"

    def __str__(self) -> str:
        return self.value


class TransferMode(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


@dataclass
class TransferStatus:
    id: str
    status: str
    message: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass
class TransferSession:
    id: str
    interactive_url: str
    mode: TransferMode
    type: str | None = None
    status: str | None = None
    message: str | None = None
