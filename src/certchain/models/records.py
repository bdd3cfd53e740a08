"""Ledger-facing records: commit attempts, commit records, verification results.

A CommitRecord is owned by the ledger. The engine only ever holds a
cached copy built from the receipt the ledger returned; it never
invents or merges identities.

A VerificationResult is recomputed on every request and never persisted.
Its mode says which guarantee the verdict rests on: AUTHORITATIVE means
the registry contract confirmed the fingerprint, FORMAT_ONLY means only
the syntax was checked.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


class CommitState(str, enum.Enum):
    """Lifecycle of a single ledger submission."""
    IDLE = "idle"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    REJECTED = "rejected"


# Legal transitions: (from_state, to_state)
_COMMIT_TRANSITIONS: set[tuple[CommitState, CommitState]] = {
    (CommitState.IDLE, CommitState.SUBMITTING),
    (CommitState.SUBMITTING, CommitState.COMMITTED),
    (CommitState.SUBMITTING, CommitState.REJECTED),
}


class VerificationMode(str, enum.Enum):
    """Which guarantee a verification verdict rests on."""
    AUTHORITATIVE = "authoritative"
    FORMAT_ONLY = "format_only"


class FailureReason(str, enum.Enum):
    """Why a fingerprint was not verified."""
    INVALID_FORMAT = "invalid_fingerprint_format"
    NOT_FOUND = "not_found"
    NETWORK_UNAVAILABLE = "network_unavailable"
    CONTRACT_NOT_DEPLOYED = "contract_not_deployed"


@dataclass(frozen=True)
class LedgerEntry:
    """What the registry contract reports for a committed fingerprint."""
    issuer: str
    timestamp: int  # unix seconds, as stored on-chain

    @property
    def issued_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)


@dataclass(frozen=True)
class LedgerReceipt:
    """Confirmation data for a mined transaction."""
    transaction_id: str
    block_number: int
    succeeded: bool


@dataclass(frozen=True)
class CommitRecord:
    """A fingerprint the ledger accepted, with the identities it returned."""
    fingerprint: str
    transaction_id: str
    submitter: str
    contract_address: str
    network_id: int
    block_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "transaction_id": self.transaction_id,
            "submitter": self.submitter,
            "contract_address": self.contract_address,
            "network_id": self.network_id,
            "block_number": self.block_number,
        }


@dataclass
class CommitAttempt:
    """Mutable state of one submission: IDLE → SUBMITTING → COMMITTED | REJECTED.

    Transitions are fail-closed: anything outside the legal set raises.
    If the caller abandons a submission while it is SUBMITTING, the
    attempt keeps its transaction id (if the ledger already returned one)
    and no CommitRecord exists.
    """
    fingerprint: str
    submitter: str
    state: CommitState = CommitState.IDLE
    transaction_id: Optional[str] = None
    record: Optional[CommitRecord] = None
    reason: Optional[str] = None
    history: list[CommitState] = field(default_factory=lambda: [CommitState.IDLE])

    def _move(self, target: CommitState) -> None:
        if (self.state, target) not in _COMMIT_TRANSITIONS:
            raise RuntimeError(
                f"Illegal commit transition: {self.state.value} → {target.value}"
            )
        self.state = target
        self.history.append(target)

    def begin(self) -> None:
        self._move(CommitState.SUBMITTING)

    def accepted(self, transaction_id: str) -> None:
        """Record the pending transaction id; the state stays SUBMITTING."""
        if self.state != CommitState.SUBMITTING:
            raise RuntimeError(
                f"Cannot record a transaction while {self.state.value}"
            )
        self.transaction_id = transaction_id

    def commit(self, record: CommitRecord) -> None:
        self._move(CommitState.COMMITTED)
        self.record = record

    def reject(self, reason: str) -> None:
        self._move(CommitState.REJECTED)
        self.reason = reason

    @property
    def finished(self) -> bool:
        return self.state in (CommitState.COMMITTED, CommitState.REJECTED)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying one candidate fingerprint."""
    verified: bool
    fingerprint: str
    mode: VerificationMode
    issuer: Optional[str] = None
    issued_at: Optional[datetime] = None
    reason: Optional[FailureReason] = None
    message: str = ""

    @property
    def authoritative(self) -> bool:
        """True only when the ledger itself vouched for the verdict."""
        return self.mode == VerificationMode.AUTHORITATIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "verified": self.verified,
            "fingerprint": self.fingerprint,
            "mode": self.mode.value,
            "authoritative": self.authoritative,
            "issuer": self.issuer,
            "issued_at": (
                self.issued_at.strftime("%Y-%m-%dT%H:%M:%SZ")
                if self.issued_at is not None else None
            ),
            "reason": self.reason.value if self.reason is not None else None,
            "message": self.message,
        }
