"""Error taxonomy for issuance and verification.

Every failure surfaced by the engine carries a human-readable message
and a machine-distinguishable kind. No error is retried automatically:
transient ledger unavailability is reported, never masked, because
masking it risks reporting a false issuance or verification outcome.

Recovery expectations per kind:
- validation: the issuer corrects the document and resubmits.
- render: the drawing surface failed; the caller may retry.
- network_unavailable / contract_not_deployed: reconnect or reconfigure.
- submission_rejected: terminal for that submission.
- invalid_fingerprint_format: the verifier corrects the input.
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Machine-readable classification of engine failures."""
    VALIDATION = "validation"
    RENDER = "render"
    NETWORK_UNAVAILABLE = "network_unavailable"
    CONTRACT_NOT_DEPLOYED = "contract_not_deployed"
    SUBMISSION_REJECTED = "submission_rejected"
    INVALID_FINGERPRINT_FORMAT = "invalid_fingerprint_format"


class CertchainError(Exception):
    """Base class for all engine failures."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(CertchainError):
    """Issuer-supplied document fields are unusable."""
    kind = ErrorKind.VALIDATION


class RenderError(CertchainError):
    """The drawing surface could not be obtained, drawn or encoded."""
    kind = ErrorKind.RENDER


class NetworkUnavailable(CertchainError):
    """No ledger endpoint responded."""
    kind = ErrorKind.NETWORK_UNAVAILABLE


class ContractNotDeployed(CertchainError):
    """No registry contract is known for the connected network."""
    kind = ErrorKind.CONTRACT_NOT_DEPLOYED


class SubmissionRejected(CertchainError):
    """The ledger refused the write (revert, failed receipt, no authority)."""
    kind = ErrorKind.SUBMISSION_REJECTED


class InvalidFingerprintFormat(CertchainError):
    """A candidate fingerprint is not 64 hexadecimal characters."""
    kind = ErrorKind.INVALID_FINGERPRINT_FORMAT
