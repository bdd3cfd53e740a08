"""Core data models for certificate issuance and verification."""

from certchain.models.document import (
    CertificateDocument,
    FontEmphasis,
    create_document,
)
from certchain.models.records import (
    CommitAttempt,
    CommitRecord,
    CommitState,
    FailureReason,
    LedgerEntry,
    LedgerReceipt,
    VerificationMode,
    VerificationResult,
)

__all__ = [
    "CertificateDocument",
    "FontEmphasis",
    "create_document",
    "CommitAttempt",
    "CommitRecord",
    "CommitState",
    "FailureReason",
    "LedgerEntry",
    "LedgerReceipt",
    "VerificationMode",
    "VerificationResult",
]
