"""Verification service — answers whether a fingerprint was committed.

Step 1 is always a syntax check, done before any network access.
Step 2 depends on the mode:

- AUTHORITATIVE: the registry contract is queried; the issuer and
  issue time in a positive result come from the ledger record.
- FORMAT_ONLY: no ledger is consulted and any well-formed fingerprint
  is accepted. This proves format validity, not provenance. The result
  is tagged FORMAT_ONLY (authoritative=False) and the mode must be
  opted into explicitly with allow_format_only=True.

Ledger unavailability is reported as its own failure reason, never as
"not found".
"""

from __future__ import annotations

from typing import Optional

import structlog

from certchain.crypto.fingerprint import normalize_fingerprint
from certchain.errors import (
    ContractNotDeployed,
    InvalidFingerprintFormat,
    NetworkUnavailable,
)
from certchain.ledger.commit import LedgerCommitClient
from certchain.models.records import (
    FailureReason,
    VerificationMode,
    VerificationResult,
)


logger = structlog.get_logger("certchain.verification")


class VerificationService:
    """Verifies candidate fingerprints against the registry.

    Usage:
        service = VerificationService(commit_client)
        result = service.verify("9f86d081...")
        if result.verified and result.authoritative:
            ...
    """

    def __init__(
        self,
        client: Optional[LedgerCommitClient] = None,
        mode: VerificationMode = VerificationMode.AUTHORITATIVE,
        allow_format_only: bool = False,
    ) -> None:
        mode = VerificationMode(mode)
        if mode == VerificationMode.AUTHORITATIVE and client is None:
            raise ValueError("Authoritative verification requires a ledger commit client")
        if mode == VerificationMode.FORMAT_ONLY and not allow_format_only:
            raise ValueError(
                "Format-only verification does not check provenance and must be "
                "enabled explicitly (allow_format_only=True)"
            )
        self._client = client
        self._mode = mode

    @property
    def mode(self) -> VerificationMode:
        return self._mode

    def verify(self, candidate: str) -> VerificationResult:
        """Verify one candidate fingerprint. Never raises for engine failures."""
        try:
            fingerprint = normalize_fingerprint(candidate)
        except InvalidFingerprintFormat as exc:
            logger.info("verification_completed", verified=False, reason="invalid_format")
            return VerificationResult(
                verified=False,
                fingerprint=candidate if isinstance(candidate, str) else "",
                mode=self._mode,
                reason=FailureReason.INVALID_FORMAT,
                message=exc.message,
            )

        if self._mode == VerificationMode.FORMAT_ONLY:
            logger.warning(
                "format_only_verification",
                fingerprint=fingerprint,
                detail="accepted on syntax alone; ledger not consulted",
            )
            return VerificationResult(
                verified=True,
                fingerprint=fingerprint,
                mode=VerificationMode.FORMAT_ONLY,
                message=(
                    "Fingerprint is well-formed. Provenance was NOT checked: "
                    "no ledger was consulted."
                ),
            )

        return self._verify_on_ledger(fingerprint)

    def _verify_on_ledger(self, fingerprint: str) -> VerificationResult:
        assert self._client is not None
        try:
            entry = self._client.lookup(fingerprint)
        except NetworkUnavailable as exc:
            logger.warning("verification_completed", verified=False, reason="network_unavailable")
            return self._failure(fingerprint, FailureReason.NETWORK_UNAVAILABLE, exc.message)
        except ContractNotDeployed as exc:
            logger.warning("verification_completed", verified=False, reason="contract_not_deployed")
            return self._failure(fingerprint, FailureReason.CONTRACT_NOT_DEPLOYED, exc.message)

        if entry is None:
            logger.info("verification_completed", verified=False, reason="not_found")
            return self._failure(
                fingerprint,
                FailureReason.NOT_FOUND,
                "No certificate with this fingerprint was committed to the registry",
            )

        logger.info("verification_completed", verified=True, issuer=entry.issuer)
        return VerificationResult(
            verified=True,
            fingerprint=fingerprint,
            mode=VerificationMode.AUTHORITATIVE,
            issuer=entry.issuer,
            issued_at=entry.issued_at,
            message="Certificate verified successfully",
        )

    def _failure(self, fingerprint: str, reason: FailureReason, message: str) -> VerificationResult:
        return VerificationResult(
            verified=False,
            fingerprint=fingerprint,
            mode=VerificationMode.AUTHORITATIVE,
            reason=reason,
            message=message,
        )
