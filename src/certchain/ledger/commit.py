"""Ledger commit client — submits fingerprints and tracks each submission.

Each submit() call owns a fresh CommitAttempt:

    IDLE → SUBMITTING → COMMITTED(tx) | REJECTED(reason)

The pending transaction id is handed to on_transaction as soon as the
ledger accepts the submission for processing, before confirmation, so
callers can show progress before finality.

The client performs no retries and imposes no timeout of its own. The
ledger owns write atomicity: if the caller abandons a submission while
it waits, the attempt is left SUBMITTING and no CommitRecord is built.
Duplicate fingerprints are passed through; whatever identity the ledger
returns is what the record carries.
"""

from __future__ import annotations

from typing import Callable, Optional

import structlog

from certchain.crypto.fingerprint import normalize_fingerprint
from certchain.errors import CertchainError, SubmissionRejected
from certchain.ledger.contract import ContractArtifact
from certchain.ledger.gateway import LedgerGateway
from certchain.models.records import CommitAttempt, CommitRecord, LedgerEntry


logger = structlog.get_logger("certchain.ledger.commit")


class LedgerCommitClient:
    """Commits certificate fingerprints to the registry contract.

    Usage:
        client = LedgerCommitClient(gateway, artifact)
        record = client.submit(fingerprint, on_transaction=print)
        entry = client.lookup(fingerprint)
    """

    def __init__(self, gateway: LedgerGateway, artifact: ContractArtifact) -> None:
        self._gateway = gateway
        self._artifact = artifact
        self._network_id: Optional[int] = None
        self._contract_address: Optional[str] = None
        self._last_attempt: Optional[CommitAttempt] = None

    @property
    def gateway(self) -> LedgerGateway:
        return self._gateway

    @property
    def network_id(self) -> int:
        self._resolve()
        assert self._network_id is not None
        return self._network_id

    @property
    def contract_address(self) -> str:
        """Registry address for the connected network, resolved on first use.

        Raises:
            NetworkUnavailable: If the ledger cannot be reached.
            ContractNotDeployed: If the artifact has no entry for the network.
        """
        self._resolve()
        assert self._contract_address is not None
        return self._contract_address

    @property
    def last_attempt(self) -> Optional[CommitAttempt]:
        """The most recent submission, cached for display."""
        return self._last_attempt

    def _resolve(self) -> None:
        if self._contract_address is not None:
            return
        network_id = self._gateway.network_id()
        address = self._artifact.resolve_address(network_id)
        self._network_id = network_id
        self._contract_address = address
        logger.info("registry_resolved", network_id=network_id, contract_address=address)

    def submit(
        self,
        fingerprint: str,
        submitter: Optional[str] = None,
        on_transaction: Optional[Callable[[str], None]] = None,
        timeout: Optional[float] = None,
    ) -> CommitRecord:
        """Commit a fingerprint and wait for the ledger to confirm it.

        Args:
            fingerprint: 64 hex characters (an "0x" prefix is tolerated).
            submitter: Issuer account; defaults to the gateway's account.
            on_transaction: Called with the transaction id as soon as the
                ledger accepts the submission for processing.
            timeout: Confirmation timeout chosen by the caller. None waits
                for as long as the ledger takes.

        Raises:
            InvalidFingerprintFormat: If the fingerprint is malformed.
            NetworkUnavailable: If no ledger endpoint responds.
            ContractNotDeployed: If no registry is known for the network.
            SubmissionRejected: If the ledger refuses or reverts the write.
        """
        normalized = normalize_fingerprint(fingerprint)
        contract_address = self.contract_address
        sender = submitter or self._gateway.default_account()

        attempt = CommitAttempt(fingerprint=normalized, submitter=sender)
        self._last_attempt = attempt
        attempt.begin()

        try:
            transaction_id = self._gateway.add_certificate(contract_address, normalized, sender)
        except CertchainError as exc:
            attempt.reject(exc.message)
            logger.warning(
                "commit_rejected",
                fingerprint=normalized,
                kind=exc.kind.value,
                reason=exc.message,
            )
            raise

        attempt.accepted(transaction_id)
        logger.info(
            "commit_submitted",
            fingerprint=normalized,
            transaction_id=transaction_id,
            submitter=sender,
        )
        if on_transaction is not None:
            on_transaction(transaction_id)

        try:
            receipt = self._gateway.wait_for_confirmation(transaction_id, timeout=timeout)
        except CertchainError as exc:
            attempt.reject(exc.message)
            logger.warning(
                "commit_rejected",
                fingerprint=normalized,
                transaction_id=transaction_id,
                kind=exc.kind.value,
                reason=exc.message,
            )
            raise

        if not receipt.succeeded:
            reason = f"Transaction {transaction_id} reverted in block {receipt.block_number}"
            attempt.reject(reason)
            logger.warning(
                "commit_rejected",
                fingerprint=normalized,
                transaction_id=transaction_id,
                reason=reason,
            )
            raise SubmissionRejected(reason)

        record = CommitRecord(
            fingerprint=normalized,
            transaction_id=receipt.transaction_id,
            submitter=sender,
            contract_address=contract_address,
            network_id=self.network_id,
            block_number=receipt.block_number,
        )
        attempt.commit(record)
        logger.info(
            "commit_confirmed",
            fingerprint=normalized,
            transaction_id=record.transaction_id,
            block_number=record.block_number,
        )
        return record

    def lookup(self, fingerprint: str) -> Optional[LedgerEntry]:
        """Read-only registry query for an already-normalized fingerprint."""
        return self._gateway.verify_certificate(self.contract_address, fingerprint)
