"""In-memory certificate registry — a LedgerGateway for tests and local development.

Behaves like a one-contract chain:
- add_certificate queues a pending transaction and returns its id.
- wait_for_confirmation mines it: the entry becomes visible to
  verify_certificate only after confirmation.
- Duplicate submissions are accepted (each gets its own transaction,
  the first entry stays authoritative) unless allow_duplicates=False,
  in which case the registry reverts.
- authorized restricts which senders may write.
- online=False makes every call fail with NetworkUnavailable.
- a contract address other than the registry's fails with ContractNotDeployed.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from certchain.errors import ContractNotDeployed, NetworkUnavailable, SubmissionRejected
from certchain.models.records import LedgerEntry, LedgerReceipt


DEFAULT_NETWORK_ID = 5777
DEFAULT_CONTRACT_ADDRESS = "0x" + "c0" * 20
DEFAULT_ACCOUNTS = (
    "0x" + "a1" * 20,
    "0x" + "b2" * 20,
)


@dataclass(frozen=True)
class _PendingTransaction:
    transaction_id: str
    fingerprint: str
    sender: str


class InMemoryLedger:
    """Deterministic registry double. Not durable."""

    def __init__(
        self,
        network_id: int = DEFAULT_NETWORK_ID,
        contract_address: str = DEFAULT_CONTRACT_ADDRESS,
        accounts: Iterable[str] = DEFAULT_ACCOUNTS,
        authorized: Optional[Iterable[str]] = None,
        allow_duplicates: bool = True,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._network_id = network_id
        self._contract_address = contract_address.lower()
        self._accounts = list(accounts)
        self._authorized = {a.lower() for a in authorized} if authorized is not None else None
        self._allow_duplicates = allow_duplicates
        self._clock = clock or (lambda: int(time.time()))
        self._entries: dict[str, LedgerEntry] = {}
        self._pending: dict[str, _PendingTransaction] = {}
        self._receipts: dict[str, LedgerReceipt] = {}
        self._block_number = 0
        self._tx_counter = 0
        self.online = True
        self.write_calls = 0
        self.read_calls = 0

    @property
    def contract_address(self) -> str:
        return self._contract_address

    @property
    def pending_transactions(self) -> list[str]:
        return list(self._pending)

    def _require_online(self) -> None:
        if not self.online:
            raise NetworkUnavailable("Ledger endpoint unreachable: in-memory ledger is offline")

    def _require_contract(self, contract_address: str) -> None:
        if contract_address.lower() != self._contract_address:
            raise ContractNotDeployed(f"No registry contract deployed at {contract_address}")

    def network_id(self) -> int:
        self._require_online()
        return self._network_id

    def default_account(self) -> str:
        self._require_online()
        if not self._accounts:
            raise SubmissionRejected("Ledger node exposes no accounts to submit from")
        return self._accounts[0]

    def add_certificate(self, contract_address: str, fingerprint: str, sender: str) -> str:
        self._require_online()
        self._require_contract(contract_address)
        self.write_calls += 1
        if self._authorized is not None and sender.lower() not in self._authorized:
            raise SubmissionRejected(f"Sender {sender} is not authorized to issue certificates")
        if not self._allow_duplicates and fingerprint in self._entries:
            raise SubmissionRejected("Registry rejected the certificate: already exists")

        self._tx_counter += 1
        seed = f"{self._tx_counter}:{fingerprint}:{sender}".encode("utf-8")
        transaction_id = "0x" + hashlib.sha256(seed).hexdigest()
        self._pending[transaction_id] = _PendingTransaction(transaction_id, fingerprint, sender)
        return transaction_id

    def wait_for_confirmation(
        self, transaction_id: str, timeout: Optional[float] = None,
    ) -> LedgerReceipt:
        self._require_online()
        if transaction_id in self._receipts:
            return self._receipts[transaction_id]
        pending = self._pending.pop(transaction_id, None)
        if pending is None:
            raise KeyError(f"Unknown transaction: {transaction_id}")

        self._block_number += 1
        succeeded = True
        if pending.fingerprint in self._entries and not self._allow_duplicates:
            succeeded = False
        elif pending.fingerprint not in self._entries:
            self._entries[pending.fingerprint] = LedgerEntry(
                issuer=pending.sender,
                timestamp=self._clock(),
            )
        receipt = LedgerReceipt(
            transaction_id=transaction_id,
            block_number=self._block_number,
            succeeded=succeeded,
        )
        self._receipts[transaction_id] = receipt
        return receipt

    def verify_certificate(self, contract_address: str, fingerprint: str) -> Optional[LedgerEntry]:
        self._require_online()
        self._require_contract(contract_address)
        self.read_calls += 1
        return self._entries.get(fingerprint)
