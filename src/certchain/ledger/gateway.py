"""Ledger gateway — the injected handle through which the engine reaches the ledger.

The commit client and verification service never touch a provider,
wallet or node directly. They talk to this Protocol. Swapping the
transport (HTTP RPC, a local dev chain, an in-memory registry) requires
zero changes to commit or verification logic.

Web3Gateway is the production implementation on web3.py. It translates
library failures at this boundary:
- transport failures (refused, reset, timed out) and RPC errors → NetworkUnavailable
- no contract code at the configured address → ContractNotDeployed
- reverts and node-level refusals on write → SubmissionRejected
- reverts on read → "not found" (None)
- a mined receipt with status 0 → LedgerReceipt(succeeded=False)

No call here imposes its own timeout or retries a request. The HTTP
provider is built with retries disabled and no request timeout unless
the caller passes one. wait_for_confirmation with timeout=None polls
for as long as the ledger takes; a caller supplied timeout lets web3's
TimeExhausted propagate untouched.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Protocol, runtime_checkable

import requests
import structlog
from eth_account import Account
from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    TimeExhausted,
    TransactionNotFound,
    Web3Exception,
)

from certchain.errors import ContractNotDeployed, NetworkUnavailable, SubmissionRejected
from certchain.ledger.contract import CERTIFICATE_REGISTRY_ABI
from certchain.models.records import LedgerEntry, LedgerReceipt


logger = structlog.get_logger("certchain.ledger.gateway")

ZERO_ADDRESS = "0x" + "0" * 40

_TRANSPORT_ERRORS = (requests.exceptions.RequestException, ConnectionError)


def _unreachable(exc: Exception) -> NetworkUnavailable:
    return NetworkUnavailable(f"Ledger endpoint unreachable: {exc}")


def _rpc_failed(exc: Exception) -> NetworkUnavailable:
    return NetworkUnavailable(f"Ledger request failed: {exc}")


@runtime_checkable
class LedgerGateway(Protocol):
    """Abstract contract for reaching the certificate registry."""

    def network_id(self) -> int:
        """Identifier of the connected network (keys the artifact's networks)."""
        ...

    def default_account(self) -> str:
        """Account used as submitter when the caller names none."""
        ...

    def add_certificate(self, contract_address: str, fingerprint: str, sender: str) -> str:
        """Submit a fingerprint; return the transaction id once accepted for processing."""
        ...

    def wait_for_confirmation(
        self, transaction_id: str, timeout: Optional[float] = None,
    ) -> LedgerReceipt:
        """Block until the transaction is mined."""
        ...

    def verify_certificate(self, contract_address: str, fingerprint: str) -> Optional[LedgerEntry]:
        """Read the registry entry for a fingerprint, or None if absent."""
        ...


def fingerprint_to_bytes32(fingerprint: str) -> bytes:
    """64 hex characters → the 32-byte contract argument."""
    raw = bytes.fromhex(fingerprint)
    if len(raw) != 32:
        raise ValueError(f"Fingerprint must encode 32 bytes, got {len(raw)}")
    return raw


class Web3Gateway:
    """LedgerGateway over a web3.py connection.

    Usage:
        gateway = Web3Gateway.from_rpc_url("http://127.0.0.1:8545")
        tx_id = gateway.add_certificate(address, fingerprint, gateway.default_account())
        receipt = gateway.wait_for_confirmation(tx_id)

    When a private key is given, transactions are signed locally with
    eth_account and sent raw. Otherwise the node's unlocked accounts
    send them.
    """

    def __init__(
        self,
        web3: Web3,
        abi: Optional[list[dict[str, Any]]] = None,
        private_key: Optional[str] = None,
        poll_interval: float = 0.5,
    ) -> None:
        self._w3 = web3
        self._abi = abi or CERTIFICATE_REGISTRY_ABI
        self._account = Account.from_key(private_key) if private_key else None
        self._poll_interval = poll_interval

    @classmethod
    def from_rpc_url(
        cls,
        rpc_url: str,
        abi: Optional[list[dict[str, Any]]] = None,
        private_key: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> Web3Gateway:
        """Build a gateway over an HTTP provider.

        web3's provider defaults (a 30 s request timeout and automatic
        retries on timeouts) are switched off: requests are sent once and
        wait as long as request_timeout allows, forever when it is None.
        """
        provider = Web3.HTTPProvider(
            rpc_url,
            request_kwargs={"timeout": request_timeout},
            exception_retry_configuration=None,
        )
        return cls(Web3(provider), abi=abi, private_key=private_key)

    @property
    def web3(self) -> Web3:
        return self._w3

    def _contract(self, contract_address: str) -> Any:
        return self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=self._abi,
        )

    def network_id(self) -> int:
        try:
            return int(self._w3.net.version)
        except _TRANSPORT_ERRORS as exc:
            raise _unreachable(exc) from exc
        except Web3Exception as exc:
            raise _rpc_failed(exc) from exc

    def default_account(self) -> str:
        if self._account is not None:
            return self._account.address
        try:
            accounts = self._w3.eth.accounts
        except _TRANSPORT_ERRORS as exc:
            raise _unreachable(exc) from exc
        except Web3Exception as exc:
            raise _rpc_failed(exc) from exc
        if not accounts:
            raise SubmissionRejected("Ledger node exposes no accounts to submit from")
        return accounts[0]

    def add_certificate(self, contract_address: str, fingerprint: str, sender: str) -> str:
        call = self._contract(contract_address).functions.addCertificate(
            fingerprint_to_bytes32(fingerprint)
        )
        try:
            if self._account is not None:
                if Web3.to_checksum_address(sender) != self._account.address:
                    raise SubmissionRejected(
                        f"Configured signing key belongs to {self._account.address}, "
                        f"not {sender}"
                    )
                tx = call.build_transaction({
                    "from": self._account.address,
                    "nonce": self._w3.eth.get_transaction_count(self._account.address),
                    "chainId": self._w3.eth.chain_id,
                })
                signed = self._account.sign_transaction(tx)
                tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = call.transact({"from": Web3.to_checksum_address(sender)})
        except _TRANSPORT_ERRORS as exc:
            raise _unreachable(exc) from exc
        except ContractLogicError as exc:
            raise SubmissionRejected(f"Registry rejected the certificate: {exc}") from exc
        except (ValueError, Web3Exception) as exc:
            raise SubmissionRejected(f"Ledger refused the transaction: {exc}") from exc

        transaction_id = Web3.to_hex(tx_hash)
        logger.debug("transaction_sent", transaction_id=transaction_id, sender=sender)
        return transaction_id

    def wait_for_confirmation(
        self, transaction_id: str, timeout: Optional[float] = None,
    ) -> LedgerReceipt:
        try:
            if timeout is not None:
                receipt = self._w3.eth.wait_for_transaction_receipt(
                    transaction_id, timeout=timeout, poll_latency=self._poll_interval,
                )
            else:
                receipt = self._poll_receipt(transaction_id)
        except TimeExhausted:
            raise
        except _TRANSPORT_ERRORS as exc:
            raise _unreachable(exc) from exc
        except Web3Exception as exc:
            raise _rpc_failed(exc) from exc

        return LedgerReceipt(
            transaction_id=transaction_id,
            block_number=int(receipt["blockNumber"]),
            succeeded=int(receipt.get("status", 1)) == 1,
        )

    def _poll_receipt(self, transaction_id: str) -> Any:
        while True:
            try:
                return self._w3.eth.get_transaction_receipt(transaction_id)
            except TransactionNotFound:
                time.sleep(self._poll_interval)

    def verify_certificate(self, contract_address: str, fingerprint: str) -> Optional[LedgerEntry]:
        call = self._contract(contract_address).functions.verifyCertificate(
            fingerprint_to_bytes32(fingerprint)
        )
        try:
            issuer, timestamp = call.call()
        except _TRANSPORT_ERRORS as exc:
            raise _unreachable(exc) from exc
        except ContractLogicError:
            return None
        except BadFunctionCallOutput as exc:
            # empty return data: no contract code at this address
            raise ContractNotDeployed(
                f"No registry contract deployed at {contract_address}"
            ) from exc
        except Web3Exception as exc:
            raise _rpc_failed(exc) from exc

        if not issuer or issuer == ZERO_ADDRESS or int(timestamp) == 0:
            return None
        return LedgerEntry(issuer=issuer, timestamp=int(timestamp))
