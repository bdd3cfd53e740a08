"""Tests for the ledger commit client — proves the submission lifecycle."""

import pytest

from certchain.errors import (
    ContractNotDeployed,
    InvalidFingerprintFormat,
    NetworkUnavailable,
    SubmissionRejected,
)
from certchain.ledger.commit import LedgerCommitClient
from certchain.ledger.contract import ContractArtifact
from certchain.ledger.gateway import LedgerGateway
from certchain.ledger.memory import (
    DEFAULT_ACCOUNTS,
    DEFAULT_CONTRACT_ADDRESS,
    DEFAULT_NETWORK_ID,
    InMemoryLedger,
)
from certchain.models.records import CommitAttempt, CommitState


FP = "ab" * 32


class Abandoned(Exception):
    pass


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger(clock=lambda: 1_700_000_000)


@pytest.fixture
def client(ledger: InMemoryLedger) -> LedgerCommitClient:
    artifact = ContractArtifact.single(DEFAULT_CONTRACT_ADDRESS, DEFAULT_NETWORK_ID)
    return LedgerCommitClient(ledger, artifact)


class TestCommitAttempt:
    def test_happy_path_history(self) -> None:
        attempt = CommitAttempt(fingerprint=FP, submitter=DEFAULT_ACCOUNTS[0])
        attempt.begin()
        attempt.accepted("0x01")
        attempt.reject("reverted")
        assert attempt.history == [CommitState.IDLE, CommitState.SUBMITTING, CommitState.REJECTED]
        assert attempt.finished

    def test_cannot_skip_submitting(self) -> None:
        attempt = CommitAttempt(fingerprint=FP, submitter=DEFAULT_ACCOUNTS[0])
        with pytest.raises(RuntimeError, match="Illegal commit transition"):
            attempt.reject("too early")

    def test_terminal_states_are_final(self) -> None:
        attempt = CommitAttempt(fingerprint=FP, submitter=DEFAULT_ACCOUNTS[0])
        attempt.begin()
        attempt.reject("no")
        with pytest.raises(RuntimeError):
            attempt.begin()

    def test_transaction_only_while_submitting(self) -> None:
        attempt = CommitAttempt(fingerprint=FP, submitter=DEFAULT_ACCOUNTS[0])
        with pytest.raises(RuntimeError):
            attempt.accepted("0x01")


class TestSubmit:
    def test_in_memory_ledger_is_a_gateway(self, ledger) -> None:
        assert isinstance(ledger, LedgerGateway)

    def test_commit_record(self, client, ledger) -> None:
        record = client.submit(FP)
        assert record.fingerprint == FP
        assert record.submitter == DEFAULT_ACCOUNTS[0]
        assert record.contract_address == DEFAULT_CONTRACT_ADDRESS
        assert record.network_id == DEFAULT_NETWORK_ID
        assert record.block_number == 1
        assert record.transaction_id.startswith("0x")
        assert client.last_attempt.state == CommitState.COMMITTED
        assert client.last_attempt.record == record

    def test_fingerprint_normalized_before_submit(self, client) -> None:
        record = client.submit("0x" + FP.upper())
        assert record.fingerprint == FP

    def test_malformed_fingerprint_never_reaches_ledger(self, client, ledger) -> None:
        with pytest.raises(InvalidFingerprintFormat):
            client.submit("xyz")
        assert ledger.write_calls == 0

    def test_explicit_submitter(self, client, ledger) -> None:
        record = client.submit(FP, submitter=DEFAULT_ACCOUNTS[1])
        assert record.submitter == DEFAULT_ACCOUNTS[1]
        assert ledger.verify_certificate(DEFAULT_CONTRACT_ADDRESS, FP).issuer == DEFAULT_ACCOUNTS[1]

    def test_transaction_reported_before_confirmation(self, client, ledger) -> None:
        seen = []

        def on_transaction(tx_id: str) -> None:
            # not yet mined: still pending and invisible to readers
            seen.append(tx_id)
            assert tx_id in ledger.pending_transactions
            assert ledger.verify_certificate(DEFAULT_CONTRACT_ADDRESS, FP) is None
            assert client.last_attempt.state == CommitState.SUBMITTING
            assert client.last_attempt.transaction_id == tx_id

        record = client.submit(FP, on_transaction=on_transaction)
        assert seen == [record.transaction_id]
        assert ledger.pending_transactions == []

    def test_abandoned_submission_leaves_no_record(self, client, ledger) -> None:
        def on_transaction(tx_id: str) -> None:
            raise Abandoned(tx_id)

        with pytest.raises(Abandoned):
            client.submit(FP, on_transaction=on_transaction)
        attempt = client.last_attempt
        assert attempt.state == CommitState.SUBMITTING
        assert attempt.transaction_id is not None
        assert attempt.record is None
        assert not attempt.finished

    def test_each_submit_has_fresh_attempt(self, client) -> None:
        client.submit(FP)
        first = client.last_attempt
        client.submit("cd" * 32)
        assert client.last_attempt is not first
        assert first.state == CommitState.COMMITTED


class TestSubmitFailures:
    def test_unauthorized_sender_rejected(self) -> None:
        ledger = InMemoryLedger(authorized=[DEFAULT_ACCOUNTS[1]])
        client = LedgerCommitClient(ledger, ContractArtifact.single(DEFAULT_CONTRACT_ADDRESS))
        with pytest.raises(SubmissionRejected, match="not authorized"):
            client.submit(FP)
        assert client.last_attempt.state == CommitState.REJECTED
        assert "not authorized" in client.last_attempt.reason
        assert ledger.verify_certificate(DEFAULT_CONTRACT_ADDRESS, FP) is None

    def test_network_down(self, client, ledger) -> None:
        ledger.online = False
        with pytest.raises(NetworkUnavailable):
            client.submit(FP)
        assert ledger.write_calls == 0

    def test_network_drops_during_confirmation(self, client, ledger) -> None:
        def on_transaction(tx_id: str) -> None:
            ledger.online = False

        with pytest.raises(NetworkUnavailable):
            client.submit(FP, on_transaction=on_transaction)
        assert client.last_attempt.state == CommitState.REJECTED

    def test_contract_not_deployed_on_network(self, ledger) -> None:
        client = LedgerCommitClient(ledger, ContractArtifact.single(DEFAULT_CONTRACT_ADDRESS, 1))
        with pytest.raises(ContractNotDeployed):
            client.submit(FP)
        assert ledger.write_calls == 0

    def test_wrong_registry_address(self, ledger) -> None:
        client = LedgerCommitClient(ledger, ContractArtifact.single("0x" + "dd" * 20))
        with pytest.raises(ContractNotDeployed):
            client.submit(FP)
        assert client.last_attempt.state == CommitState.REJECTED

    def test_duplicate_passes_through_and_first_entry_stays(self, client, ledger) -> None:
        first = client.submit(FP, submitter=DEFAULT_ACCOUNTS[0])
        second = client.submit(FP, submitter=DEFAULT_ACCOUNTS[1])
        assert first.transaction_id != second.transaction_id
        assert client.lookup(FP).issuer == DEFAULT_ACCOUNTS[0]

    def test_duplicate_rejected_when_registry_forbids(self) -> None:
        ledger = InMemoryLedger(allow_duplicates=False)
        client = LedgerCommitClient(ledger, ContractArtifact.single(DEFAULT_CONTRACT_ADDRESS))
        client.submit(FP)
        with pytest.raises(SubmissionRejected, match="already exists"):
            client.submit(FP)
        assert client.last_attempt.state == CommitState.REJECTED

    def test_failed_receipt_is_rejection(self) -> None:
        ledger = InMemoryLedger(allow_duplicates=False)
        client = LedgerCommitClient(ledger, ContractArtifact.single(DEFAULT_CONTRACT_ADDRESS))
        seen = []

        def race(tx_id: str) -> None:
            # a competing commit of the same fingerprint lands first
            if not seen:
                seen.append(tx_id)
                other = ledger.add_certificate(DEFAULT_CONTRACT_ADDRESS, FP, DEFAULT_ACCOUNTS[1])
                ledger.wait_for_confirmation(other)

        with pytest.raises(SubmissionRejected, match="reverted"):
            client.submit(FP, on_transaction=race)
        assert client.last_attempt.state == CommitState.REJECTED


class TestResolution:
    def test_address_resolved_once(self, client, ledger) -> None:
        assert client.contract_address == DEFAULT_CONTRACT_ADDRESS
        assert client.network_id == DEFAULT_NETWORK_ID

    def test_lookup_unknown(self, client) -> None:
        assert client.lookup(FP) is None
