"""Ledger access — registry artifact, gateways and the commit client."""

from certchain.ledger.commit import LedgerCommitClient
from certchain.ledger.contract import CERTIFICATE_REGISTRY_ABI, ContractArtifact
from certchain.ledger.gateway import LedgerGateway, Web3Gateway
from certchain.ledger.memory import InMemoryLedger

__all__ = [
    "LedgerCommitClient",
    "CERTIFICATE_REGISTRY_ABI",
    "ContractArtifact",
    "LedgerGateway",
    "Web3Gateway",
    "InMemoryLedger",
]
