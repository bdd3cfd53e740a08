"""Registry contract artifact — ABI plus per-network deployment addresses.

The artifact has the shape written by Truffle builds:

    {
      "contractName": "CertificateContract",
      "abi": [...],
      "networks": {"5777": {"address": "0x..."}}
    }

The address is network-specific and must be resolved for the network
the gateway is connected to before first use. A missing entry is a
configuration problem, reported as ContractNotDeployed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from certchain.errors import ContractNotDeployed


ANY_NETWORK = "*"


CERTIFICATE_REGISTRY_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "addCertificate",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "certificateHash", "type": "bytes32"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "verifyCertificate",
        "stateMutability": "view",
        "inputs": [{"name": "certificateHash", "type": "bytes32"}],
        "outputs": [
            {"name": "issuer", "type": "address"},
            {"name": "timestamp", "type": "uint256"},
        ],
    },
    {
        "type": "event",
        "name": "CertificateAdded",
        "anonymous": False,
        "inputs": [
            {"name": "certificateHash", "type": "bytes32", "indexed": True},
            {"name": "issuer", "type": "address", "indexed": True},
            {"name": "timestamp", "type": "uint256", "indexed": False},
        ],
    },
]


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and known deployments of the certificate registry."""
    contract_name: str = "CertificateContract"
    abi: list[dict[str, Any]] = field(default_factory=lambda: list(CERTIFICATE_REGISTRY_ABI))
    networks: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContractArtifact:
        """Parse a build artifact. Networks without an address are skipped."""
        networks: dict[str, str] = {}
        for network_id, deployment in (data.get("networks") or {}).items():
            address = (deployment or {}).get("address")
            if address:
                networks[str(network_id)] = address
        return cls(
            contract_name=data.get("contractName", "CertificateContract"),
            abi=data.get("abi") or list(CERTIFICATE_REGISTRY_ABI),
            networks=networks,
        )

    @classmethod
    def from_file(cls, path: Path) -> ContractArtifact:
        """Load a build artifact from JSON.

        Raises:
            FileNotFoundError: If the artifact does not exist.
            ValueError: If the file is not a JSON object.
        """
        if not path.exists():
            raise FileNotFoundError(f"Contract artifact not found: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Contract artifact must be a JSON object: {path}")
        return cls.from_dict(data)

    @classmethod
    def single(cls, address: str, network_id: Optional[int] = None) -> ContractArtifact:
        """Artifact for one known deployment, with the bundled ABI.

        Without a network id the address applies to whichever network
        the gateway is connected to.
        """
        key = str(network_id) if network_id is not None else ANY_NETWORK
        return cls(networks={key: address})

    def resolve_address(self, network_id: int) -> str:
        """Return the registry address for a network.

        Raises:
            ContractNotDeployed: If no address is registered for the network.
        """
        address: Optional[str] = self.networks.get(str(network_id)) or self.networks.get(ANY_NETWORK)
        if not address:
            known = ", ".join(sorted(self.networks)) or "none"
            raise ContractNotDeployed(
                f"{self.contract_name} is not deployed to network {network_id} "
                f"(known networks: {known})"
            )
        return address
