"""certchain — certificate issuance, fingerprinting and ledger verification."""

__version__ = "0.1.0"
