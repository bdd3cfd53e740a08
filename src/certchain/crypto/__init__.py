"""Cryptographic primitives — canonical serialization and fingerprinting."""

from certchain.crypto.canonical import canonical_bytes, canonical_json
from certchain.crypto.fingerprint import (
    FingerprintEngine,
    FingerprintStrategy,
    is_valid_fingerprint,
    normalize_fingerprint,
)

__all__ = [
    "canonical_bytes",
    "canonical_json",
    "FingerprintEngine",
    "FingerprintStrategy",
    "is_valid_fingerprint",
    "normalize_fingerprint",
]
