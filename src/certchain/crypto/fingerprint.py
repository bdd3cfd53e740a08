"""Fingerprint engine — canonical bytes in, 64 hex characters out.

The strategy is a deployment-wide choice, never mixed: issuer and
verifier must agree on it, and a verifier must know which guarantee
it is relying on.

- SHA256: cryptographic, the default.
- KECCAK256: cryptographic, the hash Ethereum tooling calls "sha3".
- ROLLING32: 32-bit multiplicative rolling hash, zero-padded to 64 hex
  characters. Only 32 bits of entropy: collisions are easy to build
  (see tests). Kept so fingerprints minted by the weak variant can
  still be recomputed; it must never back an integrity claim.
"""

from __future__ import annotations

import enum
import hashlib
import re
from typing import TYPE_CHECKING

import structlog
from eth_utils import keccak

from certchain.errors import InvalidFingerprintFormat

if TYPE_CHECKING:
    from certchain.render.renderer import RenderedCertificate


logger = structlog.get_logger("certchain.crypto.fingerprint")

FINGERPRINT_LENGTH = 64
_FINGERPRINT_RE = re.compile(r"^[0-9a-f]{64}$", re.IGNORECASE)

_ROLLING_MULTIPLIER = 31
_ROLLING_MASK = 0xFFFFFFFF


class FingerprintStrategy(str, enum.Enum):
    """Tagged fingerprinting algorithm."""
    SHA256 = "sha256"
    KECCAK256 = "keccak256"
    ROLLING32 = "rolling32"

    @property
    def is_cryptographic(self) -> bool:
        return self != FingerprintStrategy.ROLLING32


def rolling_hash32(data: bytes) -> int:
    """h = h * 31 + byte, folded to 32 bits after every step."""
    h = 0
    for byte in data:
        h = (h * _ROLLING_MULTIPLIER + byte) & _ROLLING_MASK
    return h


def is_valid_fingerprint(candidate: object) -> bool:
    """Check the 64-hex-character syntax (case-insensitive, no prefix)."""
    return isinstance(candidate, str) and bool(_FINGERPRINT_RE.match(candidate))


def normalize_fingerprint(candidate: object) -> str:
    """Return the canonical lowercase form of a fingerprint.

    Surrounding whitespace and a single "0x" prefix (as printed by
    Ethereum tooling) are tolerated on input.

    Raises:
        InvalidFingerprintFormat: If the value is not 64 hex characters.
    """
    if not isinstance(candidate, str):
        raise InvalidFingerprintFormat("Fingerprint must be a string")
    text = candidate.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if not _FINGERPRINT_RE.match(text):
        raise InvalidFingerprintFormat(
            f"Invalid certificate fingerprint {candidate!r}: "
            f"expected {FINGERPRINT_LENGTH} hexadecimal characters"
        )
    return text.lower()


class FingerprintEngine:
    """Computes fingerprints with one fixed strategy.

    Usage:
        engine = FingerprintEngine(FingerprintStrategy.SHA256)
        fingerprint = engine.fingerprint(rendered.canonical_bytes)
    """

    def __init__(self, strategy: FingerprintStrategy = FingerprintStrategy.SHA256) -> None:
        self._strategy = FingerprintStrategy(strategy)
        if not self._strategy.is_cryptographic:
            logger.warning(
                "weak_fingerprint_strategy",
                strategy=self._strategy.value,
                detail="32-bit rolling hash; collisions are practical",
            )

    @property
    def strategy(self) -> FingerprintStrategy:
        return self._strategy

    def fingerprint(self, data: bytes) -> str:
        """Fingerprint arbitrary bytes. Total: never raises for bytes input."""
        if self._strategy == FingerprintStrategy.SHA256:
            return hashlib.sha256(data).hexdigest()
        if self._strategy == FingerprintStrategy.KECCAK256:
            return keccak(data).hex()
        return format(rolling_hash32(data), "x").zfill(FINGERPRINT_LENGTH)

    def fingerprint_document(self, rendered: RenderedCertificate) -> str:
        """Fingerprint a rendered certificate's canonical bytes."""
        return self.fingerprint(rendered.canonical_bytes)
