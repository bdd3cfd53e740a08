"""Runtime configuration — environment variables, optionally from a .env file.

    CERTCHAIN_RPC_URL               ledger RPC endpoint
    CERTCHAIN_RPC_TIMEOUT           seconds per RPC request (default: no timeout)
    CERTCHAIN_CONTRACT_ARTIFACT     path to the registry build artifact (JSON)
    CERTCHAIN_CONTRACT_ADDRESS      registry address, used when no artifact is set
    CERTCHAIN_PRIVATE_KEY           sign locally instead of using node accounts
    CERTCHAIN_FINGERPRINT_STRATEGY  sha256 | keccak256 | rolling32
    CERTCHAIN_FINGERPRINT_BINDING   document | document_and_raster
    CERTCHAIN_ALLOW_FORMAT_ONLY     true to verify by syntax alone (no ledger)
    CERTCHAIN_FONT_PATH             TrueType font used for drawing
    CERTCHAIN_LOG_LEVEL             DEBUG | INFO | WARNING | ERROR
    CERTCHAIN_LOG_FORMAT            console | json
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from certchain.crypto.fingerprint import FingerprintStrategy
from certchain.render.renderer import FingerprintBinding


DEFAULT_RPC_URL = "http://127.0.0.1:8545"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Deployment-wide settings. One fingerprint strategy per deployment."""
    rpc_url: str = DEFAULT_RPC_URL
    rpc_timeout: Optional[float] = None
    contract_artifact: Optional[Path] = None
    contract_address: Optional[str] = None
    private_key: Optional[str] = None
    fingerprint_strategy: FingerprintStrategy = FingerprintStrategy.SHA256
    fingerprint_binding: FingerprintBinding = FingerprintBinding.DOCUMENT
    allow_format_only: bool = False
    font_path: Optional[Path] = None
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Settings:
        """Build settings from the environment.

        When env_file is given it is loaded first (existing variables win).
        Pass environ to read from a mapping instead of os.environ.

        Raises:
            ValueError: If a variable holds an unusable value.
        """
        if environ is None:
            if env_file is not None:
                load_dotenv(env_file)
            else:
                load_dotenv()
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = environ.get(name)
            return value if value else None

        try:
            strategy = FingerprintStrategy(
                (get("CERTCHAIN_FINGERPRINT_STRATEGY") or "sha256").lower()
            )
        except ValueError as exc:
            raise ValueError(
                f"CERTCHAIN_FINGERPRINT_STRATEGY must be one of "
                f"{[s.value for s in FingerprintStrategy]}"
            ) from exc

        try:
            binding = FingerprintBinding(
                (get("CERTCHAIN_FINGERPRINT_BINDING") or "document").lower()
            )
        except ValueError as exc:
            raise ValueError(
                f"CERTCHAIN_FINGERPRINT_BINDING must be one of "
                f"{[b.value for b in FingerprintBinding]}"
            ) from exc

        rpc_timeout: Optional[float] = None
        raw_timeout = get("CERTCHAIN_RPC_TIMEOUT")
        if raw_timeout is not None:
            try:
                rpc_timeout = float(raw_timeout)
            except ValueError as exc:
                raise ValueError(
                    f"CERTCHAIN_RPC_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
                ) from exc
            if rpc_timeout <= 0:
                raise ValueError(f"CERTCHAIN_RPC_TIMEOUT must be positive, got {raw_timeout!r}")

        log_format = (get("CERTCHAIN_LOG_FORMAT") or "console").lower()
        if log_format not in ("console", "json"):
            raise ValueError(f"CERTCHAIN_LOG_FORMAT must be 'console' or 'json', got {log_format!r}")

        artifact = get("CERTCHAIN_CONTRACT_ARTIFACT")
        font = get("CERTCHAIN_FONT_PATH")

        return cls(
            rpc_url=get("CERTCHAIN_RPC_URL") or DEFAULT_RPC_URL,
            rpc_timeout=rpc_timeout,
            contract_artifact=Path(artifact) if artifact else None,
            contract_address=get("CERTCHAIN_CONTRACT_ADDRESS"),
            private_key=get("CERTCHAIN_PRIVATE_KEY"),
            fingerprint_strategy=strategy,
            fingerprint_binding=binding,
            allow_format_only=_parse_bool(
                "CERTCHAIN_ALLOW_FORMAT_ONLY", environ.get("CERTCHAIN_ALLOW_FORMAT_ONLY", ""),
            ),
            font_path=Path(font) if font else None,
            log_level=(get("CERTCHAIN_LOG_LEVEL") or "INFO").upper(),
            log_format=log_format,
        )
