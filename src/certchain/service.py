"""Certificate service — unified facade for issuance and verification.

This is the primary interface for programmatic access to certchain.
It orchestrates:
- Document validation (issuer input → CertificateDocument)
- Deterministic rendering (document → raster + canonical bytes)
- Fingerprinting (canonical bytes → 64 hex characters)
- Ledger commit (fingerprint → CommitRecord)
- Verification (candidate fingerprint → VerificationResult)

All operations produce typed results. Every engine failure becomes an
unsuccessful ServiceResult carrying the error message and its kind;
none is swallowed and none is retried. Steps run sequentially for one
certificate at a time, and each call owns its own document, bytes and
fingerprint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Optional, Union

import structlog

from certchain.config import Settings
from certchain.crypto.fingerprint import FingerprintEngine
from certchain.errors import CertchainError, ErrorKind
from certchain.ledger.commit import LedgerCommitClient
from certchain.ledger.contract import ContractArtifact
from certchain.ledger.gateway import Web3Gateway
from certchain.models.document import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_TEXT_COLOR,
    CertificateDocument,
    FontEmphasis,
    create_document,
)
from certchain.models.records import VerificationMode
from certchain.render.renderer import DeterministicRenderer, RenderedCertificate
from certchain.verification import VerificationService


logger = structlog.get_logger("certchain.service")


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    error_kind: Optional[str] = None

    @classmethod
    def failure(cls, exc: CertchainError) -> ServiceResult:
        return cls(success=False, errors=[exc.message], error_kind=exc.kind.value)


class CertificateService:
    """Issuance and verification facade.

    Usage:
        service = CertificateService.from_settings(Settings.from_env())

        result = service.issue(recipient_name="Alice", description="...")
        if result.success:
            fingerprint = result.data["fingerprint"]
            export_png(result.data["rendered"], Path("alice.png"))

        check = service.verify(fingerprint)
        check.data["verified"]
    """

    def __init__(
        self,
        renderer: DeterministicRenderer,
        engine: FingerprintEngine,
        commit_client: Optional[LedgerCommitClient] = None,
        verifier: Optional[VerificationService] = None,
    ) -> None:
        self._renderer = renderer
        self._engine = engine
        self._commit_client = commit_client
        if verifier is None and commit_client is not None:
            verifier = VerificationService(commit_client)
        self._verifier = verifier

    @classmethod
    def from_settings(cls, settings: Settings) -> CertificateService:
        """Wire the web3 gateway, registry artifact, renderer and engine.

        Raises:
            ValueError: If neither a contract artifact nor an address is set
                and format-only verification is not allowed.
        """
        renderer = DeterministicRenderer(
            binding=settings.fingerprint_binding,
            font_path=settings.font_path,
        )
        engine = FingerprintEngine(settings.fingerprint_strategy)

        if settings.contract_artifact is None and settings.contract_address is None:
            if not settings.allow_format_only:
                raise ValueError(
                    "No registry configured: set CERTCHAIN_CONTRACT_ARTIFACT or "
                    "CERTCHAIN_CONTRACT_ADDRESS"
                )
            verifier = VerificationService(
                mode=VerificationMode.FORMAT_ONLY, allow_format_only=True,
            )
            return cls(renderer, engine, verifier=verifier)

        if settings.contract_artifact is not None:
            artifact = ContractArtifact.from_file(settings.contract_artifact)
        else:
            assert settings.contract_address is not None
            artifact = ContractArtifact.single(settings.contract_address)
        gateway = Web3Gateway.from_rpc_url(
            settings.rpc_url,
            abi=artifact.abi,
            private_key=settings.private_key,
            request_timeout=settings.rpc_timeout,
        )
        client = LedgerCommitClient(gateway, artifact)
        return cls(renderer, engine, commit_client=client)

    @property
    def engine(self) -> FingerprintEngine:
        return self._engine

    @property
    def commit_client(self) -> Optional[LedgerCommitClient]:
        return self._commit_client

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def _render(self, doc: CertificateDocument) -> tuple[RenderedCertificate, str]:
        rendered = self._renderer.render(doc)
        return rendered, self._engine.fingerprint_document(rendered)

    def prepare(
        self,
        recipient_name: str,
        course_name: str = "",
        description: str = "",
        issue_date: Union[date, str, None] = None,
        background_color: str = DEFAULT_BACKGROUND_COLOR,
        text_color: str = DEFAULT_TEXT_COLOR,
        font_emphasis: Union[FontEmphasis, str] = FontEmphasis.BOLD,
    ) -> ServiceResult:
        """Validate, render and fingerprint without touching the ledger."""
        try:
            doc = create_document(
                recipient_name=recipient_name,
                course_name=course_name,
                description=description,
                issue_date=issue_date,
                background_color=background_color,
                text_color=text_color,
                font_emphasis=font_emphasis,
            )
            rendered, fingerprint = self._render(doc)
        except CertchainError as exc:
            logger.warning("prepare_failed", kind=exc.kind.value, error=exc.message)
            return ServiceResult.failure(exc)

        return ServiceResult(success=True, data={
            "fingerprint": fingerprint,
            "strategy": self._engine.strategy.value,
            "binding": rendered.binding.value,
            "issue_date": doc.issue_date.isoformat(),
            "rendered": rendered,
        })

    def issue(
        self,
        recipient_name: str,
        course_name: str = "",
        description: str = "",
        issue_date: Union[date, str, None] = None,
        background_color: str = DEFAULT_BACKGROUND_COLOR,
        text_color: str = DEFAULT_TEXT_COLOR,
        font_emphasis: Union[FontEmphasis, str] = FontEmphasis.BOLD,
        submitter: Optional[str] = None,
        on_transaction: Optional[Callable[[str], None]] = None,
        timeout: Optional[float] = None,
    ) -> ServiceResult:
        """Validate, render, fingerprint and commit one certificate.

        on_transaction receives the pending transaction id before the
        ledger confirms it. The rendered certificate in the result is
        the one the fingerprint was computed from; export it as-is.
        """
        if self._commit_client is None:
            return ServiceResult(
                success=False,
                errors=["No ledger configured: certificates cannot be issued"],
                error_kind=ErrorKind.CONTRACT_NOT_DEPLOYED.value,
            )

        prepared = self.prepare(
            recipient_name=recipient_name,
            course_name=course_name,
            description=description,
            issue_date=issue_date,
            background_color=background_color,
            text_color=text_color,
            font_emphasis=font_emphasis,
        )
        if not prepared.success:
            return prepared

        fingerprint = prepared.data["fingerprint"]
        try:
            record = self._commit_client.submit(
                fingerprint,
                submitter=submitter,
                on_transaction=on_transaction,
                timeout=timeout,
            )
        except CertchainError as exc:
            logger.warning(
                "issue_failed",
                fingerprint=fingerprint,
                kind=exc.kind.value,
                error=exc.message,
            )
            return ServiceResult(
                success=False,
                errors=[exc.message],
                data={"fingerprint": fingerprint},
                error_kind=exc.kind.value,
            )

        logger.info(
            "certificate_issued",
            fingerprint=fingerprint,
            transaction_id=record.transaction_id,
        )
        return ServiceResult(success=True, data={
            **prepared.data,
            **record.to_dict(),
        })

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self, candidate: str) -> ServiceResult:
        """Verify a candidate fingerprint.

        success reflects whether the check ran; data["verified"] is the
        verdict and data["authoritative"] says whether the ledger backed it.
        """
        if self._verifier is None:
            return ServiceResult(
                success=False,
                errors=["No verifier configured"],
                error_kind=ErrorKind.CONTRACT_NOT_DEPLOYED.value,
            )
        result = self._verifier.verify(candidate)
        errors = [result.message] if not result.verified else []
        return ServiceResult(
            success=True,
            errors=errors,
            data=result.to_dict(),
        )
