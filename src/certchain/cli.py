"""certchain CLI — issue and verify certificates from the command line.

Usage:
    python -m certchain.cli fingerprint --recipient "Ada Lovelace" --course "Analytical Engines"
    python -m certchain.cli issue --recipient "Ada Lovelace" --description "..." --out-dir out/
    python -m certchain.cli verify 9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08
    python -m certchain.cli status

Configuration comes from CERTCHAIN_* environment variables, optionally
loaded from a .env file (see certchain.config). Machine-readable results
go to stdout as JSON; logs and errors go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from certchain.config import Settings
from certchain.crypto.fingerprint import FingerprintEngine
from certchain.errors import CertchainError
from certchain.export import export_filename, export_pdf, export_png
from certchain.models.document import FontEmphasis
from certchain.models.records import FailureReason
from certchain.render.renderer import DeterministicRenderer
from certchain.service import CertificateService
from certchain.telemetry import setup_logging


# 2 is taken by argparse usage errors
EXIT_LEDGER_UNAVAILABLE = 3

_LEDGER_FAILURES = {
    FailureReason.NETWORK_UNAVAILABLE.value,
    FailureReason.CONTRACT_NOT_DEPLOYED.value,
}


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env(env_file=args.env_file)
    setup_logging(settings.log_level, settings.log_format)
    return settings


def _make_service(settings: Settings) -> CertificateService:
    """Create a CertificateService wired to the configured ledger."""
    return CertificateService.from_settings(settings)


def _make_offline_service(settings: Settings) -> CertificateService:
    """Renderer and fingerprint engine only; no ledger access."""
    renderer = DeterministicRenderer(
        binding=settings.fingerprint_binding,
        font_path=settings.font_path,
    )
    return CertificateService(renderer, FingerprintEngine(settings.fingerprint_strategy))


def _document_fields(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "recipient_name": args.recipient,
        "course_name": args.course,
        "description": args.description,
        "issue_date": args.date,
        "background_color": args.bg,
        "text_color": args.fg,
        "font_emphasis": args.emphasis,
    }


def _public(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k != "rendered"}


def _fail(errors: list[str]) -> int:
    print(f"Failed: {'; '.join(errors)}", file=sys.stderr)
    return 1


def cmd_fingerprint(args: argparse.Namespace) -> int:
    """Render and fingerprint a certificate without committing it."""
    service = _make_offline_service(_load_settings(args))
    result = service.prepare(**_document_fields(args))
    if not result.success:
        return _fail(result.errors)
    print(json.dumps(_public(result.data), indent=2))
    return 0


def cmd_issue(args: argparse.Namespace) -> int:
    """Render, fingerprint, commit and export a certificate."""
    service = _make_service(_load_settings(args))

    def on_transaction(transaction_id: str) -> None:
        print(f"Transaction submitted: {transaction_id}", file=sys.stderr)

    result = service.issue(
        **_document_fields(args),
        on_transaction=on_transaction,
        timeout=args.timeout,
    )
    if not result.success:
        return _fail(result.errors)

    output = _public(result.data)
    if args.out_dir is not None:
        rendered = result.data["rendered"]
        formats = ["png", "pdf"] if args.format == "both" else [args.format]
        exported = []
        for fmt in formats:
            path = args.out_dir / export_filename(fmt)
            if fmt == "png":
                export_png(rendered, path)
            else:
                export_pdf(rendered, path)
            exported.append(str(path))
        output["exported"] = exported

    print(json.dumps(output, indent=2))
    print(
        "Save the certificate fingerprint above; it is needed to verify "
        "the certificate later.",
        file=sys.stderr,
    )
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify a fingerprint.

    Exit codes: 0 verified, 1 not verified (malformed or not found),
    3 the ledger could not answer (unreachable or registry not deployed).
    """
    service = _make_service(_load_settings(args))
    result = service.verify(args.fingerprint)
    if not result.success:
        return _fail(result.errors)
    print(json.dumps(result.data, indent=2))
    if result.data["verified"]:
        return 0
    if result.data["reason"] in _LEDGER_FAILURES:
        return EXIT_LEDGER_UNAVAILABLE
    return 1


def cmd_status(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    service = _make_service(settings)
    status: dict[str, Any] = {
        "rpc_url": settings.rpc_url,
        "strategy": settings.fingerprint_strategy.value,
        "cryptographic": settings.fingerprint_strategy.is_cryptographic,
        "binding": settings.fingerprint_binding.value,
        "format_only_verification": service.commit_client is None,
    }
    client = service.commit_client
    if client is not None:
        try:
            status["network_id"] = client.network_id
            status["contract_address"] = client.contract_address
        except CertchainError as exc:
            status["ledger_error"] = exc.to_dict()
    print(json.dumps(status, indent=2))
    return 0 if "ledger_error" not in status else 1


def _add_document_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--recipient", required=True, help="Recipient name")
    p.add_argument("--course", default="", help="Course or title line")
    p.add_argument("--description", default="", help="Certificate description")
    p.add_argument("--date", help="Issue date YYYY-MM-DD (default: today)")
    p.add_argument("--bg", default="#ffffff", help="Background colour (default: #ffffff)")
    p.add_argument("--fg", default="#1a1a1a", help="Text colour (default: #1a1a1a)")
    p.add_argument(
        "--emphasis", default=FontEmphasis.BOLD.value,
        choices=[e.value for e in FontEmphasis],
        help="Title/recipient emphasis (default: bold)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certchain",
        description="certchain — issue and verify ledger-backed certificates",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (default: search from the working directory)",
    )
    sub = parser.add_subparsers(dest="command")

    # fingerprint
    p_fp = sub.add_parser("fingerprint", help="Render and fingerprint without committing")
    _add_document_arguments(p_fp)

    # issue
    p_issue = sub.add_parser("issue", help="Issue a certificate and commit its fingerprint")
    _add_document_arguments(p_issue)
    p_issue.add_argument("--out-dir", type=Path, help="Directory for exported files")
    p_issue.add_argument(
        "--format", default="png", choices=["png", "pdf", "both"],
        help="Export format (default: png)",
    )
    p_issue.add_argument(
        "--timeout", type=float, default=None,
        help="Seconds to wait for confirmation (default: wait indefinitely)",
    )

    # verify
    p_verify = sub.add_parser("verify", help="Verify a certificate fingerprint")
    p_verify.add_argument("fingerprint", help="64-character hexadecimal fingerprint")

    # status
    sub.add_parser("status", help="Show ledger connection and fingerprint settings")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "fingerprint": cmd_fingerprint,
        "issue": cmd_issue,
        "verify": cmd_verify,
        "status": cmd_status,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except (ValueError, FileNotFoundError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
