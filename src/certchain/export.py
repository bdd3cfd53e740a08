"""Export surface — PNG and PDF downloads of an issued certificate.

Exports take the RenderedCertificate produced at issuance and write its
encoded PNG bytes as-is. Nothing is re-rendered between fingerprinting
and export, so the file a recipient downloads carries exactly the
raster the canonical bytes were derived from.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from certchain.render.renderer import RenderedCertificate


def export_filename(fmt: str, now: Optional[datetime] = None) -> str:
    """certificate_<epoch milliseconds>.<fmt>, the download naming scheme."""
    if now is None:
        now = datetime.now(timezone.utc)
    return f"certificate_{int(now.timestamp() * 1000)}.{fmt}"


def export_png(rendered: RenderedCertificate, path: Path) -> Path:
    """Write the lossless PNG exactly as rendered."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(rendered.png_bytes)
    return path


def export_pdf(rendered: RenderedCertificate, path: Path) -> Path:
    """Write a one-page landscape PDF sized to the raster, image full-page."""
    width, height = rendered.size
    path.parent.mkdir(parents=True, exist_ok=True)
    pdf = canvas.Canvas(str(path), pagesize=(width, height))
    pdf.setTitle(f"Certificate: {rendered.document.recipient_name}")
    pdf.drawImage(
        ImageReader(io.BytesIO(rendered.png_bytes)),
        0, 0,
        width=width,
        height=height,
    )
    pdf.showPage()
    pdf.save()
    return path
