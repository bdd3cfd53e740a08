"""Certificate rendering — fixed template, deterministic raster and bytes."""

from certchain.render.layout import DEFAULT_LAYOUT, CertificateLayout
from certchain.render.renderer import (
    DeterministicRenderer,
    FingerprintBinding,
    RenderedCertificate,
    TextMeasurer,
    wrap_words,
)

__all__ = [
    "DEFAULT_LAYOUT",
    "CertificateLayout",
    "DeterministicRenderer",
    "FingerprintBinding",
    "RenderedCertificate",
    "TextMeasurer",
    "wrap_words",
]
