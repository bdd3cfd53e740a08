"""Deterministic renderer — certificate document to raster and canonical bytes.

The renderer is reproducible by construction:
- Text measurement depends only on (font, size, text).
- The issue date comes from the document, never from the clock.
- Every render() call allocates its own drawing surface; no surface is
  reused across documents, so concurrent renders cannot interleave.
- PNG encoding carries no metadata chunks and a fixed compression level.

Binding choice (FingerprintBinding):
- DOCUMENT: canonical bytes are the document fields only. The raster is
  presentational and the fingerprint is independent of the rendering
  backend. Default.
- DOCUMENT_AND_RASTER: the encoded PNG is bound into the canonical
  bytes, so the fingerprint also pins the exact pixels. Reproducible
  only with identical fonts and Pillow builds on both sides.
"""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, runtime_checkable

import structlog
from PIL import Image, ImageDraw, ImageFont

from certchain.crypto.canonical import canonical_bytes
from certchain.errors import RenderError
from certchain.models.document import CertificateDocument, FontEmphasis
from certchain.render.layout import DEFAULT_LAYOUT, CertificateLayout


logger = structlog.get_logger("certchain.render.renderer")

PNG_COMPRESS_LEVEL = 6


class FingerprintBinding(str, enum.Enum):
    """What the canonical bytes bind to."""
    DOCUMENT = "document"
    DOCUMENT_AND_RASTER = "document_and_raster"


@runtime_checkable
class TextMeasurer(Protocol):
    """Pixel width of a string at a font size."""

    def width(self, text: str, size: int) -> float:
        ...


class FontCache:
    """Loads fonts per size once. Fonts are read-only, so sharing is safe."""

    def __init__(self, font_path: Optional[Path] = None) -> None:
        self._font_path = font_path
        self._fonts: dict[int, ImageFont.FreeTypeFont] = {}

    def get(self, size: int) -> ImageFont.FreeTypeFont:
        font = self._fonts.get(size)
        if font is None:
            try:
                if self._font_path is not None:
                    font = ImageFont.truetype(str(self._font_path), size)
                else:
                    font = ImageFont.load_default(size=size)
            except (OSError, ValueError) as exc:
                raise RenderError(
                    f"Cannot load font {self._font_path or 'default'} at {size}px: {exc}"
                ) from exc
            self._fonts[size] = font
        return font


class PillowMeasurer:
    """Measures text with the same fonts used for drawing."""

    def __init__(self, fonts: FontCache) -> None:
        self._fonts = fonts

    def width(self, text: str, size: int) -> float:
        return self._fonts.get(size).getlength(text)


def wrap_words(text: str, measure: Callable[[str], float], max_width: float) -> list[str]:
    """Greedy word wrap.

    Words are appended to the current line while the candidate line
    measures at most max_width. A candidate strictly wider than
    max_width flushes the current line and starts the next one with the
    overflowing word. A single word wider than max_width is placed on a
    line of its own. The final partial line is flushed after the loop.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


@dataclass(frozen=True)
class RenderedCertificate:
    """A rendered certificate. png_bytes is the artifact handed to export."""
    document: CertificateDocument
    raster: Image.Image
    png_bytes: bytes
    canonical_bytes: bytes
    description_lines: tuple[str, ...]
    binding: FingerprintBinding

    @property
    def size(self) -> tuple[int, int]:
        return self.raster.size


class DeterministicRenderer:
    """Renders CertificateDocuments onto a fixed template.

    Usage:
        renderer = DeterministicRenderer()
        rendered = renderer.render(document)
        rendered.png_bytes        # encoded raster for export
        rendered.canonical_bytes  # hashing input
    """

    def __init__(
        self,
        layout: CertificateLayout = DEFAULT_LAYOUT,
        binding: FingerprintBinding = FingerprintBinding.DOCUMENT,
        font_path: Optional[Path] = None,
        measurer: Optional[TextMeasurer] = None,
    ) -> None:
        self._layout = layout
        self._binding = FingerprintBinding(binding)
        self._fonts = FontCache(font_path)
        self._measurer: TextMeasurer = measurer or PillowMeasurer(self._fonts)

    @property
    def layout(self) -> CertificateLayout:
        return self._layout

    @property
    def binding(self) -> FingerprintBinding:
        return self._binding

    def wrap_description(self, text: str) -> list[str]:
        size = self._layout.description_size
        return wrap_words(
            text,
            lambda line: self._measurer.width(line, size),
            self._layout.wrap_width,
        )

    def render(self, doc: CertificateDocument) -> RenderedCertificate:
        """Draw the certificate and derive its canonical bytes.

        Raises:
            RenderError: If the surface cannot be allocated, drawn or encoded.
        """
        layout = self._layout
        lines = self.wrap_description(doc.display_description)

        try:
            image = Image.new("RGB", (layout.width, layout.height), doc.background_color)
            draw = ImageDraw.Draw(image, "RGBA")

            draw.rectangle(
                layout.outer_border_box(),
                outline=layout.outer_border_color,
                width=layout.outer_border_width,
            )
            draw.rectangle(
                layout.inner_border_box(),
                outline=layout.inner_border_color,
                width=layout.inner_border_width,
            )

            emphasised = doc.font_emphasis == FontEmphasis.BOLD
            self._text(draw, layout.title_text, layout.title_y, layout.title_size, doc, emphasised)
            if doc.course_name:
                self._text(draw, doc.course_name, layout.course_y, layout.course_size, doc)
            self._text(draw, layout.certify_text, layout.certify_y, layout.certify_size, doc)
            self._text(draw, doc.display_recipient, layout.name_y, layout.name_size, doc, emphasised)

            y = layout.description_y
            for line in lines:
                self._text(draw, line, y, layout.description_size, doc)
                y += layout.line_height

            self._text(
                draw,
                layout.date_prefix + doc.issue_date.isoformat(),
                layout.date_y,
                layout.date_size,
                doc,
            )

            buffer = io.BytesIO()
            image.save(buffer, format="PNG", optimize=False, compress_level=PNG_COMPRESS_LEVEL)
        except RenderError:
            raise
        except (OSError, ValueError, MemoryError) as exc:
            raise RenderError(f"Failed to render certificate: {exc}") from exc

        png = buffer.getvalue()
        raster_input = png if self._binding == FingerprintBinding.DOCUMENT_AND_RASTER else None
        data = canonical_bytes(doc.fingerprint_fields(), raster_input)

        logger.debug(
            "certificate_rendered",
            recipient=doc.recipient_name,
            description_lines=len(lines),
            png_bytes=len(png),
            binding=self._binding.value,
        )

        return RenderedCertificate(
            document=doc,
            raster=image,
            png_bytes=png,
            canonical_bytes=data,
            description_lines=tuple(lines),
            binding=self._binding,
        )

    def _text(
        self,
        draw: ImageDraw.ImageDraw,
        text: str,
        y: int,
        size: int,
        doc: CertificateDocument,
        emphasised: bool = False,
    ) -> None:
        draw.text(
            (self._layout.center_x, y),
            text,
            fill=doc.text_color,
            font=self._fonts.get(size),
            anchor="ms",
            stroke_width=1 if emphasised else 0,
            stroke_fill=doc.text_color,
        )
