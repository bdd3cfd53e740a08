"""Tests for the deterministic renderer — proves reproducibility and wrap rules."""

import dataclasses
from datetime import date
from pathlib import Path

import pytest

from certchain.errors import RenderError
from certchain.models.document import create_document
from certchain.render.layout import DEFAULT_LAYOUT, CertificateLayout
from certchain.render.renderer import (
    DeterministicRenderer,
    FingerprintBinding,
    wrap_words,
)


class FixedWidthMeasurer:
    """Every character is 10 px wide at every size."""

    def width(self, text: str, size: int) -> float:
        return 10.0 * len(text)


@pytest.fixture
def renderer() -> DeterministicRenderer:
    return DeterministicRenderer()


@pytest.fixture
def document():
    return create_document(
        "Ada Lovelace",
        course_name="Analytical Engines",
        description="For outstanding notes on the engine.",
        issue_date="2026-10-19",
    )


class TestLayout:
    def test_template_geometry(self) -> None:
        layout = CertificateLayout()
        assert (layout.width, layout.height) == (1200, 800)
        assert layout.wrap_width == 1000
        assert layout.date_y == 680
        assert layout.center_x == 600

    def test_border_boxes_centre_stroke_on_inset(self) -> None:
        assert DEFAULT_LAYOUT.outer_border_box() == (30, 30, 1169, 769)
        assert DEFAULT_LAYOUT.inner_border_box() == (59, 59, 1140, 740)


class TestWrapWords:
    def test_empty_text_yields_single_empty_line(self) -> None:
        assert wrap_words("", len, 10) == [""]

    def test_exact_width_stays_on_line(self) -> None:
        # "aaaa bbbbb" measures exactly 10
        assert wrap_words("aaaa bbbbb", len, 10) == ["aaaa bbbbb"]

    def test_one_past_width_wraps(self) -> None:
        assert wrap_words("aaaa bbbbbb", len, 10) == ["aaaa", "bbbbbb"]

    def test_overlong_word_gets_own_line(self) -> None:
        assert wrap_words("x " + "y" * 20 + " z", len, 10) == ["x", "y" * 20, "z"]

    def test_overlong_first_word_no_empty_line(self) -> None:
        assert wrap_words("y" * 20 + " z", len, 10) == ["y" * 20, "z"]

    def test_whitespace_runs_collapse(self) -> None:
        assert wrap_words("a   b\n c", len, 100) == ["a b c"]


class TestDescriptionWrapping:
    def test_line_at_threshold_is_not_wrapped(self) -> None:
        renderer = DeterministicRenderer(measurer=FixedWidthMeasurer())
        text = "a" * 49 + " " + "b" * 50  # 100 chars = 1000 px
        assert renderer.wrap_description(text) == [text]

    def test_line_one_pixel_step_over_threshold_wraps(self) -> None:
        renderer = DeterministicRenderer(measurer=FixedWidthMeasurer())
        text = "a" * 49 + " " + "b" * 51  # 101 chars = 1010 px
        assert renderer.wrap_description(text) == ["a" * 49, "b" * 51]

    def test_rendered_lines_use_placeholder_when_empty(self, renderer) -> None:
        doc = create_document("Alice", issue_date="2026-10-19")
        rendered = renderer.render(doc)
        assert rendered.description_lines == (doc.display_description,)


class TestRender:
    def test_canvas_size(self, renderer, document) -> None:
        rendered = renderer.render(document)
        assert rendered.size == (1200, 800)
        assert rendered.png_bytes.startswith(b"\x89PNG\r\n\x1a\n")

    def test_render_is_deterministic(self, renderer, document) -> None:
        first = renderer.render(document)
        second = renderer.render(document)
        assert first.png_bytes == second.png_bytes
        assert first.canonical_bytes == second.canonical_bytes

    def test_separate_renderers_agree(self, document) -> None:
        a = DeterministicRenderer().render(document)
        b = DeterministicRenderer().render(document)
        assert a.canonical_bytes == b.canonical_bytes
        assert a.png_bytes == b.png_bytes

    def test_each_render_gets_own_surface(self, renderer, document) -> None:
        other = dataclasses.replace(document, recipient_name="Charles Babbage")
        first = renderer.render(document)
        second = renderer.render(other)
        assert first.raster is not second.raster
        # rendering the second document did not disturb the first raster
        assert renderer.render(document).png_bytes == first.png_bytes
        assert first.png_bytes != second.png_bytes

    def test_background_colour_applied(self, renderer) -> None:
        doc = create_document("Alice", background_color="#000000", issue_date="2026-10-19")
        rendered = renderer.render(doc)
        assert rendered.raster.getpixel((5, 5)) == (0, 0, 0)

    def test_white_corner_outside_borders(self, renderer, document) -> None:
        rendered = renderer.render(document)
        assert rendered.raster.getpixel((2, 2)) == (255, 255, 255)

    def test_border_is_tinted(self, renderer, document) -> None:
        rendered = renderer.render(document)
        r, g, b = rendered.raster.getpixel((40, 400))
        assert (r, g, b) != (255, 255, 255)
        assert b > g

    def test_render_date_comes_from_document(self, renderer) -> None:
        a = renderer.render(create_document("Alice", issue_date=date(2020, 1, 1)))
        b = renderer.render(create_document("Alice", issue_date=date(2020, 1, 2)))
        assert a.png_bytes != b.png_bytes
        assert a.canonical_bytes != b.canonical_bytes

    def test_missing_font_is_render_error(self, document, tmp_path: Path) -> None:
        renderer = DeterministicRenderer(
            font_path=tmp_path / "missing.ttf",
            measurer=FixedWidthMeasurer(),
        )
        with pytest.raises(RenderError):
            renderer.render(document)


class TestBinding:
    def test_document_binding_ignores_raster(self, document) -> None:
        rendered = DeterministicRenderer().render(document)
        assert rendered.binding == FingerprintBinding.DOCUMENT
        assert b'"image"' not in rendered.canonical_bytes

    def test_raster_binding_embeds_png(self, document) -> None:
        rendered = DeterministicRenderer(
            binding=FingerprintBinding.DOCUMENT_AND_RASTER,
        ).render(document)
        assert rendered.binding == FingerprintBinding.DOCUMENT_AND_RASTER
        assert b'"image":"iVBOR' in rendered.canonical_bytes

    def test_bindings_differ(self, document) -> None:
        doc_only = DeterministicRenderer().render(document)
        with_raster = DeterministicRenderer(
            binding=FingerprintBinding.DOCUMENT_AND_RASTER,
        ).render(document)
        assert doc_only.canonical_bytes != with_raster.canonical_bytes
