"""Certificate template geometry.

All positions are absolute pixel coordinates on a fixed canvas. Text
y-values are baselines; text is centred on the canvas midline.
Colours with an alpha channel are blended onto the background.
"""

from __future__ import annotations

from dataclasses import dataclass


RGBA = tuple[int, int, int, int]


@dataclass(frozen=True)
class CertificateLayout:
    """Fixed canvas, border and text-line geometry for one template."""
    width: int = 1200
    height: int = 800

    outer_border_inset: int = 40
    outer_border_width: int = 20
    outer_border_color: RGBA = (147, 51, 234, 77)  # rgba(147, 51, 234, 0.3)
    inner_border_inset: int = 60
    inner_border_width: int = 2
    inner_border_color: RGBA = (147, 51, 234, 51)  # rgba(147, 51, 234, 0.2)

    title_text: str = "CERTIFICATE OF ACHIEVEMENT"
    title_size: int = 48
    title_y: int = 180

    course_size: int = 32
    course_y: int = 230

    certify_text: str = "This is to certify that"
    certify_size: int = 32
    certify_y: int = 280

    name_size: int = 40
    name_y: int = 380

    description_size: int = 24
    description_y: int = 480
    line_height: int = 40
    wrap_margin: int = 200

    date_size: int = 20
    date_bottom_offset: int = 120
    date_prefix: str = "Issued on: "

    @property
    def center_x(self) -> float:
        return self.width / 2

    @property
    def wrap_width(self) -> int:
        """Widest a description line may measure before it wraps."""
        return self.width - self.wrap_margin

    @property
    def date_y(self) -> int:
        return self.height - self.date_bottom_offset

    def outer_border_box(self) -> tuple[int, int, int, int]:
        """Outer rectangle with the stroke centred on the inset line."""
        half = self.outer_border_width // 2
        inset = self.outer_border_inset - half
        return (inset, inset, self.width - inset - 1, self.height - inset - 1)

    def inner_border_box(self) -> tuple[int, int, int, int]:
        half = self.inner_border_width // 2
        inset = self.inner_border_inset - half
        return (inset, inset, self.width - inset - 1, self.height - inset - 1)


DEFAULT_LAYOUT = CertificateLayout()
