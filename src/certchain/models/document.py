"""Certificate document model — the canonical record of one certificate.

A CertificateDocument holds exactly the issuer's input plus the
presentation attributes that are serialized into the fingerprint.

Invariants:
- recipient_name is never blank.
- The record is frozen. Editing a field means building a new document
  (dataclasses.replace) and computing a new fingerprint.
- Placeholder text ("Recipient Name", "Course Name", ...) exists only
  for drawing. fingerprint_fields() always returns the raw values, so
  a document with an empty course never fingerprints like one whose
  course is literally "Course Name".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

from PIL import ImageColor

from certchain.errors import ValidationError


RECIPIENT_PLACEHOLDER = "Recipient Name"
COURSE_PLACEHOLDER = "Course Name"
DESCRIPTION_PLACEHOLDER = "Certificate Description"

DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_TEXT_COLOR = "#1a1a1a"


class FontEmphasis(str, enum.Enum):
    """Weight used for the title and recipient lines."""
    NORMAL = "normal"
    BOLD = "bold"


@dataclass(frozen=True)
class CertificateDocument:
    """One certificate's content. Build it through create_document()."""
    recipient_name: str
    issue_date: date
    course_name: str = ""
    description: str = ""
    background_color: str = DEFAULT_BACKGROUND_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    font_emphasis: FontEmphasis = FontEmphasis.BOLD

    @property
    def display_recipient(self) -> str:
        return self.recipient_name or RECIPIENT_PLACEHOLDER

    @property
    def display_course(self) -> str:
        return self.course_name or COURSE_PLACEHOLDER

    @property
    def display_description(self) -> str:
        return self.description or DESCRIPTION_PLACEHOLDER

    def fingerprint_fields(self) -> dict[str, Any]:
        """Return the fingerprint-relevant fields with their raw values.

        Keys are fixed; canonical serialization sorts them, so neither
        dict insertion order nor attribute order leaks into the bytes.
        """
        return {
            "recipient_name": self.recipient_name,
            "course_name": self.course_name,
            "description": self.description,
            "issue_date": self.issue_date.isoformat(),
            "background_color": self.background_color,
            "text_color": self.text_color,
            "font_emphasis": self.font_emphasis.value,
        }


def create_document(
    recipient_name: str,
    course_name: str = "",
    description: str = "",
    issue_date: Union[date, str, None] = None,
    background_color: str = DEFAULT_BACKGROUND_COLOR,
    text_color: str = DEFAULT_TEXT_COLOR,
    font_emphasis: Union[FontEmphasis, str] = FontEmphasis.BOLD,
    today: Optional[date] = None,
) -> CertificateDocument:
    """Validate raw issuer input and build a CertificateDocument.

    Args:
        recipient_name: Required; blank values are rejected.
        course_name: Optional title/course line.
        description: Optional free text, word-wrapped when drawn.
        issue_date: A date, an ISO "YYYY-MM-DD" string, or None for the
            submission date.
        background_color: Any colour string Pillow understands.
        text_color: Any colour string Pillow understands.
        font_emphasis: FontEmphasis or its string value.
        today: Submission date used when issue_date is None.

    Raises:
        ValidationError: If any field is unusable.
    """
    if recipient_name is None or not str(recipient_name).strip():
        raise ValidationError("Recipient name is required")

    for label, colour in (("background_color", background_color), ("text_color", text_color)):
        try:
            ImageColor.getrgb(colour)
        except (ValueError, AttributeError) as exc:
            raise ValidationError(f"Invalid {label}: {colour!r}") from exc

    try:
        emphasis = FontEmphasis(font_emphasis)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid font_emphasis: {font_emphasis!r} "
            f"(expected one of {[e.value for e in FontEmphasis]})"
        ) from exc

    if issue_date is None:
        resolved_date = today if today is not None else date.today()
    elif isinstance(issue_date, datetime):
        resolved_date = issue_date.date()
    elif isinstance(issue_date, date):
        resolved_date = issue_date
    else:
        try:
            resolved_date = date.fromisoformat(str(issue_date).strip())
        except ValueError as exc:
            raise ValidationError(
                f"Invalid issue_date: {issue_date!r} (expected YYYY-MM-DD)"
            ) from exc

    return CertificateDocument(
        recipient_name=str(recipient_name),
        issue_date=resolved_date,
        course_name=course_name or "",
        description=description or "",
        background_color=background_color,
        text_color=text_color,
        font_emphasis=emphasis,
    )
