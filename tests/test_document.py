"""Tests for certificate documents — proves input validation and field hygiene."""

import dataclasses
from datetime import date, datetime

import pytest

from certchain.errors import ErrorKind, ValidationError
from certchain.models.document import (
    COURSE_PLACEHOLDER,
    DESCRIPTION_PLACEHOLDER,
    CertificateDocument,
    FontEmphasis,
    create_document,
)


TODAY = date(2026, 10, 19)


class TestCreateDocument:
    def test_minimal_document(self) -> None:
        doc = create_document("Alice", today=TODAY)
        assert doc.recipient_name == "Alice"
        assert doc.course_name == ""
        assert doc.description == ""
        assert doc.issue_date == TODAY
        assert doc.font_emphasis == FontEmphasis.BOLD

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_blank_recipient_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError, match="Recipient name is required") as info:
            create_document(name, today=TODAY)
        assert info.value.kind == ErrorKind.VALIDATION

    def test_none_recipient_rejected(self) -> None:
        with pytest.raises(ValidationError):
            create_document(None, today=TODAY)  # type: ignore[arg-type]

    def test_iso_date_string_accepted(self) -> None:
        doc = create_document("Alice", issue_date="2024-02-29")
        assert doc.issue_date == date(2024, 2, 29)

    def test_datetime_is_truncated_to_date(self) -> None:
        doc = create_document("Alice", issue_date=datetime(2024, 5, 1, 23, 59))
        assert doc.issue_date == date(2024, 5, 1)

    def test_bad_date_rejected(self) -> None:
        with pytest.raises(ValidationError, match="issue_date"):
            create_document("Alice", issue_date="19/10/2026")

    def test_bad_colour_rejected(self) -> None:
        with pytest.raises(ValidationError, match="background_color"):
            create_document("Alice", background_color="not-a-colour", today=TODAY)
        with pytest.raises(ValidationError, match="text_color"):
            create_document("Alice", text_color="#12", today=TODAY)

    def test_named_colour_accepted(self) -> None:
        doc = create_document("Alice", background_color="ivory", today=TODAY)
        assert doc.background_color == "ivory"

    def test_emphasis_from_string(self) -> None:
        doc = create_document("Alice", font_emphasis="normal", today=TODAY)
        assert doc.font_emphasis == FontEmphasis.NORMAL

    def test_bad_emphasis_rejected(self) -> None:
        with pytest.raises(ValidationError, match="font_emphasis"):
            create_document("Alice", font_emphasis="italic", today=TODAY)


class TestDocumentFields:
    def test_frozen(self) -> None:
        doc = create_document("Alice", today=TODAY)
        with pytest.raises(dataclasses.FrozenInstanceError):
            doc.recipient_name = "Mallory"  # type: ignore[misc]

    def test_placeholders_only_for_display(self) -> None:
        doc = create_document("Alice", today=TODAY)
        assert doc.display_course == COURSE_PLACEHOLDER
        assert doc.display_description == DESCRIPTION_PLACEHOLDER
        fields = doc.fingerprint_fields()
        assert fields["course_name"] == ""
        assert fields["description"] == ""

    def test_empty_course_differs_from_literal_placeholder(self) -> None:
        empty = create_document("Alice", today=TODAY)
        literal = create_document("Alice", course_name=COURSE_PLACEHOLDER, today=TODAY)
        assert empty.display_course == literal.display_course
        assert empty.fingerprint_fields() != literal.fingerprint_fields()

    def test_fingerprint_fields_are_complete(self) -> None:
        doc = create_document(
            "Alice", course_name="Rust", description="Did well",
            issue_date="2026-01-02", background_color="#000000",
            text_color="#ffffff", font_emphasis="normal",
        )
        assert doc.fingerprint_fields() == {
            "recipient_name": "Alice",
            "course_name": "Rust",
            "description": "Did well",
            "issue_date": "2026-01-02",
            "background_color": "#000000",
            "text_color": "#ffffff",
            "font_emphasis": "normal",
        }

    def test_replace_builds_new_document(self) -> None:
        doc = create_document("Alice", today=TODAY)
        edited = dataclasses.replace(doc, recipient_name="Alicia")
        assert isinstance(edited, CertificateDocument)
        assert doc.recipient_name == "Alice"
        assert edited.fingerprint_fields() != doc.fingerprint_fields()
