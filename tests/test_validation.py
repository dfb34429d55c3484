"""Tests for registration form validation."""

from registration_desk.domain.registrations import PhotoUpload
from registration_desk.domain.validation import validate_registration
from tests.conftest import VALID_FIELDS


def _messages(result) -> dict[str, str]:  # type: ignore[no-untyped-def]
    return {violation.field: violation.message for violation in result.violations}


def test_valid_fields_produce_draft() -> None:
    result = validate_registration(VALID_FIELDS)

    assert result.ok
    assert result.draft is not None
    assert result.draft.name == "Asha K"
    assert result.draft.age == 24
    assert result.photo is None


def test_values_are_trimmed() -> None:
    result = validate_registration({**VALID_FIELDS, "name": "  Asha K  "})

    assert result.draft is not None
    assert result.draft.name == "Asha K"


def test_short_name_rejected() -> None:
    result = validate_registration({**VALID_FIELDS, "name": "A"})

    assert not result.ok
    assert _messages(result) == {"name": "Name must be at least 2 characters."}


def test_invalid_phone_rejected() -> None:
    result = validate_registration({**VALID_FIELDS, "phone": "12ab"})

    assert _messages(result) == {"phone": "Please enter a valid phone number."}


def test_age_bounds() -> None:
    assert _messages(validate_registration({**VALID_FIELDS, "age": "0"})) == {
        "age": "Age must be a positive number."
    }
    assert _messages(validate_registration({**VALID_FIELDS, "age": "121"})) == {
        "age": "Please enter a valid age."
    }
    assert validate_registration({**VALID_FIELDS, "age": "120"}).ok
    assert validate_registration({**VALID_FIELDS, "age": "1"}).ok


def test_non_numeric_age_rejected() -> None:
    result = validate_registration({**VALID_FIELDS, "age": "twenty"})

    assert _messages(result) == {"age": "Age must be a whole number."}


def test_blank_fields_are_required() -> None:
    result = validate_registration(
        {**VALID_FIELDS, "age": "", "mandalam": "   ", "unit": ""}
    )

    assert _messages(result) == {
        "age": "Age is required.",
        "mandalam": "Mandalam is required.",
        "unit": "Unit is required.",
    }


def test_missing_fields_reported_once_each() -> None:
    result = validate_registration({})

    fields = [violation.field for violation in result.violations]
    assert sorted(fields) == ["age", "mandalam", "mekhala", "name", "phone", "unit"]


def test_photo_type_rejected() -> None:
    photo = PhotoUpload(filename="scan.gif", content_type="image/gif", content=b"x")

    result = validate_registration(VALID_FIELDS, photo)

    assert _messages(result) == {
        "photo": "Only .jpg, .jpeg, .png and .webp formats are supported."
    }


def test_photo_size_rejected() -> None:
    photo = PhotoUpload(
        filename="big.jpg", content_type="image/jpeg", content=b"x" * 2048
    )

    result = validate_registration(VALID_FIELDS, photo, max_photo_bytes=1024 * 1024)
    assert result.ok

    result = validate_registration(VALID_FIELDS, photo, max_photo_bytes=1024)
    assert result.violations[0].field == "photo"


def test_accepted_photo_is_returned() -> None:
    photo = PhotoUpload(filename="me.png", content_type="image/png", content=b"png")

    result = validate_registration(VALID_FIELDS, photo)

    assert result.ok
    assert result.photo == photo


def test_phone_rejects_non_ascii_digits() -> None:
    for phone in ("+9١٢٣٤٥٦٧٨٩", "+91२३४५६७८९०", "９８７６５４３２１"):
        result = validate_registration({**VALID_FIELDS, "phone": phone})

        assert _messages(result) == {"phone": "Please enter a valid phone number."}
