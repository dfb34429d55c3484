"""Declarative constraints for the registration form."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from registration_desk.domain.registrations import (
    FieldViolation,
    PhotoUpload,
    RegistrationDraft,
)

PHONE_PATTERN = r"^\+?[1-9][0-9]{1,14}$"
ACCEPTED_PHOTO_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/webp"}
)
DEFAULT_MAX_PHOTO_BYTES = 5 * 1024 * 1024

_FIELD_MESSAGES = {
    "name": "Name must be at least 2 characters.",
    "phone": "Please enter a valid phone number.",
    "mandalam": "Mandalam is required.",
    "mekhala": "Mekhala is required.",
    "unit": "Unit is required.",
}


class RegistrationForm(BaseModel):
    """Schema for the text fields of a submission."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2)
    phone: str = Field(pattern=PHONE_PATTERN)
    age: int = Field(ge=1, le=120)
    mandalam: str = Field(min_length=1)
    mekhala: str = Field(min_length=1)
    unit: str = Field(min_length=1)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a candidate draft."""

    draft: RegistrationDraft | None
    photo: PhotoUpload | None = None
    violations: list[FieldViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return true when the draft passed every rule."""
        return self.draft is not None and not self.violations


def validate_registration(
    fields: Mapping[str, object],
    photo: PhotoUpload | None = None,
    max_photo_bytes: int = DEFAULT_MAX_PHOTO_BYTES,
) -> ValidationResult:
    """Validate raw form input without raising for invalid values."""
    violations: list[FieldViolation] = []
    form: RegistrationForm | None = None
    try:
        form = RegistrationForm.model_validate(
            {key: _blank_to_none(value) for key, value in fields.items()}
        )
    except pydantic.ValidationError as exc:
        seen: set[str] = set()
        for error in exc.errors():
            name = str(error["loc"][0]) if error["loc"] else "form"
            if name in seen:
                continue
            seen.add(name)
            violations.append(FieldViolation(name, _message_for(name, error["type"])))

    photo_violation = _check_photo(photo, max_photo_bytes)
    if photo_violation:
        violations.append(photo_violation)

    if form is None or violations:
        return ValidationResult(draft=None, violations=violations)
    draft = RegistrationDraft(
        name=form.name,
        phone=form.phone,
        age=form.age,
        mandalam=form.mandalam,
        mekhala=form.mekhala,
        unit=form.unit,
    )
    return ValidationResult(draft=draft, photo=photo)


def _check_photo(
    photo: PhotoUpload | None, max_photo_bytes: int
) -> FieldViolation | None:
    """Enforce the single-file photo policy: accepted type and bounded size."""
    if photo is None:
        return None
    if photo.content_type.lower() not in ACCEPTED_PHOTO_TYPES:
        return FieldViolation(
            "photo", "Only .jpg, .jpeg, .png and .webp formats are supported."
        )
    if len(photo.content) > max_photo_bytes:
        limit_mb = max_photo_bytes // (1024 * 1024)
        return FieldViolation("photo", f"Max file size is {limit_mb}MB.")
    return None


def _message_for(field_name: str, error_type: str) -> str:
    if field_name == "age":
        if error_type in {"missing", "int_type"}:
            return "Age is required."
        if error_type == "greater_than_equal":
            return "Age must be a positive number."
        if error_type == "less_than_equal":
            return "Please enter a valid age."
        return "Age must be a whole number."
    return _FIELD_MESSAGES.get(field_name, "This field is invalid.")


def _blank_to_none(value: object) -> object:
    # Missing and blank inputs both surface as "required" violations.
    if isinstance(value, str) and not value.strip():
        return None
    return value
