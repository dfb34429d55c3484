"""Domain models for registrations."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FieldViolation:
    """A validation message scoped to one form field."""

    field: str
    message: str


@dataclass(frozen=True)
class RegistrationDraft:
    """Validated form input, prior to persistence."""

    name: str
    phone: str
    age: int
    mandalam: str
    mekhala: str
    unit: str


@dataclass(frozen=True)
class PhotoUpload:
    """Raw photo file as received from the form."""

    filename: str
    content_type: str
    content: bytes


@dataclass(frozen=True)
class EncodedPhoto:
    """Normalized photo ready for upload or embedding."""

    content: bytes
    content_type: str
    width: int
    height: int


@dataclass(frozen=True)
class AnonymousIdentity:
    """Backend-issued anonymous session identity."""

    uid: str
    access_token: str


@dataclass(frozen=True)
class RegistrationRecord:
    """Canonical stored representation of a submission."""

    id: str
    name: str
    phone: str
    age: int
    mandalam: str
    mekhala: str
    unit: str
    photo_url: str
    submission_date: datetime
    accepted_declaration: bool = True

    def to_document(self) -> dict[str, object]:
        """Return the document payload written to the store."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "age": self.age,
            "mandalam": self.mandalam,
            "mekhala": self.mekhala,
            "unit": self.unit,
            "photo_url": self.photo_url,
            "submission_date": self.submission_date.isoformat(),
            "accepted_declaration": self.accepted_declaration,
        }

    @classmethod
    def from_document(cls, row: dict[str, object]) -> "RegistrationRecord":
        """Build a record from a stored document."""
        submitted = row["submission_date"]
        return cls(
            id=str(row["id"]),
            name=str(row["name"]),
            phone=str(row["phone"]),
            age=int(row["age"]),
            mandalam=str(row["mandalam"]),
            mekhala=str(row["mekhala"]),
            unit=str(row["unit"]),
            photo_url=str(row.get("photo_url") or ""),
            submission_date=(
                submitted
                if isinstance(submitted, datetime)
                else datetime.fromisoformat(str(submitted))
            ),
            accepted_declaration=bool(row.get("accepted_declaration", True)),
        )


@dataclass(frozen=True)
class RegistrationFilter:
    """Admin filter over persisted registrations."""

    name: str = ""
    mandalam: str = ""
    mekhala: str = ""
    unit: str = ""
    min_age: int | None = None
    max_age: int | None = None

    def matches(self, record: RegistrationRecord) -> bool:
        """Return true when the record passes every filter."""
        if self.min_age is not None and record.age < self.min_age:
            return False
        if self.max_age is not None and record.age > self.max_age:
            return False
        return (
            _contains(record.name, self.name)
            and _contains(record.mandalam, self.mandalam)
            and _contains(record.mekhala, self.mekhala)
            and _contains(record.unit, self.unit)
        )


def _contains(value: str, needle: str) -> bool:
    return needle.strip().lower() in value.lower()
