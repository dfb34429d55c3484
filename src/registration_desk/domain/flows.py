"""Domain models for registration flows."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from registration_desk.domain.registrations import (
    AnonymousIdentity,
    EncodedPhoto,
    RegistrationDraft,
    RegistrationRecord,
)
from registration_desk.errors import InvalidTransitionError

PER_SESSION = "per_session"
PER_SUBMISSION = "per_submission"

EMPTY = "EMPTY"
SUBMITTING = "SUBMITTING"
PROVISIONAL = "PROVISIONAL"
CONFIRMED = "CONFIRMED"
FAILED = "FAILED"

TRANSITIONS: dict[str, frozenset[str]] = {
    EMPTY: frozenset({SUBMITTING}),
    SUBMITTING: frozenset({PROVISIONAL, CONFIRMED, FAILED}),
    PROVISIONAL: frozenset({CONFIRMED, FAILED}),
    CONFIRMED: frozenset({EMPTY}),
    FAILED: frozenset({SUBMITTING, EMPTY}),
}


@dataclass
class SubmissionSession:
    """Identity state scoped to one registration flow.

    With ``per_session`` the first identity is reused until the session is
    ended, so retries overwrite the same document. With ``per_submission``
    every attempt mints a fresh identity.
    """

    policy: str = PER_SESSION
    identity: AnonymousIdentity | None = None

    def cached_identity(self) -> AnonymousIdentity | None:
        """Return the identity to reuse for the next attempt, if any."""
        if self.policy == PER_SUBMISSION:
            return None
        return self.identity


@dataclass(frozen=True)
class FlowNotice:
    """Dismissible notice surfaced to the registrant."""

    kind: str
    message: str
    path: str | None = None
    operation: str | None = None


@dataclass
class RegistrationFlow:
    """State of one registrant's pass through the form."""

    id: UUID
    session: SubmissionSession
    status: str = EMPTY
    draft: RegistrationDraft | None = None
    photo: EncodedPhoto | None = None
    display: RegistrationRecord | None = None
    record: RegistrationRecord | None = None
    notice: FlowNotice | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def provisional(self) -> bool:
        """Return true when the displayed record is not yet confirmed."""
        return self.display is not None and self.record is None

    def can_move_to(self, status: str) -> bool:
        """Return true when the transition is allowed from the current status."""
        return status in TRANSITIONS[self.status]

    def move_to(self, status: str) -> None:
        """Apply a transition, rejecting moves the table does not allow."""
        if not self.can_move_to(status):
            raise InvalidTransitionError(f"Cannot move from {self.status} to {status}")
        self.status = status
        self.updated_at = datetime.now(tz=UTC)

    def reset(self) -> None:
        """Discard draft and outcome, returning to an empty form."""
        self.draft = None
        self.photo = None
        self.display = None
        self.record = None
        self.notice = None
        self.move_to(EMPTY)
