"""Error taxonomy for the registration pipeline."""

from registration_desk.domain.registrations import FieldViolation


class RegistrationDeskError(Exception):
    """Base class for expected application failures."""

    kind = "error"


class ValidationError(RegistrationDeskError):
    """Draft rejected before any network call."""

    kind = "validation"

    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = violations
        fields = ", ".join(violation.field for violation in violations)
        super().__init__(f"Invalid fields: {fields}")


class SubmissionError(RegistrationDeskError):
    """A backend step of a submission failed."""


class IdentityError(SubmissionError):
    """Anonymous identity could not be acquired or released."""

    kind = "identity"


class UploadError(SubmissionError):
    """Photo transfer to the object store failed."""

    kind = "upload"

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message)


class PersistenceError(SubmissionError):
    """Document write was rejected or could not be completed."""

    kind = "persistence"

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        path: str,
        operation: str,
        payload: dict[str, object],
        permission_denied: bool = False,
    ) -> None:
        self.path = path
        self.operation = operation
        self.payload = payload
        self.permission_denied = permission_denied
        super().__init__(message)


class ShareError(RegistrationDeskError):
    """Native share failed; the caller still has a fallback."""

    kind = "share"

    def __init__(self, message: str, fallback: object) -> None:
        self.fallback = fallback
        super().__init__(message)


class RenderError(RegistrationDeskError):
    """PDF assembly failed."""

    kind = "render"


class FlowNotFoundError(RegistrationDeskError):
    """No registration flow exists for the id."""

    kind = "not_found"


class InvalidTransitionError(RegistrationDeskError):
    """The flow cannot perform the action in its current state."""

    kind = "conflict"
