"""State machine deciding what a registrant sees during submission."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from registration_desk.domain.flows import (
    CONFIRMED,
    EMPTY,
    FAILED,
    PER_SESSION,
    PROVISIONAL,
    SUBMITTING,
    FlowNotice,
    RegistrationFlow,
    SubmissionSession,
)
from registration_desk.domain.registrations import (
    PhotoUpload,
    RegistrationDraft,
    RegistrationRecord,
)
from registration_desk.domain.validation import validate_registration
from registration_desk.errors import (
    FlowNotFoundError,
    InvalidTransitionError,
    PersistenceError,
    SubmissionError,
    UploadError,
    ValidationError,
)
from registration_desk.services.flows import FlowStore
from registration_desk.services.images import ImageNormalizer, to_data_url
from registration_desk.services.submissions import SubmissionService

logger = logging.getLogger(__name__)

OPTIMISTIC = "optimistic"
CONFIRM = "confirm"
ANNOTATE = "annotate"
ROLLBACK = "rollback"

_GENERIC_FAILURE = "Submission failed. Please try again."
_FAILURE_MESSAGES = {
    "identity": "Could not start a secure session. Please try again.",
    "upload": "Your photo could not be uploaded. Please try again.",
    "persistence": "Your details could not be saved. Please try again.",
}


@dataclass
class PresentationController:
    """Drive registration flows through provisional and confirmed states."""

    submission_service: SubmissionService
    normalizer: ImageNormalizer
    flow_store: FlowStore
    mode: str = CONFIRM
    failure_policy: str = ANNOTATE
    identity_policy: str = PER_SESSION
    max_photo_bytes: int = 5 * 1024 * 1024
    debug_errors: bool = False

    def open_flow(self) -> RegistrationFlow:
        """Start an empty flow."""
        flow = RegistrationFlow(
            id=uuid4(), session=SubmissionSession(policy=self.identity_policy)
        )
        self.flow_store.put(flow)
        return flow

    def get_flow(self, flow_id: UUID) -> RegistrationFlow:
        """Return a flow or raise FlowNotFoundError."""
        flow = self.flow_store.get(flow_id)
        if flow is None:
            raise FlowNotFoundError(f"Unknown flow {flow_id}")
        return flow

    async def submit(
        self,
        flow_id: UUID,
        fields: Mapping[str, object],
        photo: PhotoUpload | None = None,
    ) -> RegistrationFlow:
        """Validate and submit a draft.

        Invalid input raises ValidationError and leaves the flow untouched.
        In optimistic mode the flow is returned in PROVISIONAL state and the
        caller must schedule ``complete_submission``; in confirm mode the
        submission is awaited and the flow ends CONFIRMED or FAILED.
        """
        flow = self.get_flow(flow_id)
        _require_status(flow, EMPTY, "submit")
        result = validate_registration(fields, photo, self.max_photo_bytes)
        if not result.ok:
            raise ValidationError(result.violations)

        flow.draft = result.draft
        flow.notice = None
        flow.move_to(SUBMITTING)
        flow.photo = (
            await asyncio.to_thread(self.normalizer.normalize, result.photo.content)
            if result.photo
            else None
        )
        return await self._begin(flow)

    async def retry(self, flow_id: UUID) -> RegistrationFlow:
        """Resubmit the retained draft of a failed flow."""
        flow = self.get_flow(flow_id)
        _require_status(flow, FAILED, "retry")
        if flow.draft is None:
            raise InvalidTransitionError("Nothing to retry")
        flow.notice = None
        flow.move_to(SUBMITTING)
        return await self._begin(flow)

    async def complete_submission(self, flow_id: UUID) -> RegistrationFlow:
        """Run the background submission of a provisional flow."""
        flow = self.get_flow(flow_id)
        if flow.status != PROVISIONAL:
            return flow
        await self._run(flow)
        return flow

    async def new_entry(self, flow_id: UUID) -> RegistrationFlow:
        """Discard the outcome and sign out so the next entry gets a new identity."""
        flow = self.get_flow(flow_id)
        if flow.status not in {CONFIRMED, FAILED}:
            raise InvalidTransitionError(f"Cannot start a new entry from {flow.status}")
        await self.submission_service.end_session(flow.session)
        flow.reset()
        return flow

    async def _begin(self, flow: RegistrationFlow) -> RegistrationFlow:
        if self.mode == OPTIMISTIC and flow.draft is not None:
            flow.display = self._provisional_record(flow, flow.draft)
            flow.move_to(PROVISIONAL)
            return flow
        await self._run(flow)
        return flow

    async def _run(self, flow: RegistrationFlow) -> None:
        if flow.draft is None:
            raise InvalidTransitionError("Flow has no draft to submit")
        try:
            record = await self.submission_service.submit(
                flow.draft, flow.photo, flow.session
            )
        except SubmissionError as exc:
            logger.warning(
                "Submission failed",
                extra={"flow_id": str(flow.id), "kind": exc.kind},
            )
            self._fail(flow, self._notice_for(exc))
            return
        except Exception:
            logger.exception(
                "Unexpected submission failure", extra={"flow_id": str(flow.id)}
            )
            self._fail(flow, FlowNotice(kind="error", message=_GENERIC_FAILURE))
            raise
        flow.record = record
        flow.display = record
        flow.photo = None
        flow.move_to(CONFIRMED)

    def _fail(self, flow: RegistrationFlow, notice: FlowNotice) -> None:
        was_provisional = flow.status == PROVISIONAL
        if not was_provisional or self.failure_policy == ROLLBACK:
            flow.display = None
        flow.notice = notice
        flow.move_to(FAILED)

    def _notice_for(self, exc: SubmissionError) -> FlowNotice:
        message = _FAILURE_MESSAGES.get(exc.kind, _GENERIC_FAILURE)
        if self.debug_errors:
            message = f"{message} (debug: {type(exc).__name__}: {exc})"
        if isinstance(exc, PersistenceError):
            return FlowNotice(
                kind=exc.kind, message=message, path=exc.path, operation=exc.operation
            )
        if isinstance(exc, UploadError):
            return FlowNotice(kind=exc.kind, message=message, path=exc.path)
        return FlowNotice(kind=exc.kind, message=message)

    def _provisional_record(
        self, flow: RegistrationFlow, draft: RegistrationDraft
    ) -> RegistrationRecord:
        identity = flow.session.cached_identity()
        return RegistrationRecord(
            id=identity.uid if identity else "",
            name=draft.name,
            phone=draft.phone,
            age=draft.age,
            mandalam=draft.mandalam,
            mekhala=draft.mekhala,
            unit=draft.unit,
            photo_url=to_data_url(flow.photo.content) if flow.photo else "",
            submission_date=datetime.now(tz=UTC),
        )


def _require_status(flow: RegistrationFlow, status: str, action: str) -> None:
    if flow.status != status:
        raise InvalidTransitionError(f"Cannot {action} from {flow.status}")

