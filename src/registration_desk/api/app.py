"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from uuid import UUID

from fastapi import BackgroundTasks, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from registration_desk.api.admin import router as admin_router
from registration_desk.api.models import (
    CapabilitiesPayload,
    FlowView,
    PlanView,
    ShareOutcomePayload,
)
from registration_desk.app_logging import configure_logging
from registration_desk.containers import AppContainer
from registration_desk.domain.flows import CONFIRMED, PROVISIONAL, RegistrationFlow
from registration_desk.domain.registrations import PhotoUpload, RegistrationRecord
from registration_desk.errors import (
    FlowNotFoundError,
    InvalidTransitionError,
    RenderError,
    ShareError,
    ValidationError,
)
from registration_desk.services.exports import profile_filename


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(ValidationError)
    async def validation_failed(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "errors": [
                    {"field": violation.field, "message": violation.message}
                    for violation in exc.violations
                ]
            },
        )

    @app.exception_handler(FlowNotFoundError)
    async def flow_not_found(_: Request, exc: FlowNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition(
        _: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(RenderError)
    async def render_failed(_: Request, exc: RenderError) -> JSONResponse:
        logger.error("PDF rendering failed", extra={"error": str(exc)})
        return JSONResponse(
            status_code=500,
            content={"detail": "Could not generate the PDF. Please try again."},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/flows", status_code=201)
    async def open_flow(request: Request) -> FlowView:
        """Start a new registration flow."""
        state_container: AppContainer = request.app.state.container
        flow = state_container.presentation_controller.open_flow()
        return FlowView.from_flow(flow)

    @app.get("/flows/{flow_id}")
    async def get_flow(flow_id: UUID, request: Request) -> FlowView:
        """Return the current state of a flow."""
        state_container: AppContainer = request.app.state.container
        flow = state_container.presentation_controller.get_flow(flow_id)
        return FlowView.from_flow(flow)

    @app.post("/flows/{flow_id}/submit")
    async def submit(  # noqa: PLR0913
        flow_id: UUID,
        request: Request,
        background_tasks: BackgroundTasks,
        name: str = Form(default=""),
        phone: str = Form(default=""),
        age: str = Form(default=""),
        mandalam: str = Form(default=""),
        mekhala: str = Form(default=""),
        unit: str = Form(default=""),
        photo: UploadFile | None = File(default=None),
    ) -> FlowView:
        """Validate and submit the registration form."""
        state_container: AppContainer = request.app.state.container
        controller = state_container.presentation_controller
        fields = {
            "name": name,
            "phone": phone,
            "age": age,
            "mandalam": mandalam,
            "mekhala": mekhala,
            "unit": unit,
        }
        flow = await controller.submit(flow_id, fields, await _read_photo(photo))
        _schedule_completion(flow, background_tasks, state_container)
        return FlowView.from_flow(flow)

    @app.post("/flows/{flow_id}/retry")
    async def retry(
        flow_id: UUID, request: Request, background_tasks: BackgroundTasks
    ) -> FlowView:
        """Resubmit the retained draft of a failed flow."""
        state_container: AppContainer = request.app.state.container
        flow = await state_container.presentation_controller.retry(flow_id)
        _schedule_completion(flow, background_tasks, state_container)
        return FlowView.from_flow(flow)

    @app.post("/flows/{flow_id}/new-entry")
    async def new_entry(flow_id: UUID, request: Request) -> FlowView:
        """Clear the form and end the anonymous session."""
        state_container: AppContainer = request.app.state.container
        flow = await state_container.presentation_controller.new_entry(flow_id)
        return FlowView.from_flow(flow)

    @app.get("/flows/{flow_id}/profile.pdf", name="profile_pdf")
    async def profile_pdf(flow_id: UUID, request: Request) -> Response:
        """Download the confirmed registration as a profile PDF."""
        state_container: AppContainer = request.app.state.container
        record = _confirmed_record(
            state_container.presentation_controller.get_flow(flow_id)
        )
        content = await state_container.export_service.profile_pdf(record)
        return Response(
            content=content,
            media_type="application/pdf",
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{profile_filename(record)}"'
                )
            },
        )

    @app.post("/flows/{flow_id}/share")
    async def share(
        flow_id: UUID, capabilities: CapabilitiesPayload, request: Request
    ) -> PlanView:
        """Return how the client should share the confirmed profile."""
        state_container: AppContainer = request.app.state.container
        record = _confirmed_record(
            state_container.presentation_controller.get_flow(flow_id)
        )
        plan = state_container.sharing_service.plan(
            record,
            capabilities.to_capabilities(),
            download_url=str(request.url_for("profile_pdf", flow_id=flow_id)),
        )
        return PlanView.from_plan(plan)

    @app.post("/flows/{flow_id}/share/outcome")
    async def share_outcome(
        flow_id: UUID, payload: ShareOutcomePayload, request: Request
    ) -> dict[str, object]:
        """Resolve a share attempt, returning a fallback plan on failure."""
        state_container: AppContainer = request.app.state.container
        record = _confirmed_record(
            state_container.presentation_controller.get_flow(flow_id)
        )
        capabilities = payload.capabilities.to_capabilities()
        sharing = state_container.sharing_service
        plan = sharing.plan(
            record,
            capabilities,
            download_url=str(request.url_for("profile_pdf", flow_id=flow_id)),
        )
        try:
            sharing.handle_outcome(
                replace(plan, channel=payload.channel), payload.outcome, capabilities
            )
        except ShareError as exc:
            return {
                "status": "fallback",
                "message": str(exc),
                "plan": PlanView.from_plan(exc.fallback).model_dump(),
            }
        return {"status": "done"}

    return app


async def _read_photo(photo: UploadFile | None) -> PhotoUpload | None:
    """Return the uploaded photo, treating an empty file input as no photo."""
    if photo is None or not photo.filename:
        return None
    content = await photo.read()
    if not content:
        return None
    return PhotoUpload(
        filename=photo.filename,
        content_type=photo.content_type or "application/octet-stream",
        content=content,
    )


def _schedule_completion(
    flow: RegistrationFlow,
    background_tasks: BackgroundTasks,
    state_container: AppContainer,
) -> None:
    if flow.status == PROVISIONAL:
        background_tasks.add_task(
            state_container.presentation_controller.complete_submission, flow.id
        )


def _confirmed_record(flow: RegistrationFlow) -> RegistrationRecord:
    if flow.status != CONFIRMED or flow.record is None:
        raise InvalidTransitionError("The registration is not confirmed yet")
    return flow.record
