"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from registration_desk.adapters.photo_fetcher import HttpxPhotoFetcher
from registration_desk.adapters.supabase_audit_repository import (
    SupabaseAuditRepository,
)
from registration_desk.adapters.supabase_clients import SupabaseClientFactory
from registration_desk.adapters.supabase_document_store import SupabaseDocumentStore
from registration_desk.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from registration_desk.adapters.supabase_object_store import SupabaseObjectStore
from registration_desk.config import Settings
from registration_desk.services.admin import AdminService
from registration_desk.services.audit import AuditService
from registration_desk.services.exports import ExportComposer, ExportService
from registration_desk.services.flows import InMemoryFlowStore
from registration_desk.services.images import ImageNormalizer
from registration_desk.services.presentation import PresentationController
from registration_desk.services.sharing import SharingService
from registration_desk.services.submissions import SubmissionService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    submission_service: SubmissionService
    presentation_controller: PresentationController
    export_service: ExportService
    sharing_service: SharingService
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    clients = SupabaseClientFactory(
        supabase_url=resolved_settings.supabase_url,
        anon_key=resolved_settings.supabase_anon_key,
        service_key=resolved_settings.supabase_service_key,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    audit_service = AuditService(
        SupabaseAuditRepository(clients, table=resolved_settings.audit_table)
    )
    submission_service = SubmissionService(
        identity_provider=SupabaseIdentityProvider(clients),
        object_store=SupabaseObjectStore(
            clients, bucket=resolved_settings.photo_bucket
        ),
        document_store=SupabaseDocumentStore(clients),
        audit_service=audit_service,
        collection=resolved_settings.registrations_table,
    )
    presentation_controller = PresentationController(
        submission_service=submission_service,
        normalizer=ImageNormalizer(
            max_width=resolved_settings.image_max_width,
            quality=resolved_settings.image_quality,
        ),
        flow_store=InMemoryFlowStore(ttl_seconds=resolved_settings.flow_ttl_seconds),
        mode=resolved_settings.presentation_mode,
        failure_policy=resolved_settings.failure_policy,
        identity_policy=resolved_settings.identity_policy,
        max_photo_bytes=resolved_settings.max_photo_bytes,
        debug_errors=resolved_settings.environment == "local",
    )
    composer = ExportComposer(
        brand_title=resolved_settings.brand_title,
        header_image=load_header_image(resolved_settings.header_image_path),
    )
    photo_fetcher = HttpxPhotoFetcher.create(
        timeout_seconds=resolved_settings.request_timeout_seconds
    )
    export_service = ExportService(composer=composer, photo_fetcher=photo_fetcher)
    admin_service = AdminService(
        submission_service=submission_service, composer=composer
    )

    async def close_resources() -> None:
        await photo_fetcher.close()

    return AppContainer(
        settings=resolved_settings,
        submission_service=submission_service,
        presentation_controller=presentation_controller,
        export_service=export_service,
        sharing_service=SharingService(),
        admin_service=admin_service,
        close_resources=close_resources,
    )


def load_header_image(path: str | None) -> bytes | None:
    """Read the branding image for PDFs, if one is configured and readable."""
    if not path:
        return None
    try:
        return Path(path).read_bytes()
    except OSError:
        logger.warning("Header image unavailable", extra={"path": path})
        return None
