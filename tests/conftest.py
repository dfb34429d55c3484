"""Shared test fixtures."""

import io
from dataclasses import dataclass, field

import pytest
from PIL import Image

from registration_desk.config import Settings
from registration_desk.containers import AppContainer
from registration_desk.domain.registrations import AnonymousIdentity
from registration_desk.errors import IdentityError, PersistenceError, UploadError
from registration_desk.services.admin import AdminService
from registration_desk.services.audit import AuditRepository, AuditService
from registration_desk.services.exports import (
    ExportComposer,
    ExportService,
    PhotoFetcher,
)
from registration_desk.services.flows import InMemoryFlowStore
from registration_desk.services.images import ImageNormalizer
from registration_desk.services.presentation import PresentationController
from registration_desk.services.sharing import SharingService
from registration_desk.services.submissions import (
    DocumentStore,
    IdentityProvider,
    ObjectStore,
    SubmissionService,
)

VALID_FIELDS = {
    "name": "Asha K",
    "phone": "+919876543210",
    "age": "24",
    "mandalam": "Kollam",
    "mekhala": "North",
    "unit": "Unit 3",
}


def make_image(
    width: int = 800, height: int = 600, image_format: str = "JPEG"
) -> bytes:
    """Return encoded bytes of a solid-colour test image."""
    buffer = io.BytesIO()
    mode = "RGBA" if image_format == "PNG" else "RGB"
    Image.new(mode, (width, height), color=(200, 80, 40)).save(
        buffer, format=image_format
    )
    return buffer.getvalue()


@dataclass
class InMemoryIdentityProvider(IdentityProvider):
    """Identity provider minting sequential anonymous ids."""

    sign_ins: int = 0
    signed_out: list[str] = field(default_factory=list)
    fail_sign_in: bool = False
    fail_sign_out: bool = False

    def sign_in_anonymously(self) -> AnonymousIdentity:
        if self.fail_sign_in:
            raise IdentityError("Anonymous sign-in failed")
        self.sign_ins += 1
        return AnonymousIdentity(
            uid=f"anon-{self.sign_ins}", access_token=f"token-{self.sign_ins}"
        )

    def sign_out(self, identity: AnonymousIdentity) -> None:
        if self.fail_sign_out:
            raise IdentityError("Anonymous sign-out failed")
        self.signed_out.append(identity.uid)


@dataclass
class InMemoryObjectStore(ObjectStore):
    """Object store keeping uploads in a dict."""

    objects: dict[str, bytes] = field(default_factory=dict)
    uploads: int = 0
    fail: bool = False

    def upload(
        self, identity: AnonymousIdentity, path: str, content: bytes, content_type: str
    ) -> str:
        if self.fail:
            raise UploadError("Photo upload failed", path=f"photos/{path}")
        self.uploads += 1
        self.objects[path] = content
        return path

    def public_url(self, path: str) -> str:
        return f"https://storage.test/photos/{path}"


@dataclass
class InMemoryDocumentStore(DocumentStore):
    """Document store keyed by <collection>/<key>."""

    documents: dict[str, dict[str, object]] = field(default_factory=dict)
    writes: int = 0
    deny: bool = False

    def set_document(
        self,
        identity: AnonymousIdentity,
        collection: str,
        key: str,
        payload: dict[str, object],
    ) -> None:
        path = f"{collection}/{key}"
        if self.deny:
            raise PersistenceError(
                "new row violates row-level security policy",
                path=path,
                operation="create",
                payload=payload,
                permission_denied=True,
            )
        self.writes += 1
        self.documents[path] = dict(payload)

    def query(
        self, collection: str, order_by: str, descending: bool = True
    ) -> list[dict[str, object]]:
        rows = [
            document
            for path, document in self.documents.items()
            if path.startswith(f"{collection}/")
        ]
        return sorted(rows, key=lambda row: str(row[order_by]), reverse=descending)


@dataclass
class InMemoryAuditRepository(AuditRepository):
    """In-memory audit repository for tests."""

    events: list[dict[str, object]] = field(default_factory=list)

    def create_event(
        self,
        event_type: str,
        path: str,
        operation: str,
        payload: dict[str, object],
    ) -> None:
        self.events.append(
            {
                "event_type": event_type,
                "path": path,
                "operation": operation,
                "payload": payload,
            }
        )


@dataclass
class FakePhotoFetcher(PhotoFetcher):
    """Photo fetcher returning fixed bytes."""

    content: bytes | None = None
    requested: list[str] = field(default_factory=list)

    async def fetch(self, photo_url: str) -> bytes | None:
        self.requested.append(photo_url)
        return self.content


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_key="service-key",
        admin_token="admin-token",
        environment="test",
    )


@pytest.fixture
def identity_provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def audit_repository() -> InMemoryAuditRepository:
    return InMemoryAuditRepository()


@pytest.fixture
def submission_service(
    identity_provider: InMemoryIdentityProvider,
    object_store: InMemoryObjectStore,
    document_store: InMemoryDocumentStore,
    audit_repository: InMemoryAuditRepository,
) -> SubmissionService:
    return SubmissionService(
        identity_provider=identity_provider,
        object_store=object_store,
        document_store=document_store,
        audit_service=AuditService(audit_repository),
    )


@pytest.fixture
def photo_fetcher() -> FakePhotoFetcher:
    return FakePhotoFetcher()


@pytest.fixture
def container(
    settings: Settings,
    submission_service: SubmissionService,
    photo_fetcher: FakePhotoFetcher,
) -> AppContainer:
    composer = ExportComposer(compress=False)
    presentation_controller = PresentationController(
        submission_service=submission_service,
        normalizer=ImageNormalizer(),
        flow_store=InMemoryFlowStore(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        submission_service=submission_service,
        presentation_controller=presentation_controller,
        export_service=ExportService(composer=composer, photo_fetcher=photo_fetcher),
        sharing_service=SharingService(),
        admin_service=AdminService(
            submission_service=submission_service, composer=composer
        ),
        close_resources=close_resources,
    )
