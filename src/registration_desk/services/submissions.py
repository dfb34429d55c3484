"""Submission of validated drafts to the backend stores."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from registration_desk.domain.flows import SubmissionSession
from registration_desk.domain.registrations import (
    AnonymousIdentity,
    EncodedPhoto,
    RegistrationDraft,
    RegistrationRecord,
)
from registration_desk.errors import IdentityError, PersistenceError
from registration_desk.services.audit import AuditService

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Interface for the anonymous identity backend."""

    def sign_in_anonymously(self) -> AnonymousIdentity:
        """Mint a new anonymous identity."""

    def sign_out(self, identity: AnonymousIdentity) -> None:
        """Invalidate an anonymous identity."""


class ObjectStore(Protocol):
    """Binary object storage for photos."""

    def upload(
        self, identity: AnonymousIdentity, path: str, content: bytes, content_type: str
    ) -> str:
        """Upload bytes to the path, replacing any previous object, and return it."""

    def public_url(self, path: str) -> str:
        """Return the download URL for a stored object."""


class DocumentStore(Protocol):
    """Document storage keyed by path."""

    def set_document(
        self,
        identity: AnonymousIdentity,
        collection: str,
        key: str,
        payload: dict[str, object],
    ) -> None:
        """Write the document at <collection>/<key>, last write wins."""

    def query(
        self, collection: str, order_by: str, descending: bool = True
    ) -> list[dict[str, object]]:
        """Return every document of the collection in the given order."""


@dataclass
class SubmissionService:
    """Acquire an identity, upload the photo, and write the record."""

    identity_provider: IdentityProvider
    object_store: ObjectStore
    document_store: DocumentStore
    audit_service: AuditService
    collection: str = "registrations"

    async def submit(
        self,
        draft: RegistrationDraft,
        photo: EncodedPhoto | None,
        session: SubmissionSession,
    ) -> RegistrationRecord:
        """Persist a draft and return the canonical record.

        Raises IdentityError, UploadError or PersistenceError. The upload
        completes before the document referencing it is written.
        """
        identity = await self._acquire_identity(session)
        photo_url = ""
        if photo is not None:
            path = photo_path(identity.uid)
            stored_path = await asyncio.to_thread(
                self.object_store.upload,
                identity,
                path,
                photo.content,
                photo.content_type,
            )
            photo_url = await asyncio.to_thread(
                self.object_store.public_url, stored_path
            )
        record = RegistrationRecord(
            id=identity.uid,
            name=draft.name,
            phone=draft.phone,
            age=draft.age,
            mandalam=draft.mandalam,
            mekhala=draft.mekhala,
            unit=draft.unit,
            photo_url=photo_url,
            submission_date=datetime.now(tz=UTC),
            accepted_declaration=True,
        )
        try:
            await asyncio.to_thread(
                self.document_store.set_document,
                identity,
                self.collection,
                identity.uid,
                record.to_document(),
            )
        except PersistenceError as exc:
            logger.warning(
                "Registration write rejected",
                extra={"path": exc.path, "operation": exc.operation},
            )
            await asyncio.to_thread(self.audit_service.record_persistence_failure, exc)
            raise
        logger.info(
            "Registration stored",
            extra={"path": document_path(self.collection, identity.uid)},
        )
        return record

    async def end_session(self, session: SubmissionSession) -> None:
        """Sign out the session identity so the next entry gets a new one."""
        identity = session.identity
        session.identity = None
        if identity is None:
            return
        try:
            await asyncio.to_thread(self.identity_provider.sign_out, identity)
        except IdentityError:
            # Local identity is already cleared; the token expires server-side.
            logger.warning("Anonymous sign-out failed", extra={"uid": identity.uid})

    def list_records(self) -> list[RegistrationRecord]:
        """Return every persisted record, newest first."""
        rows = self.document_store.query(
            self.collection, order_by="submission_date", descending=True
        )
        return [RegistrationRecord.from_document(row) for row in rows]

    async def _acquire_identity(self, session: SubmissionSession) -> AnonymousIdentity:
        cached = session.cached_identity()
        if cached is not None:
            return cached
        identity = await asyncio.to_thread(self.identity_provider.sign_in_anonymously)
        session.identity = identity
        return identity


def photo_path(uid: str) -> str:
    """Return the deterministic object path for an identity's photo."""
    return f"{uid}.jpg"


def document_path(collection: str, key: str) -> str:
    """Return the document path for a key."""
    return f"{collection}/{key}"
