"""Supabase Storage photo bucket."""

from dataclasses import dataclass

import httpx
from storage3.exceptions import StorageApiError

from registration_desk.adapters.supabase_clients import SupabaseClients
from registration_desk.domain.registrations import AnonymousIdentity
from registration_desk.errors import UploadError
from registration_desk.services.submissions import ObjectStore


@dataclass
class SupabaseObjectStore(ObjectStore):
    """Supabase Storage implementation for photo uploads."""

    clients: SupabaseClients
    bucket: str

    def upload(
        self, identity: AnonymousIdentity, path: str, content: bytes, content_type: str
    ) -> str:
        """Upload as the identity, overwriting any previous photo at the path."""
        bucket = self.clients.for_identity(identity).storage.from_(self.bucket)
        try:
            bucket.upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except (StorageApiError, httpx.HTTPError) as exc:
            raise UploadError(
                "Photo upload failed", path=f"{self.bucket}/{path}"
            ) from exc
        return path

    def public_url(self, path: str) -> str:
        """Return the public URL of an object."""
        return self.clients.service().storage.from_(self.bucket).get_public_url(path)
