"""Supabase table used as a keyed document store."""

from dataclasses import dataclass

import httpx
from postgrest.exceptions import APIError

from registration_desk.adapters.supabase_clients import SupabaseClients
from registration_desk.domain.registrations import AnonymousIdentity
from registration_desk.errors import PersistenceError
from registration_desk.services.submissions import DocumentStore

# Postgres insufficient_privilege, returned when a row-level security policy
# rejects the write.
PERMISSION_DENIED_CODE = "42501"


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Supabase implementation for registration documents."""

    clients: SupabaseClients

    def set_document(
        self,
        identity: AnonymousIdentity,
        collection: str,
        key: str,
        payload: dict[str, object],
    ) -> None:
        """Upsert the row keyed by id as the identity."""
        path = f"{collection}/{key}"
        client = self.clients.for_identity(identity)
        try:
            client.table(collection).upsert(
                {**payload, "id": key}, on_conflict="id"
            ).execute()
        except APIError as exc:
            raise PersistenceError(
                exc.message or "Document write rejected",
                path=path,
                operation="create",
                payload=payload,
                permission_denied=exc.code == PERMISSION_DENIED_CODE,
            ) from exc
        except httpx.HTTPError as exc:
            raise PersistenceError(
                "Document write failed",
                path=path,
                operation="create",
                payload=payload,
            ) from exc

    def query(
        self, collection: str, order_by: str, descending: bool = True
    ) -> list[dict[str, object]]:
        """Return all rows ordered by a column, using the service client."""
        response = (
            self.clients.service()
            .table(collection)
            .select("*")
            .order(order_by, desc=descending)
            .execute()
        )
        return response.data or []
