"""Supabase repository for audit events."""

from dataclasses import dataclass

from registration_desk.adapters.supabase_clients import SupabaseClients
from registration_desk.services.audit import AuditRepository


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed audit repository."""

    clients: SupabaseClients
    table: str = "audit_events"

    def create_event(
        self,
        event_type: str,
        path: str,
        operation: str,
        payload: dict[str, object],
    ) -> None:
        """Create an audit event row."""
        self.clients.service().table(self.table).insert(
            {
                "event_type": event_type,
                "path": path,
                "operation": operation,
                "payload_json": payload,
            }
        ).execute()
