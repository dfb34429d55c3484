"""Audit trail for rejected writes."""

import logging
from dataclasses import dataclass
from typing import Protocol

from registration_desk.errors import PersistenceError

logger = logging.getLogger(__name__)


class AuditRepository(Protocol):
    """Persistence interface for audit events."""

    def create_event(
        self,
        event_type: str,
        path: str,
        operation: str,
        payload: dict[str, object],
    ) -> None:
        """Create an audit event row."""


@dataclass
class AuditService:
    """Service for recording diagnostics about failed submissions."""

    repository: AuditRepository

    def record_persistence_failure(self, error: PersistenceError) -> None:
        """Persist the path, operation and payload of a rejected write."""
        event_type = "permission_denied" if error.permission_denied else "write_failed"
        try:
            self.repository.create_event(
                event_type=event_type,
                path=error.path,
                operation=error.operation,
                payload=error.payload,
            )
        except Exception:
            # Never mask the write failure being reported.
            logger.exception(
                "Failed to record audit event",
                extra={"path": error.path, "event_type": event_type},
            )
