"""Storage for in-progress registration flows."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from registration_desk.domain.flows import RegistrationFlow


class FlowStore(Protocol):
    """Interface for holding registration flows between requests."""

    def get(self, flow_id: UUID) -> RegistrationFlow | None:
        """Return a flow if present and not expired."""

    def put(self, flow: RegistrationFlow) -> None:
        """Store or refresh a flow."""


@dataclass
class _FlowEntry:
    flow: RegistrationFlow
    expires_at: datetime


@dataclass
class InMemoryFlowStore(FlowStore):
    """In-memory flow store with a sliding TTL."""

    ttl_seconds: int
    _entries: dict[UUID, _FlowEntry]

    def __init__(self, ttl_seconds: int = 3600) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries = {}

    def get(self, flow_id: UUID) -> RegistrationFlow | None:
        """Return a flow if it hasn't expired."""
        entry = self._entries.get(flow_id)
        if entry is None:
            return None
        now = datetime.now(tz=UTC)
        if now >= entry.expires_at:
            self._entries.pop(flow_id, None)
            return None
        entry.expires_at = now + timedelta(seconds=self.ttl_seconds)
        return entry.flow

    def put(self, flow: RegistrationFlow) -> None:
        """Store a flow with a fresh TTL, dropping expired flows."""
        now = datetime.now(tz=UTC)
        expired = [
            key for key, entry in self._entries.items() if now >= entry.expires_at
        ]
        for key in expired:
            self._entries.pop(key, None)
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        self._entries[flow.id] = _FlowEntry(flow=flow, expires_at=expires_at)
