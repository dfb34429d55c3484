"""Supabase client construction for anonymous, identity and service access."""

from dataclasses import dataclass, field
from typing import Protocol

from supabase import Client, ClientOptions, create_client

from registration_desk.domain.registrations import AnonymousIdentity


class SupabaseClients(Protocol):
    """Source of Supabase clients scoped to a caller."""

    def anonymous(self) -> Client:
        """Return a client authenticated only by the project anon key."""

    def for_identity(self, identity: AnonymousIdentity) -> Client:
        """Return a client whose requests run as the identity (RLS applies)."""

    def service(self) -> Client:
        """Return the privileged service-role client."""


@dataclass
class SupabaseClientFactory(SupabaseClients):
    """Create Supabase clients with request timeouts applied."""

    supabase_url: str
    anon_key: str
    service_key: str
    timeout_seconds: int = 10
    _service_client: Client | None = field(default=None, init=False, repr=False)

    def anonymous(self) -> Client:
        """Return a fresh anon-key client."""
        return create_client(self.supabase_url, self.anon_key, options=self._options())

    def for_identity(self, identity: AnonymousIdentity) -> Client:
        """Return a fresh client bearing the identity's access token."""
        options = self._options(
            headers={"Authorization": f"Bearer {identity.access_token}"}
        )
        return create_client(self.supabase_url, self.anon_key, options=options)

    def service(self) -> Client:
        """Return the shared service-role client, creating it on first use."""
        if self._service_client is None:
            self._service_client = create_client(
                self.supabase_url, self.service_key, options=self._options()
            )
        return self._service_client

    def _options(self, headers: dict[str, str] | None = None) -> ClientOptions:
        options = ClientOptions(
            postgrest_client_timeout=self.timeout_seconds,
            storage_client_timeout=self.timeout_seconds,
        )
        if headers:
            options.headers.update(headers)
        return options
