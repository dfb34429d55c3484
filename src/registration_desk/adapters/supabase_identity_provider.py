"""Supabase-backed anonymous identity provider."""

from dataclasses import dataclass

import httpx
from supabase import AuthError

from registration_desk.adapters.supabase_clients import SupabaseClients
from registration_desk.domain.registrations import AnonymousIdentity
from registration_desk.errors import IdentityError
from registration_desk.services.submissions import IdentityProvider


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Anonymous sign-in through Supabase Auth."""

    clients: SupabaseClients

    def sign_in_anonymously(self) -> AnonymousIdentity:
        """Create an anonymous user and return its id and access token."""
        try:
            response = self.clients.anonymous().auth.sign_in_anonymously()
        except (AuthError, httpx.HTTPError) as exc:
            raise IdentityError("Anonymous sign-in failed") from exc
        if response.user is None or response.session is None:
            raise IdentityError("Anonymous sign-in returned no session")
        return AnonymousIdentity(
            uid=str(response.user.id), access_token=response.session.access_token
        )

    def sign_out(self, identity: AnonymousIdentity) -> None:
        """Revoke the identity's sessions."""
        try:
            self.clients.service().auth.admin.sign_out(identity.access_token)
        except (AuthError, httpx.HTTPError) as exc:
            raise IdentityError("Anonymous sign-out failed") from exc
