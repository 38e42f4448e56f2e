"""Supabase Auth access token verification."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from babyshoot.domain.models import AuthenticatedUser
from babyshoot.services.users import AuthVerifier

logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthVerifier(AuthVerifier):
    """Resolves access tokens by asking Supabase Auth for the user."""

    client: Client

    def verify(self, access_token: str) -> AuthenticatedUser | None:
        try:
            response = self.client.auth.get_user(access_token)
        except Exception:
            logger.info("Rejected access token")
            return None
        if response is None or response.user is None:
            return None
        user = response.user
        return AuthenticatedUser(
            id=UUID(str(user.id)),
            email=user.email,
            metadata=dict(user.user_metadata or {}),
        )
