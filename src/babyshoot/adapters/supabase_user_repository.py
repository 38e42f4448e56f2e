"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from babyshoot.domain.models import AuthenticatedUser
from babyshoot.services.users import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for mirrored user profiles."""

    client: Client

    def upsert_user(
        self,
        user: AuthenticatedUser,
        first_name: str | None,
        last_name: str | None,
        image_url: str | None,
    ) -> None:
        """Insert or refresh the users row keyed by auth id."""
        self.client.table("users").upsert(
            {
                "id": str(user.id),
                "email": user.email,
                "first_name": first_name,
                "last_name": last_name,
                "image_url": image_url,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()
