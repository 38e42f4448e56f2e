"""User-related business logic."""

from dataclasses import dataclass
from typing import Protocol

from babyshoot.domain.models import AuthenticatedUser


class UserRepository(Protocol):
    """Persistence interface for mirrored user profiles."""

    def upsert_user(
        self,
        user: AuthenticatedUser,
        first_name: str | None,
        last_name: str | None,
        image_url: str | None,
    ) -> None:
        """Insert or refresh the users row for an auth identity."""


class AuthVerifier(Protocol):
    """Resolves bearer access tokens to users."""

    def verify(self, access_token: str) -> AuthenticatedUser | None:
        """Return the user behind the token, or None when it is invalid."""


def _split_name(metadata: dict[str, object]) -> tuple[str | None, str | None]:
    first = metadata.get("first_name")
    last = metadata.get("last_name")
    if first or last:
        return (str(first) if first else None, str(last) if last else None)
    full = metadata.get("full_name") or metadata.get("name")
    if not full:
        return None, None
    head, _, tail = str(full).strip().partition(" ")
    return head or None, tail.strip() or None


@dataclass
class UserService:
    """Keeps the users table in sync with Supabase Auth identities."""

    repository: UserRepository

    def ensure_user(self, user: AuthenticatedUser) -> AuthenticatedUser:
        first_name, last_name = _split_name(user.metadata)
        image = user.metadata.get("avatar_url") or user.metadata.get("picture")
        self.repository.upsert_user(
            user,
            first_name=first_name,
            last_name=last_name,
            image_url=str(image) if image else None,
        )
        return user
