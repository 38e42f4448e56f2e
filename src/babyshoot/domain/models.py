"""Domain models for authenticated users."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a Supabase Auth access token."""

    id: UUID
    email: str | None
    metadata: dict[str, object] = field(default_factory=dict)
