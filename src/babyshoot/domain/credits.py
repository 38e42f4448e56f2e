"""Domain models for the credit ledger."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class CreditTransaction:
    """Single ledger entry; negative amounts are usage."""

    id: UUID
    user_id: UUID
    type: str
    amount: int
    description: str | None = None
    photoshoot_session_id: UUID | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class CreditPackage:
    id: UUID
    name: str
    credits: int
    price_cents: int
    description: str | None = None
