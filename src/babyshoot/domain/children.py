"""Domain models for child and family subjects."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class ChildProfile:
    """Descriptive attributes used to build a child prompt."""

    name: str
    age_in_months: int
    gender: str
    hair_color: str
    eye_color: str
    skin_tone: str
    hair_style: str = "straight"
    unique_features: str | None = None


@dataclass(frozen=True)
class Child:
    """Persisted child profile owned by a user."""

    id: UUID
    user_id: UUID
    profile: ChildProfile
    created_at: datetime | None = None


@dataclass(frozen=True)
class FamilyMember:
    """One person in a family photoshoot."""

    name: str
    relation: str
    gender: str
    age: str | None = None
