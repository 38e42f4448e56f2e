"""Domain models for photoshoot sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class SessionStatus(StrEnum):
    """Lifecycle of a photoshoot session."""

    PENDING = "pending"
    TRAINING = "training"
    READY = "ready"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


TRAINING_STATUSES = frozenset({SessionStatus.PENDING, SessionStatus.TRAINING})


@dataclass(frozen=True)
class PhotoshootSession:
    """Represents a persisted photoshoot session."""

    id: UUID
    user_id: UUID
    status: str
    child_id: UUID | None = None
    selected_theme_id: UUID | None = None
    base_prompt: str | None = None
    enhanced_prompt: str | None = None
    uploaded_photos: list[str] = field(default_factory=list)
    model_id: str | None = None
    training_job_id: str | None = None
    generation_job_id: str | None = None
    generation_prompt: str | None = None
    family_fingerprint: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NewSession:
    """Session row to insert."""

    user_id: UUID
    status: str
    selected_theme_id: UUID
    base_prompt: str
    enhanced_prompt: str
    child_id: UUID | None = None
    uploaded_photos: list[str] = field(default_factory=list)
    model_id: str | None = None
    training_job_id: str | None = None
    family_fingerprint: str | None = None
