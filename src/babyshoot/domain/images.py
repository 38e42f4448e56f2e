"""Domain models for generated images."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ImageStatus(StrEnum):
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GeneratedImage:
    """Single image produced by one provider prompt job."""

    id: UUID
    session_id: UUID
    status: str
    image_url: str = ""
    thumbnail_url: str | None = None
    astria_url: str | None = None
    prompt: str | None = None
    astria_prompt_id: str | None = None
    seed: int | None = None
    theme_prompt_id: UUID | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class NewImage:
    """Image row to insert when a provider job has been submitted."""

    session_id: UUID
    prompt: str
    astria_prompt_id: str
    theme_prompt_id: UUID | None = None
