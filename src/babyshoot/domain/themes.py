"""Domain models for the theme catalog."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

DEFAULT_IMAGE_COUNT = 10


@dataclass(frozen=True)
class ThemePrompt:
    """Scene prompt used for one generated image."""

    id: UUID
    prompt_text: str
    prompt_order: int
    is_active: bool = True


@dataclass(frozen=True)
class Theme:
    """Photoshoot theme with its ordered scene prompts."""

    id: UUID
    name: str
    prompt: str
    session_type: str
    description: str | None = None
    thumbnail_url: str | None = None
    category: str | None = None
    image_count: int = DEFAULT_IMAGE_COUNT
    is_active: bool = True
    prompts: list[ThemePrompt] = field(default_factory=list)
    created_at: datetime | None = None

    def scene_prompts(self) -> list[ThemePrompt]:
        """Return active prompts in order, limited to the image count."""
        active = [prompt for prompt in self.prompts if prompt.is_active]
        active.sort(key=lambda prompt: prompt.prompt_order)
        return active[: self.image_count]
