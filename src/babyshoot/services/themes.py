"""Read-only theme catalog."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from babyshoot.domain.themes import Theme
from babyshoot.errors import InvalidRequestError
from babyshoot.services.cache import Cache, cached

SESSION_TYPES = ("child", "family")
_THEMES_TTL_SECONDS = 300


class ThemeRepository(Protocol):
    """Persistence interface for themes."""

    def list_active(self, session_types: list[str]) -> list[Theme]:
        """Return active themes for the given session types, oldest first."""

    def get_theme(self, theme_id: UUID) -> Theme | None:
        """Return a theme with its prompts, if present."""


@dataclass
class ThemeService:
    repository: ThemeRepository
    cache: Cache

    def list_themes(self, session_type: str) -> list[Theme]:
        """Return active themes usable for a session type."""
        if session_type not in SESSION_TYPES:
            raise InvalidRequestError("Invalid session type")
        return cached(
            self.cache,
            f"themes:{session_type}",
            _THEMES_TTL_SECONDS,
            lambda: self.repository.list_active([session_type, "both"]),
        )

    def get_active_theme(self, theme_id: UUID) -> Theme | None:
        theme = self.repository.get_theme(theme_id)
        if theme is None or not theme.is_active:
            return None
        return theme

    def get_theme(self, theme_id: UUID) -> Theme | None:
        return self.repository.get_theme(theme_id)
