"""Supabase-backed theme catalog repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import to_theme
from babyshoot.domain.themes import Theme
from babyshoot.services.themes import ThemeRepository

_THEME_COLUMNS = (
    "id, name, description, prompt, thumbnail_url, category, session_type, "
    "image_count, is_active, created_at, "
    "theme_prompts(id, prompt_text, prompt_order, is_active)"
)


@dataclass
class SupabaseThemeRepository(ThemeRepository):
    client: Client

    def list_active(self, session_types: list[str]) -> list[Theme]:
        response = (
            self.client.table("themes")
            .select(_THEME_COLUMNS)
            .eq("is_active", True)
            .in_("session_type", session_types)
            .order("created_at")
            .execute()
        )
        return [to_theme(row) for row in response.data or []]

    def get_theme(self, theme_id: UUID) -> Theme | None:
        response = (
            self.client.table("themes")
            .select(_THEME_COLUMNS)
            .eq("id", str(theme_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return to_theme(response.data[0])
