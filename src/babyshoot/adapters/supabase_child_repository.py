"""Supabase-backed child profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import CHILD_COLUMNS, to_child
from babyshoot.domain.children import Child, ChildProfile
from babyshoot.services.children import ChildRepository


@dataclass
class SupabaseChildRepository(ChildRepository):
    """Supabase implementation for child profiles."""

    client: Client

    def list_children(self, user_id: UUID) -> list[Child]:
        response = (
            self.client.table("children")
            .select(CHILD_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [to_child(row) for row in response.data or []]

    def get_child(self, child_id: UUID, user_id: UUID) -> Child | None:
        response = (
            self.client.table("children")
            .select(CHILD_COLUMNS)
            .eq("id", str(child_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return to_child(response.data[0])

    def find_by_name(self, user_id: UUID, name: str) -> Child | None:
        response = (
            self.client.table("children")
            .select(CHILD_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return to_child(response.data[0])

    def create_child(self, user_id: UUID, profile: ChildProfile) -> Child:
        response = (
            self.client.table("children")
            .insert(
                {
                    "user_id": str(user_id),
                    "name": profile.name,
                    "age_in_months": profile.age_in_months,
                    "gender": profile.gender,
                    "hair_color": profile.hair_color,
                    "hair_style": profile.hair_style,
                    "eye_color": profile.eye_color,
                    "skin_tone": profile.skin_tone,
                    "unique_features": profile.unique_features,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create child")
        return to_child(response.data[0])

    def delete_child(self, child_id: UUID) -> None:
        self.client.table("children").delete().eq("id", str(child_id)).execute()
