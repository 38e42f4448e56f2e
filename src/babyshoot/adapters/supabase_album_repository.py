"""Supabase-backed album repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import (
    IMAGE_COLUMNS,
    optional_str,
    parse_datetime,
    to_image,
)
from babyshoot.domain.albums import Album, AlbumImage
from babyshoot.services.albums import AlbumRepository

_ALBUM_COLUMNS = "id, user_id, title, description, status, created_at, updated_at"


def _count(row: dict[str, object], relation: str) -> int:
    nested = row.get(relation)
    if isinstance(nested, list) and nested and isinstance(nested[0], dict):
        return int(nested[0].get("count") or 0)
    return 0


def _to_album(
    row: dict[str, object], images: list[AlbumImage] | None = None
) -> Album:
    resolved = images or []
    count = len(resolved) if images is not None else _count(row, "album_images")
    return Album(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        title=str(row["title"]),
        description=optional_str(row.get("description")),
        status=str(row.get("status") or "draft"),
        image_count=count,
        images=resolved,
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


@dataclass
class SupabaseAlbumRepository(AlbumRepository):
    """Supabase implementation for albums and their image slots."""

    client: Client

    def list_albums(self, user_id: UUID) -> list[Album]:
        response = (
            self.client.table("albums")
            .select(f"{_ALBUM_COLUMNS}, album_images(count)")
            .eq("user_id", str(user_id))
            .order("updated_at", desc=True)
            .execute()
        )
        return [_to_album(row) for row in response.data or []]

    def get_album(self, album_id: UUID, user_id: UUID) -> Album | None:
        response = (
            self.client.table("albums")
            .select(
                f"{_ALBUM_COLUMNS}, album_images(id, image_id, position, "
                f"generated_images({IMAGE_COLUMNS}))"
            )
            .eq("id", str(album_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        images = [
            AlbumImage(
                id=UUID(str(slot["id"])),
                image_id=UUID(str(slot["image_id"])),
                position=int(slot.get("position") or 0),
                image=(
                    to_image(slot["generated_images"])
                    if slot.get("generated_images")
                    else None
                ),
            )
            for slot in row.get("album_images") or []
        ]
        images.sort(key=lambda slot: slot.position)
        return _to_album(row, images)

    def create_album(self, user_id: UUID, title: str, description: str | None) -> Album:
        response = (
            self.client.table("albums")
            .insert(
                {
                    "user_id": str(user_id),
                    "title": title,
                    "description": description,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create album")
        return _to_album(response.data[0])

    def update_album(self, album_id: UUID, changes: dict[str, object]) -> Album:
        response = (
            self.client.table("albums")
            .update({**changes, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(album_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update album")
        return _to_album(response.data[0])

    def max_position(self, album_id: UUID) -> int:
        response = (
            self.client.table("album_images")
            .select("position")
            .eq("album_id", str(album_id))
            .order("position", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return -1
        return int(response.data[0]["position"])

    def add_images(self, album_id: UUID, image_ids: list[UUID], start: int) -> int:
        response = (
            self.client.table("album_images")
            .insert(
                [
                    {
                        "album_id": str(album_id),
                        "image_id": str(image_id),
                        "position": start + offset,
                    }
                    for offset, image_id in enumerate(image_ids)
                ]
            )
            .execute()
        )
        return len(response.data or [])

    def remove_image(self, album_id: UUID, image_id: UUID) -> None:
        self.client.table("album_images").delete().eq("album_id", str(album_id)).eq(
            "image_id", str(image_id)
        ).execute()

    def count_images(self, album_id: UUID) -> int:
        response = (
            self.client.table("album_images")
            .select("id", count="exact")
            .eq("album_id", str(album_id))
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])
