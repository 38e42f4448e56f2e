"""Supabase-backed generated image repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import IMAGE_COLUMNS, to_image
from babyshoot.domain.images import GeneratedImage, ImageStatus, NewImage
from babyshoot.services.photoshoots import ImageRepository

_TABLE = "generated_images"
_OWNER_JOIN = "photoshoot_sessions!inner(user_id)"


@dataclass
class SupabaseImageRepository(ImageRepository):
    """Supabase implementation for generated images."""

    client: Client

    def create_images(self, images: list[NewImage]) -> list[GeneratedImage]:
        if not images:
            return []
        response = (
            self.client.table(_TABLE)
            .insert(
                [
                    {
                        "session_id": str(image.session_id),
                        "image_url": "",
                        "prompt": image.prompt,
                        "status": ImageStatus.GENERATING.value,
                        "astria_prompt_id": image.astria_prompt_id,
                        "theme_prompt_id": (
                            str(image.theme_prompt_id)
                            if image.theme_prompt_id
                            else None
                        ),
                    }
                    for image in images
                ]
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create image records")
        return [to_image(row) for row in response.data]

    def list_session_images(
        self, session_id: UUID, status: str | None = None
    ) -> list[GeneratedImage]:
        query = (
            self.client.table(_TABLE)
            .select(IMAGE_COLUMNS)
            .eq("session_id", str(session_id))
        )
        if status is not None:
            query = query.eq("status", str(status))
        response = query.order("created_at").execute()
        return [to_image(row) for row in response.data or []]

    def find_generating_by_prompt(self, prompt_id: str) -> GeneratedImage | None:
        response = (
            self.client.table(_TABLE)
            .select(IMAGE_COLUMNS)
            .eq("astria_prompt_id", prompt_id)
            .eq("status", ImageStatus.GENERATING.value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return to_image(response.data[0])

    def complete_image(
        self,
        image_id: UUID,
        image_url: str,
        astria_url: str,
        seed: int | None,
    ) -> bool:
        return self._finish(
            image_id,
            {
                "status": ImageStatus.COMPLETED.value,
                "image_url": image_url,
                "thumbnail_url": image_url,
                "astria_url": astria_url,
                "seed": seed,
            },
        )

    def fail_image(self, image_id: UUID) -> bool:
        return self._finish(image_id, {"status": ImageStatus.FAILED.value})

    def _finish(self, image_id: UUID, payload: dict[str, object]) -> bool:
        response = (
            self.client.table(_TABLE)
            .update(payload)
            .eq("id", str(image_id))
            .eq("status", ImageStatus.GENERATING.value)
            .execute()
        )
        return bool(response.data)

    def delete_session_images(self, session_id: UUID) -> None:
        self.client.table(_TABLE).delete().eq("session_id", str(session_id)).execute()

    def list_user_images(self, user_id: UUID) -> list[GeneratedImage]:
        response = (
            self.client.table(_TABLE)
            .select(f"{IMAGE_COLUMNS}, {_OWNER_JOIN}")
            .eq("photoshoot_sessions.user_id", str(user_id))
            .eq("status", ImageStatus.COMPLETED.value)
            .neq("image_url", "")
            .order("created_at", desc=True)
            .execute()
        )
        return [to_image(row) for row in response.data or []]

    def owned_image_ids(self, user_id: UUID, image_ids: list[UUID]) -> set[UUID]:
        if not image_ids:
            return set()
        response = (
            self.client.table(_TABLE)
            .select(f"id, {_OWNER_JOIN}")
            .eq("photoshoot_sessions.user_id", str(user_id))
            .eq("status", ImageStatus.COMPLETED.value)
            .in_("id", [str(image_id) for image_id in image_ids])
            .execute()
        )
        return {UUID(str(row["id"])) for row in response.data or []}
