"""Copies generated images into Supabase Storage."""

import asyncio
import logging
from dataclasses import dataclass
from uuid import UUID

import httpx
from supabase import Client

from babyshoot.services.reconciliation import ImageStore

logger = logging.getLogger(__name__)

_ALLOWED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]
_FILE_SIZE_LIMIT = 10 * 1024 * 1024


@dataclass
class SupabaseImageStore(ImageStore):
    """Stores provider images under sessions/<session>/<image> in a public bucket."""

    client: Client
    http_client: httpx.AsyncClient
    bucket: str = "generated-images"

    @classmethod
    def create(cls, client: Client, bucket: str) -> "SupabaseImageStore":
        return cls(client=client, http_client=httpx.AsyncClient(), bucket=bucket)

    def ensure_bucket(self) -> None:
        """Create the public bucket when it does not exist yet."""
        names = {bucket.name for bucket in self.client.storage.list_buckets()}
        if self.bucket in names:
            return
        self.client.storage.create_bucket(
            self.bucket,
            options={
                "public": True,
                "allowed_mime_types": _ALLOWED_MIME_TYPES,
                "file_size_limit": _FILE_SIZE_LIMIT,
            },
        )
        logger.info("Created storage bucket", extra={"bucket": self.bucket})

    async def store(
        self, source_url: str, session_id: UUID, image_id: UUID
    ) -> str | None:
        """Return the public URL of the stored copy, or None on failure."""
        try:
            response = await self.http_client.get(source_url, timeout=30)
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception(
                "Failed to download generated image",
                extra={"image_id": str(image_id)},
            )
            return None
        content_type = response.headers.get("content-type", "image/jpeg")
        extension = "png" if "png" in content_type else "jpg"
        path = f"sessions/{session_id}/{image_id}.{extension}"
        bucket = self.client.storage.from_(self.bucket)
        try:
            await asyncio.to_thread(
                bucket.upload,
                path,
                response.content,
                {"content-type": content_type, "upsert": "true"},
            )
        except Exception:
            logger.exception(
                "Failed to upload generated image",
                extra={"image_id": str(image_id), "path": path},
            )
            return None
        return bucket.get_public_url(path)

    async def close(self) -> None:
        await self.http_client.aclose()
