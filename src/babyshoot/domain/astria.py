"""Models for Astria tune and prompt payloads."""

from pydantic import BaseModel, ConfigDict, field_validator


class _AstriaModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class AstriaImage(_AstriaModel):
    """Generated image reference; the provider sends either a URL or an object."""

    url: str
    seed: int | None = None


class AstriaTune(_AstriaModel):
    """Fine-tuning job state from polling or a webhook callback."""

    id: str
    status: str | None = None
    model_id: str | None = None
    trained_at: str | None = None
    failed_at: str | None = None
    eta: str | None = None

    @property
    def is_failed(self) -> bool:
        return self.failed_at is not None or self.status == "failed"

    @property
    def is_trained(self) -> bool:
        if self.is_failed:
            return False
        return self.trained_at is not None or self.status == "completed"

    @property
    def tuned_model_id(self) -> str:
        return self.model_id or self.id


class AstriaPrompt(_AstriaModel):
    """Image generation job state."""

    id: str
    status: str | None = None
    text: str | None = None
    images: list[AstriaImage] = []
    user_error: str | None = None

    @field_validator("images", mode="before")
    @classmethod
    def _normalize_images(cls, value: object) -> object:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        return [{"url": item} if isinstance(item, str) else item for item in value]

    @property
    def first_image(self) -> AstriaImage | None:
        return self.images[0] if self.images else None

    @property
    def is_failed(self) -> bool:
        return self.status == "failed" or bool(self.user_error)
