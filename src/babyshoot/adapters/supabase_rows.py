"""Row-to-domain conversions shared by the Supabase repositories."""

from datetime import datetime
from uuid import UUID

from babyshoot.domain.children import Child, ChildProfile
from babyshoot.domain.images import GeneratedImage
from babyshoot.domain.sessions import PhotoshootSession
from babyshoot.domain.themes import DEFAULT_IMAGE_COUNT, Theme, ThemePrompt

SESSION_COLUMNS = (
    "id, user_id, child_id, status, selected_theme_id, base_prompt, "
    "enhanced_prompt, uploaded_photos, model_id, training_job_id, "
    "generation_job_id, generation_prompt, family_fingerprint, "
    "created_at, updated_at"
)
IMAGE_COLUMNS = (
    "id, session_id, image_url, thumbnail_url, astria_url, prompt, status, "
    "astria_prompt_id, seed, theme_prompt_id, created_at"
)
CHILD_COLUMNS = (
    "id, user_id, name, age_in_months, gender, hair_color, hair_style, "
    "eye_color, skin_tone, unique_features, created_at"
)


def parse_datetime(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None


def optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def to_session(row: dict[str, object]) -> PhotoshootSession:
    photos = row.get("uploaded_photos") or []
    return PhotoshootSession(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        status=str(row["status"]),
        child_id=optional_uuid(row.get("child_id")),
        selected_theme_id=optional_uuid(row.get("selected_theme_id")),
        base_prompt=optional_str(row.get("base_prompt")),
        enhanced_prompt=optional_str(row.get("enhanced_prompt")),
        uploaded_photos=[str(photo) for photo in photos],
        model_id=optional_str(row.get("model_id")),
        training_job_id=optional_str(row.get("training_job_id")),
        generation_job_id=optional_str(row.get("generation_job_id")),
        generation_prompt=optional_str(row.get("generation_prompt")),
        family_fingerprint=optional_str(row.get("family_fingerprint")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


def to_image(row: dict[str, object]) -> GeneratedImage:
    seed = row.get("seed")
    return GeneratedImage(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["session_id"])),
        status=str(row["status"]),
        image_url=str(row.get("image_url") or ""),
        thumbnail_url=optional_str(row.get("thumbnail_url")),
        astria_url=optional_str(row.get("astria_url")),
        prompt=optional_str(row.get("prompt")),
        astria_prompt_id=optional_str(row.get("astria_prompt_id")),
        seed=int(seed) if seed is not None else None,
        theme_prompt_id=optional_uuid(row.get("theme_prompt_id")),
        created_at=parse_datetime(row.get("created_at")),
    )


def to_child(row: dict[str, object]) -> Child:
    return Child(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        profile=ChildProfile(
            name=str(row["name"]),
            age_in_months=int(row["age_in_months"]),
            gender=str(row["gender"]),
            hair_color=str(row["hair_color"]),
            eye_color=str(row["eye_color"]),
            skin_tone=str(row["skin_tone"]),
            hair_style=str(row.get("hair_style") or "straight"),
            unique_features=optional_str(row.get("unique_features")),
        ),
        created_at=parse_datetime(row.get("created_at")),
    )


def to_theme(row: dict[str, object]) -> Theme:
    """Build a theme with its active prompts sorted by order."""
    prompts = [
        ThemePrompt(
            id=UUID(str(prompt["id"])),
            prompt_text=str(prompt["prompt_text"]),
            prompt_order=int(prompt.get("prompt_order") or 0),
            is_active=bool(prompt.get("is_active", True)),
        )
        for prompt in row.get("theme_prompts") or []
    ]
    active = sorted(
        (prompt for prompt in prompts if prompt.is_active),
        key=lambda prompt: prompt.prompt_order,
    )
    return Theme(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        prompt=str(row.get("prompt") or ""),
        session_type=str(row.get("session_type") or "both"),
        description=optional_str(row.get("description")),
        thumbnail_url=optional_str(row.get("thumbnail_url")),
        category=optional_str(row.get("category")),
        image_count=int(row.get("image_count") or DEFAULT_IMAGE_COUNT),
        is_active=bool(row.get("is_active", True)),
        prompts=active,
        created_at=parse_datetime(row.get("created_at")),
    )
