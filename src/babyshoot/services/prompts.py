"""Prompt construction, family fingerprints and model reuse windows."""

import math
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from babyshoot.domain.children import ChildProfile, FamilyMember

QUALITY_SUFFIX = (
    "masterpiece, award-winning photography, perfect composition, beautiful lighting"
)
MODEL_VALIDITY_DAYS = 30


def age_description(age_in_months: int) -> str:
    """Return the age label used in child prompts."""
    if age_in_months < 6:
        return "newborn baby"
    if age_in_months < 12:
        return "infant baby"
    if age_in_months < 24:
        return "toddler"
    return "young child"


def build_child_prompt(profile: ChildProfile) -> str:
    """Describe a child for the image model."""
    age = age_description(profile.age_in_months)
    prompt = f"Photorealistic portrait of a beautiful {age}"
    if profile.gender != "other":
        prompt += f" {profile.gender}"
    prompt += (
        f" with {profile.hair_style} {profile.hair_color} hair,"
        f" {profile.eye_color} eyes, {profile.skin_tone} skin tone"
    )
    if profile.unique_features:
        prompt += f", {profile.unique_features}"
    prompt += (
        ", smiling happily, professional photography, high quality,"
        " 8k resolution, soft lighting"
    )
    return prompt


def build_family_prompt(members: Sequence[FamilyMember]) -> str:
    """Describe a family group for the image model."""
    descriptions = []
    for member in members:
        detail = f"{member.relation}, {member.gender}"
        if member.age:
            detail += f", {member.age}"
        descriptions.append(f"{member.name} ({detail})")
    return (
        f"Family portrait featuring {', '.join(descriptions)}. "
        "Professional family photography style, warm and natural lighting, "
        "genuine expressions and interactions between family members."
    )


def _age_bucket(age: str | None) -> str:
    if age is None:
        return ""
    try:
        years = int(age.strip())
    except ValueError:
        return ""
    if years < 5:
        return "_toddler"
    if years < 13:
        return "_child"
    if years < 20:
        return "_teen"
    if years < 65:
        return "_adult"
    return "_senior"


def family_fingerprint(members: Sequence[FamilyMember]) -> str:
    """Return a name-independent key identifying a family composition."""
    ordered = sorted(members, key=lambda member: (member.relation, member.gender))
    return "|".join(
        f"{member.relation}_{member.gender}{_age_bucket(member.age)}"
        for member in ordered
    )


def enhance_with_theme(base_prompt: str, theme_prompt: str) -> str:
    return f"{theme_prompt}, {base_prompt}, {QUALITY_SUFFIX}"


def generation_prompt(
    token: str, class_name: str, base_prompt: str, scene: str | None = None
) -> str:
    """Prefix a prompt with the tune's trigger token and class name."""
    text = f"{token} {class_name} {base_prompt}"
    if scene:
        text += f", {scene}"
    return text


def model_expires_at(
    updated_at: datetime, days: int = MODEL_VALIDITY_DAYS
) -> datetime:
    return updated_at + timedelta(days=days)


def is_model_valid(
    updated_at: datetime,
    days: int = MODEL_VALIDITY_DAYS,
    now: datetime | None = None,
) -> bool:
    """Return true while a trained model may still be reused."""
    current = now or datetime.now(tz=UTC)
    return current < model_expires_at(updated_at, days)


def days_until_expiration(
    updated_at: datetime,
    days: int = MODEL_VALIDITY_DAYS,
    now: datetime | None = None,
) -> int:
    current = now or datetime.now(tz=UTC)
    remaining = model_expires_at(updated_at, days) - current
    return max(0, math.ceil(remaining.total_seconds() / 86400))
