"""Request bodies accepted by the API."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from babyshoot.domain.albums import ShippingDetails
from babyshoot.domain.children import ChildProfile, FamilyMember
from babyshoot.services.photoshoots import PhotoshootRequest


class _Body(BaseModel):
    """Accepts both snake_case and the web client's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChildProfileBody(_Body):
    name: str = Field(min_length=1)
    age_in_months: int = Field(ge=0)
    gender: Literal["boy", "girl", "other"]
    hair_color: str = Field(min_length=1)
    eye_color: str = Field(min_length=1)
    skin_tone: str = Field(min_length=1)
    hair_style: str = "straight"
    unique_features: str | None = None

    def to_profile(self) -> ChildProfile:
        return ChildProfile(
            name=self.name.strip(),
            age_in_months=self.age_in_months,
            gender=self.gender,
            hair_color=self.hair_color,
            eye_color=self.eye_color,
            skin_tone=self.skin_tone,
            hair_style=self.hair_style or "straight",
            unique_features=self.unique_features or None,
        )


class FamilyMemberBody(_Body):
    name: str = Field(min_length=1)
    relation: str = Field(min_length=1)
    gender: str = Field(min_length=1)
    age: str | None = None

    @field_validator("age", mode="before")
    @classmethod
    def _age_as_text(cls, value: object) -> object:
        if isinstance(value, int | float):
            return str(int(value))
        return value

    def to_member(self) -> FamilyMember:
        return FamilyMember(
            name=self.name, relation=self.relation, gender=self.gender, age=self.age
        )


class CreatePhotoshootBody(_Body):
    session_type: str
    theme_id: UUID
    child: ChildProfileBody | None = None
    family_members: list[FamilyMemberBody] = Field(default_factory=list)
    photo_urls: list[str] = Field(default_factory=list)
    existing_photos: list[str] = Field(default_factory=list)
    reuse_session_id: UUID | None = None
    reuse_child_id: UUID | None = None

    def to_request(self) -> PhotoshootRequest:
        return PhotoshootRequest(
            session_type=self.session_type,
            theme_id=self.theme_id,
            child=self.child.to_profile() if self.child else None,
            family_members=[member.to_member() for member in self.family_members],
            photo_urls=self.photo_urls,
            existing_photos=self.existing_photos,
            reuse_session_id=self.reuse_session_id,
            reuse_child_id=self.reuse_child_id,
        )


class CreateAlbumBody(_Body):
    title: str = Field(min_length=1)
    description: str | None = None


class UpdateAlbumBody(_Body):
    title: str | None = None
    description: str | None = None


class AlbumImagesBody(_Body):
    image_ids: list[UUID] = Field(min_length=1)


class OrderAlbumBody(_Body):
    shipping_name: str = Field(min_length=1)
    shipping_address: str = Field(min_length=1)
    album_size: str = Field(min_length=1)
    cover_type: str = "hardcover"
    total_amount: float = Field(gt=0)

    def to_shipping(self) -> ShippingDetails:
        return ShippingDetails(
            name=self.shipping_name,
            address=self.shipping_address,
            album_size=self.album_size,
            cover_type=self.cover_type,
            total_amount=self.total_amount,
        )
