"""Domain models for albums and print orders."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from babyshoot.domain.images import GeneratedImage


class AlbumStatus(StrEnum):
    DRAFT = "draft"
    ORDERED = "ordered"


class OrderStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


@dataclass(frozen=True)
class AlbumImage:
    id: UUID
    image_id: UUID
    position: int
    image: GeneratedImage | None = None


@dataclass(frozen=True)
class Album:
    """User-curated collection of generated images."""

    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    status: str = AlbumStatus.DRAFT
    image_count: int = 0
    images: list[AlbumImage] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ShippingDetails:
    name: str
    address: str
    album_size: str
    cover_type: str
    total_amount: float


@dataclass(frozen=True)
class AlbumOrder:
    """Print order for an album."""

    id: UUID
    album_id: UUID
    user_id: UUID
    shipping_name: str
    shipping_address: str
    album_size: str
    cover_type: str
    base_price: float
    shipping_cost: float
    total_amount: float
    status: str = OrderStatus.PENDING
    album_title: str | None = None
    album_image_count: int = 0
    created_at: datetime | None = None
