"""Album curation and print orders."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from babyshoot.domain.albums import Album, AlbumOrder, AlbumStatus, ShippingDetails
from babyshoot.errors import InvalidRequestError, NotFoundError
from babyshoot.services.photoshoots import ImageRepository

logger = logging.getLogger(__name__)

SHIPPING_COST = 9.99


class AlbumRepository(Protocol):
    """Persistence interface for albums."""

    def list_albums(self, user_id: UUID) -> list[Album]:
        """Return the user's albums with image counts, newest update first."""

    def get_album(self, album_id: UUID, user_id: UUID) -> Album | None:
        """Return an owned album with its ordered images."""

    def create_album(self, user_id: UUID, title: str, description: str | None) -> Album:
        """Insert an album."""

    def update_album(self, album_id: UUID, changes: dict[str, object]) -> Album:
        """Update album columns and return the row."""

    def max_position(self, album_id: UUID) -> int:
        """Return the highest image position, or -1 for an empty album."""

    def add_images(self, album_id: UUID, image_ids: list[UUID], start: int) -> int:
        """Append images from position start; return the number added."""

    def remove_image(self, album_id: UUID, image_id: UUID) -> None:
        """Remove an image from an album."""

    def count_images(self, album_id: UUID) -> int:
        """Return the number of images in an album."""


class OrderRepository(Protocol):
    """Persistence interface for album orders."""

    def create_order(  # noqa: PLR0913
        self,
        album_id: UUID,
        user_id: UUID,
        shipping: ShippingDetails,
        base_price: float,
        shipping_cost: float,
    ) -> AlbumOrder:
        """Insert a pending order."""

    def list_orders(self, user_id: UUID) -> list[AlbumOrder]:
        """Return the user's orders, newest first."""

    def get_order(self, order_id: UUID, user_id: UUID) -> AlbumOrder | None:
        """Return an owned order, if present."""


@dataclass
class AlbumService:
    """Application service for albums and their orders."""

    repository: AlbumRepository
    order_repository: OrderRepository
    image_repository: ImageRepository

    def list_albums(self, user_id: UUID) -> list[Album]:
        return self.repository.list_albums(user_id)

    def create_album(
        self, user_id: UUID, title: str, description: str | None = None
    ) -> Album:
        if not title.strip():
            raise InvalidRequestError("Title is required")
        return self.repository.create_album(user_id, title.strip(), description)

    def get_album(self, user_id: UUID, album_id: UUID) -> Album:
        album = self.repository.get_album(album_id, user_id)
        if album is None:
            raise NotFoundError("Album not found")
        return album

    def update_album(
        self,
        user_id: UUID,
        album_id: UUID,
        title: str | None = None,
        description: str | None = None,
    ) -> Album:
        self.get_album(user_id, album_id)
        changes: dict[str, object] = {}
        if title is not None:
            if not title.strip():
                raise InvalidRequestError("Title is required")
            changes["title"] = title.strip()
        if description is not None:
            changes["description"] = description
        return self.repository.update_album(album_id, changes)

    def add_images(
        self, user_id: UUID, album_id: UUID, image_ids: list[UUID]
    ) -> dict[str, object]:
        """Append the user's images after the album's last position."""
        unique_ids = list(dict.fromkeys(image_ids))
        if not unique_ids:
            raise InvalidRequestError("Image IDs are required")
        self.get_album(user_id, album_id)
        owned = self.image_repository.owned_image_ids(user_id, unique_ids)
        if len(owned) != len(unique_ids):
            raise NotFoundError("Image not found")
        start = self.repository.max_position(album_id) + 1
        added = self.repository.add_images(album_id, unique_ids, start)
        return {"success": True, "added": added}

    def remove_image(self, user_id: UUID, album_id: UUID, image_id: UUID) -> None:
        self.get_album(user_id, album_id)
        self.repository.remove_image(album_id, image_id)

    def order_album(
        self, user_id: UUID, album_id: UUID, shipping: ShippingDetails
    ) -> AlbumOrder:
        """Create a pending print order and mark the album ordered."""
        self.get_album(user_id, album_id)
        if self.repository.count_images(album_id) < 1:
            raise InvalidRequestError("Album must have at least one image")
        if shipping.total_amount < SHIPPING_COST:
            raise InvalidRequestError("Total amount does not cover shipping")
        order = self.order_repository.create_order(
            album_id,
            user_id,
            shipping,
            base_price=round(shipping.total_amount - SHIPPING_COST, 2),
            shipping_cost=SHIPPING_COST,
        )
        self.repository.update_album(album_id, {"status": AlbumStatus.ORDERED})
        logger.info(
            "Album ordered",
            extra={"album_id": str(album_id), "order_id": str(order.id)},
        )
        return order

    def list_orders(self, user_id: UUID) -> list[AlbumOrder]:
        return self.order_repository.list_orders(user_id)

    def get_order(self, user_id: UUID, order_id: UUID) -> AlbumOrder:
        order = self.order_repository.get_order(order_id, user_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order
