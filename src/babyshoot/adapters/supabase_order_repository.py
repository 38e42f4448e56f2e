"""Supabase-backed album order repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import parse_datetime
from babyshoot.domain.albums import AlbumOrder, OrderStatus, ShippingDetails
from babyshoot.services.albums import OrderRepository

_ORDER_COLUMNS = (
    "id, album_id, user_id, shipping_name, shipping_address, album_size, "
    "cover_type, base_price, shipping_cost, total_amount, status, created_at, "
    "albums(title, album_images(count))"
)


def _to_order(row: dict[str, object]) -> AlbumOrder:
    album = row.get("albums") if isinstance(row.get("albums"), dict) else {}
    counts = album.get("album_images") or []
    return AlbumOrder(
        id=UUID(str(row["id"])),
        album_id=UUID(str(row["album_id"])),
        user_id=UUID(str(row["user_id"])),
        shipping_name=str(row["shipping_name"]),
        shipping_address=str(row["shipping_address"]),
        album_size=str(row["album_size"]),
        cover_type=str(row.get("cover_type") or "hardcover"),
        base_price=float(row.get("base_price") or 0),
        shipping_cost=float(row.get("shipping_cost") or 0),
        total_amount=float(row.get("total_amount") or 0),
        status=str(row.get("status") or OrderStatus.PENDING),
        album_title=album.get("title"),
        album_image_count=int(counts[0].get("count") or 0) if counts else 0,
        created_at=parse_datetime(row.get("created_at")),
    )


@dataclass
class SupabaseOrderRepository(OrderRepository):
    client: Client

    def create_order(  # noqa: PLR0913
        self,
        album_id: UUID,
        user_id: UUID,
        shipping: ShippingDetails,
        base_price: float,
        shipping_cost: float,
    ) -> AlbumOrder:
        response = (
            self.client.table("album_orders")
            .insert(
                {
                    "album_id": str(album_id),
                    "user_id": str(user_id),
                    "shipping_name": shipping.name,
                    "shipping_address": shipping.address,
                    "album_size": shipping.album_size,
                    "cover_type": shipping.cover_type,
                    "base_price": base_price,
                    "shipping_cost": shipping_cost,
                    "total_amount": shipping.total_amount,
                    "status": OrderStatus.PENDING.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create order")
        return _to_order(response.data[0])

    def list_orders(self, user_id: UUID) -> list[AlbumOrder]:
        response = (
            self.client.table("album_orders")
            .select(_ORDER_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_to_order(row) for row in response.data or []]

    def get_order(self, order_id: UUID, user_id: UUID) -> AlbumOrder | None:
        response = (
            self.client.table("album_orders")
            .select(_ORDER_COLUMNS)
            .eq("id", str(order_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_order(response.data[0])
