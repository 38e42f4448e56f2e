"""Album, order and image gallery endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request

from babyshoot.api.deps import require_user
from babyshoot.api.schemas import (  # noqa: TC001
    AlbumImagesBody,
    CreateAlbumBody,
    OrderAlbumBody,
    UpdateAlbumBody,
)
from babyshoot.domain.models import AuthenticatedUser  # noqa: TC001

if TYPE_CHECKING:
    from babyshoot.containers import AppContainer

router = APIRouter(prefix="/api", tags=["albums"])


@router.get("/albums")
async def list_albums(
    request: Request, user: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"albums": container.album_service.list_albums(user.id)}


@router.post("/albums")
async def create_album(
    body: CreateAlbumBody,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    album = container.album_service.create_album(user.id, body.title, body.description)
    return {"album": album}


@router.get("/albums/{album_id}")
async def get_album(
    album_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Return an album with its images in position order."""
    container: AppContainer = request.app.state.container
    return {"album": container.album_service.get_album(user.id, album_id)}


@router.put("/albums/{album_id}")
async def update_album(
    album_id: UUID,
    body: UpdateAlbumBody,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    album = container.album_service.update_album(
        user.id, album_id, title=body.title, description=body.description
    )
    return {"album": album}


@router.post("/albums/{album_id}/images")
async def add_album_images(
    album_id: UUID,
    body: AlbumImagesBody,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return container.album_service.add_images(user.id, album_id, body.image_ids)


@router.delete("/albums/{album_id}/images")
async def remove_album_image(
    album_id: UUID,
    request: Request,
    image_id: UUID = Query(alias="imageId"),
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    container.album_service.remove_image(user.id, album_id, image_id)
    return {"success": True}


@router.post("/albums/{album_id}/order")
async def order_album(
    album_id: UUID,
    body: OrderAlbumBody,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Place a pending print order for an album."""
    container: AppContainer = request.app.state.container
    order = container.album_service.order_album(user.id, album_id, body.to_shipping())
    return {"order": order}


@router.get("/orders")
async def list_orders(
    request: Request, user: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"orders": container.album_service.list_orders(user.id)}


@router.get("/orders/{order_id}")
async def get_order(
    order_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"order": container.album_service.get_order(user.id, order_id)}


@router.get("/images/user-images")
async def user_images(
    request: Request, user: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    """Return the user's completed images across all sessions."""
    container: AppContainer = request.app.state.container
    return {"images": container.photoshoot_service.list_user_images(user.id)}


@router.get("/dashboard")
async def dashboard(
    request: Request, user: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    container.user_service.ensure_user(user)
    return container.dashboard_service.get_dashboard(user.id)
