"""Child profile endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from babyshoot.api.deps import require_user
from babyshoot.api.schemas import ChildProfileBody  # noqa: TC001
from babyshoot.domain.models import AuthenticatedUser  # noqa: TC001

if TYPE_CHECKING:
    from babyshoot.containers import AppContainer

router = APIRouter(prefix="/api/children", tags=["children"])


@router.get("")
async def list_children(
    request: Request, user: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"children": container.child_service.list_children(user.id)}


@router.post("")
async def create_child(
    body: ChildProfileBody,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Create a child profile for the current user."""
    container: AppContainer = request.app.state.container
    container.user_service.ensure_user(user)
    child = container.child_service.create_child(user.id, body.to_profile())
    return {"child": child}


@router.delete("/{child_id}")
async def delete_child(
    child_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    container.child_service.delete_child(user.id, child_id)
    return {"success": True}


@router.get("/{child_id}/latest-session")
async def latest_session(
    child_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Return the child's newest reusable model session."""
    container: AppContainer = request.app.state.container
    return container.child_service.latest_session(user.id, child_id)
