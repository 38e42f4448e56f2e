"""Theme catalog and credit endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Query, Request

from babyshoot.api.deps import require_user
from babyshoot.domain.models import AuthenticatedUser  # noqa: TC001

if TYPE_CHECKING:
    from babyshoot.containers import AppContainer

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/themes")
async def list_themes(
    request: Request,
    session_type: str = Query(default="child"),
    _: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Return active themes for a session type, including shared ones."""
    container: AppContainer = request.app.state.container
    return {"themes": container.theme_service.list_themes(session_type)}


@router.get("/credits/balance")
async def credit_balance(
    request: Request, user: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {
        "balance": container.credit_service.get_balance(user.id),
        "user_id": user.id,
    }


@router.get("/credits/transactions")
async def credit_transactions(
    request: Request,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return container.credit_service.list_transactions(user.id, limit, offset)


@router.get("/credits/packages")
async def credit_packages(request: Request) -> dict[str, object]:
    """Public list of purchasable credit packages."""
    container: AppContainer = request.app.state.container
    return {"packages": container.credit_service.list_packages()}
