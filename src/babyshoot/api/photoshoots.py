"""Photoshoot session endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from babyshoot.adapters.astria_client import AstriaError
from babyshoot.api.deps import require_user
from babyshoot.api.schemas import CreatePhotoshootBody  # noqa: TC001
from babyshoot.domain.models import AuthenticatedUser  # noqa: TC001
from babyshoot.domain.sessions import SessionStatus
from babyshoot.errors import InvalidRequestError, ServiceError

if TYPE_CHECKING:
    from babyshoot.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/photoshoot", tags=["photoshoot"])


@router.post("/create")
async def create_photoshoot(
    body: CreatePhotoshootBody,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Create a session and start training or reuse a model."""
    container: AppContainer = request.app.state.container
    return await container.photoshoot_service.create_session(user, body.to_request())


@router.get("/{session_id}")
async def get_photoshoot(
    session_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return container.photoshoot_service.get_session_detail(user.id, session_id)


@router.delete("/{session_id}")
async def delete_photoshoot(
    session_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    container.photoshoot_service.delete_session(user.id, session_id)
    return {"success": True}


@router.post("/{session_id}/generate")
async def generate_images(
    session_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Start image generation for a ready session."""
    container: AppContainer = request.app.state.container
    return await container.photoshoot_service.start_generation(user.id, session_id)


@router.post("/{session_id}/status")
async def check_training_status(
    session_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Manually poll training for one session."""
    container: AppContainer = request.app.state.container
    session = container.photoshoot_service.get_owned_session(user.id, session_id)
    if session.status in {SessionStatus.READY, SessionStatus.COMPLETED}:
        return {
            "session_id": session.id,
            "status": session.status,
            "model_id": session.model_id,
            "message": "Training already completed",
        }
    if not session.training_job_id:
        raise InvalidRequestError("No training job found for this session")
    try:
        result = await container.reconciler.check_training(session)
    except AstriaError as exc:
        raise ServiceError(
            "Failed to check training status", details=str(exc)
        ) from exc
    return asdict(result)


@router.post("/{session_id}/check-generation")
async def check_generation_status(
    session_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Manually poll every generating image of one session."""
    container: AppContainer = request.app.state.container
    session = container.photoshoot_service.get_owned_session(user.id, session_id)
    if not session.model_id:
        raise InvalidRequestError("No model ID found for this session")
    result = await container.reconciler.check_generation(session)
    return asdict(result)


@router.post("/{session_id}/auto-update")
async def auto_update(
    session_id: UUID,
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Reconcile a session and return its fresh state for client polling."""
    container: AppContainer = request.app.state.container
    session = container.photoshoot_service.get_owned_session(user.id, session_id)
    check = None
    try:
        check = asdict(await container.reconciler.check_session(session))
    except AstriaError:
        logger.exception(
            "Auto-update check failed", extra={"session_id": str(session_id)}
        )
    detail = container.photoshoot_service.get_session_detail(user.id, session_id)
    return {"check": check, **detail}
