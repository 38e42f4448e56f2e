"""Astria webhook and scheduled reconciliation endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from babyshoot.api.deps import require_cron, require_status_token
from babyshoot.domain.astria import AstriaPrompt, AstriaTune

if TYPE_CHECKING:
    from babyshoot.containers import AppContainer
    from babyshoot.services.reconciliation import PassSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["astria"])

_WEBHOOK_OBJECTS = ("tune", "prompt")


def _unwrap(
    payload: dict[str, Any], object_type: str | None
) -> tuple[str | None, dict[str, Any]]:
    """Return the object kind and its fields, accepting wrapped payloads."""
    for kind in _WEBHOOK_OBJECTS:
        nested = payload.get(kind)
        if isinstance(nested, dict):
            return kind, nested
    return payload.get("object") or object_type, payload


@router.post("/webhooks/astria", response_model=None)
async def astria_webhook(
    request: Request,
    payload: dict[str, Any] = Body(...),
    object_type: str | None = Query(default=None, alias="object"),
    secret: str | None = Query(default=None),
) -> dict[str, object] | JSONResponse:
    """Apply a provider callback for a tune or a prompt job."""
    container: AppContainer = request.app.state.container
    expected = container.settings.astria_webhook_secret
    if expected and secret != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    kind, fields = _unwrap(payload, object_type)
    try:
        if kind == "tune":
            container.reconciler.handle_tune_event(AstriaTune.model_validate(fields))
        elif kind == "prompt":
            await container.reconciler.handle_prompt_event(
                AstriaPrompt.model_validate(fields)
            )
        else:
            logger.info("Ignoring webhook object", extra={"object": kind})
    except Exception:
        logger.exception("Webhook processing failed", extra={"object": kind})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )
    return {"success": True}


def _summary(message: str, summary: PassSummary) -> dict[str, object]:
    return {"message": message, **asdict(summary)}


@router.api_route(
    "/cron/check-training-status",
    methods=["GET", "POST"],
    dependencies=[Depends(require_cron)],
)
async def cron_training(request: Request) -> dict[str, object]:
    """Poll every training session."""
    container: AppContainer = request.app.state.container
    summary = await container.reconciler.run_training_pass()
    return _summary("Training status check completed", summary)


@router.api_route(
    "/cron/check-generation-status",
    methods=["GET", "POST"],
    dependencies=[Depends(require_cron)],
)
async def cron_generation(request: Request) -> dict[str, object]:
    """Poll every generating session."""
    container: AppContainer = request.app.state.container
    summary = await container.reconciler.run_generation_pass()
    return _summary("Generation status check completed", summary)


@router.api_route(
    "/status/check-all",
    methods=["GET", "POST"],
    dependencies=[Depends(require_status_token)],
)
async def check_all_pending(request: Request) -> dict[str, object]:
    """Check training and generating sessions that are due."""
    container: AppContainer = request.app.state.container
    summary = await container.reconciler.run_pending_pass()
    return _summary("Pending session check completed", summary)
