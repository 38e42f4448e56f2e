"""Single source of truth for reconciling sessions with provider job state.

Every entry point (cron passes, manual checks, client auto-update and provider
webhooks) goes through :class:`StatusReconciler`. Writes are guarded
transitions: a row only moves when its current status is one of the expected
source statuses, so a caller that loses a race reports ``updated=False``
instead of overwriting newer state.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from babyshoot.adapters.astria_client import AstriaClient, AstriaError
from babyshoot.domain.astria import AstriaPrompt, AstriaTune
from babyshoot.domain.images import GeneratedImage, ImageStatus
from babyshoot.domain.sessions import (
    TRAINING_STATUSES,
    PhotoshootSession,
    SessionStatus,
)
from babyshoot.services.photoshoots import ImageRepository, SessionRepository

logger = logging.getLogger(__name__)

Payload = TypeVar("Payload", bound=BaseModel)


class ImageStore(Protocol):
    """Copies provider images into durable storage."""

    async def store(
        self, source_url: str, session_id: UUID, image_id: UUID
    ) -> str | None:
        """Return the durable URL, or None when the copy failed."""


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one session."""

    session_id: UUID
    status: str
    updated: bool
    message: str
    eta: str | None = None
    total_images: int = 0
    completed_images: int = 0
    failed_images: int = 0
    still_generating: int = 0


@dataclass(frozen=True)
class PassSummary:
    """Outcome of a batch pass over many sessions."""

    checked: int
    updated: int
    results: list[ReconcileResult] = field(default_factory=list)


@dataclass
class StatusReconciler:
    """Applies provider job state to sessions and images."""

    session_repository: SessionRepository
    image_repository: ImageRepository
    astria_client: AstriaClient
    image_store: ImageStore | None = None
    training_check_after: timedelta = timedelta(minutes=2)
    generation_check_after: timedelta = timedelta(minutes=1)

    async def check_training(self, session: PhotoshootSession) -> ReconcileResult:
        """Poll the session's tune and apply its state."""
        if session.status not in TRAINING_STATUSES or not session.training_job_id:
            return _unchanged(session, "Session is not training")
        raw = await self.astria_client.get_tune(session.training_job_id)
        return self._apply_tune(session.id, _parse(AstriaTune, raw))

    def _apply_tune(self, session_id: UUID, tune: AstriaTune) -> ReconcileResult:
        if tune.is_trained:
            moved = self.session_repository.transition_status(
                session_id,
                TRAINING_STATUSES,
                SessionStatus.READY,
                {"model_id": tune.tuned_model_id},
            )
            if moved:
                logger.info(
                    "Training completed",
                    extra={
                        "session_id": str(session_id),
                        "model_id": tune.tuned_model_id,
                    },
                )
            return ReconcileResult(
                session_id=session_id,
                status=SessionStatus.READY,
                updated=moved,
                message="Training completed successfully!",
            )
        if tune.is_failed:
            moved = self.session_repository.transition_status(
                session_id, TRAINING_STATUSES, SessionStatus.FAILED
            )
            if moved:
                logger.warning(
                    "Training failed", extra={"session_id": str(session_id)}
                )
            return ReconcileResult(
                session_id=session_id,
                status=SessionStatus.FAILED,
                updated=moved,
                message="Training failed",
            )
        return ReconcileResult(
            session_id=session_id,
            status=SessionStatus.TRAINING,
            updated=False,
            message="Training still in progress",
            eta=tune.eta,
        )

    async def check_generation(self, session: PhotoshootSession) -> ReconcileResult:
        """Poll every generating image of the session, then finalise it."""
        if session.status != SessionStatus.GENERATING or not session.model_id:
            return _unchanged(session, "Session is not generating")
        pending = self.image_repository.list_session_images(
            session.id, status=ImageStatus.GENERATING
        )
        for image in pending:
            if not image.astria_prompt_id:
                continue
            try:
                raw = await self.astria_client.get_prompt(
                    session.model_id, image.astria_prompt_id
                )
                job = _parse(AstriaPrompt, raw)
            except AstriaError:
                logger.exception(
                    "Failed to check prompt",
                    extra={"session_id": str(session.id), "image_id": str(image.id)},
                )
                continue
            await self._apply_prompt(image, job)
        return self._finalize(session.id)

    async def _apply_prompt(self, image: GeneratedImage, job: AstriaPrompt) -> bool:
        first = job.first_image
        if first is not None:
            stored_url = await self._persist(first.url, image)
            return self.image_repository.complete_image(
                image.id, image_url=stored_url, astria_url=first.url, seed=first.seed
            )
        if job.is_failed:
            logger.warning(
                "Image generation failed",
                extra={"image_id": str(image.id), "reason": job.user_error},
            )
            return self.image_repository.fail_image(image.id)
        return False

    async def _persist(self, source_url: str, image: GeneratedImage) -> str:
        if self.image_store is None:
            return source_url
        stored = await self.image_store.store(source_url, image.session_id, image.id)
        return stored or source_url

    def _finalize(self, session_id: UUID) -> ReconcileResult:
        images = self.image_repository.list_session_images(session_id)
        completed = sum(1 for image in images if image.status == ImageStatus.COMPLETED)
        failed = sum(1 for image in images if image.status == ImageStatus.FAILED)
        generating = len(images) - completed - failed
        counts = {
            "total_images": len(images),
            "completed_images": completed,
            "failed_images": failed,
            "still_generating": generating,
        }
        if generating:
            return ReconcileResult(
                session_id=session_id,
                status=SessionStatus.GENERATING,
                updated=False,
                message=f"{completed}/{len(images)} images completed",
                **counts,
            )
        final = SessionStatus.COMPLETED if failed == 0 else SessionStatus.FAILED
        moved = self.session_repository.transition_status(
            session_id, {SessionStatus.GENERATING}, final
        )
        if moved:
            logger.info(
                "Generation finished",
                extra={"session_id": str(session_id), "status": str(final)},
            )
        return ReconcileResult(
            session_id=session_id,
            status=final,
            updated=moved,
            message=f"Generation {final}: {completed}/{len(images)} images completed",
            **counts,
        )

    async def check_session(self, session: PhotoshootSession) -> ReconcileResult:
        """Reconcile a session according to its current status."""
        if session.status in TRAINING_STATUSES:
            return await self.check_training(session)
        if session.status == SessionStatus.GENERATING:
            return await self.check_generation(session)
        return _unchanged(session, "Nothing to check")

    async def run_training_pass(self) -> PassSummary:
        sessions = [
            session
            for session in self.session_repository.list_by_status(
                [SessionStatus.TRAINING]
            )
            if session.training_job_id
        ]
        return await self._run_pass(sessions)

    async def run_generation_pass(self) -> PassSummary:
        sessions = [
            session
            for session in self.session_repository.list_by_status(
                [SessionStatus.GENERATING]
            )
            if session.model_id
        ]
        return await self._run_pass(sessions)

    async def run_pending_pass(self, now: datetime | None = None) -> PassSummary:
        """Check training and generating sessions that have been idle long enough."""
        current = now or datetime.now(tz=UTC)
        sessions = self.session_repository.list_by_status(
            [SessionStatus.TRAINING, SessionStatus.GENERATING]
        )
        return await self._run_pass(
            [session for session in sessions if self.is_due(session, current)]
        )

    def is_due(self, session: PhotoshootSession, now: datetime) -> bool:
        """Return true when a session has waited long enough for another check."""
        if session.updated_at is None:
            return True
        idle = now - session.updated_at
        if session.status == SessionStatus.TRAINING:
            return idle > self.training_check_after
        if session.status == SessionStatus.GENERATING:
            return idle > self.generation_check_after
        return False

    async def _run_pass(self, sessions: list[PhotoshootSession]) -> PassSummary:
        results: list[ReconcileResult] = []
        for session in sessions:
            try:
                results.append(await self.check_session(session))
            except Exception as exc:
                logger.exception(
                    "Failed to reconcile session",
                    extra={"session_id": str(session.id)},
                )
                results.append(
                    ReconcileResult(
                        session_id=session.id,
                        status="error",
                        updated=False,
                        message=str(exc),
                    )
                )
        return PassSummary(
            checked=len(sessions),
            updated=sum(1 for result in results if result.updated),
            results=results,
        )

    def handle_tune_event(self, tune: AstriaTune) -> list[ReconcileResult]:
        """Apply a tune callback to every session bound to it."""
        sessions = self.session_repository.list_by_training_job(tune.id)
        if not sessions:
            logger.warning("No session for tune callback", extra={"tune_id": tune.id})
        return [self._apply_tune(session.id, tune) for session in sessions]

    async def handle_prompt_event(self, job: AstriaPrompt) -> ReconcileResult | None:
        """Apply a prompt callback to its image and finalise the session."""
        image = self.image_repository.find_generating_by_prompt(job.id)
        if image is None:
            logger.warning(
                "No generating image for prompt callback", extra={"prompt_id": job.id}
            )
            return None
        await self._apply_prompt(image, job)
        return self._finalize(image.session_id)


def _unchanged(session: PhotoshootSession, message: str) -> ReconcileResult:
    return ReconcileResult(
        session_id=session.id, status=session.status, updated=False, message=message
    )


def _parse(model: type[Payload], raw: object) -> Payload:
    """Validate a provider payload, reporting malformed ones as provider errors."""
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise AstriaError(f"Unexpected Astria {model.__name__} payload") from exc
