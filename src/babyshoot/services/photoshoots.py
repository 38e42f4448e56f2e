"""Photoshoot session lifecycle: creation, model reuse and generation start."""

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from babyshoot.adapters.astria_client import AstriaClient
from babyshoot.domain.astria import AstriaPrompt, AstriaTune
from babyshoot.domain.children import ChildProfile, FamilyMember
from babyshoot.domain.images import GeneratedImage, NewImage
from babyshoot.domain.models import AuthenticatedUser
from babyshoot.domain.sessions import NewSession, PhotoshootSession, SessionStatus
from babyshoot.domain.themes import Theme
from babyshoot.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    ServiceError,
)
from babyshoot.services.children import ChildRepository
from babyshoot.services.credits import CreditService
from babyshoot.services.prompts import (
    build_child_prompt,
    build_family_prompt,
    enhance_with_theme,
    family_fingerprint,
    generation_prompt,
)
from babyshoot.services.themes import ThemeService
from babyshoot.services.users import UserService

logger = logging.getLogger(__name__)

MIN_PHOTOS = 3
SESSION_COST = 1


class SessionRepository(Protocol):
    """Persistence interface for photoshoot sessions."""

    def create_session(self, session: NewSession) -> PhotoshootSession:
        """Insert a session row and return it."""

    def get_session(self, session_id: UUID) -> PhotoshootSession | None:
        """Return a session by id, if present."""

    def get_user_session(
        self, session_id: UUID, user_id: UUID
    ) -> PhotoshootSession | None:
        """Return a session only when it belongs to the user."""

    def list_user_sessions(self, user_id: UUID) -> list[PhotoshootSession]:
        """Return the user's sessions, newest first."""

    def count_user_sessions(self, user_id: UUID, since: datetime | None = None) -> int:
        """Count the user's sessions, optionally created since a time."""

    def list_by_status(self, statuses: Collection[str]) -> list[PhotoshootSession]:
        """Return sessions in any of the statuses, oldest first."""

    def list_by_training_job(self, training_job_id: str) -> list[PhotoshootSession]:
        """Return sessions bound to a provider tune."""

    def find_model_session(  # noqa: PLR0913
        self,
        user_id: UUID,
        *,
        session_id: UUID | None = None,
        child_id: UUID | None = None,
        family_fingerprint: str | None = None,
        updated_since: datetime | None = None,
    ) -> PhotoshootSession | None:
        """Return the newest completed session with a trained model."""

    def child_has_sessions(self, child_id: UUID) -> bool:
        """Return true when any session references the child."""

    def update_session(self, session_id: UUID, changes: dict[str, object]) -> None:
        """Write non-status columns."""

    def transition_status(
        self,
        session_id: UUID,
        expected: Collection[str],
        status: str,
        changes: dict[str, object] | None = None,
    ) -> bool:
        """Move to status only if the current status is expected."""

    def delete_session(self, session_id: UUID) -> None:
        """Delete a session row."""


class ImageRepository(Protocol):
    """Persistence interface for generated images."""

    def create_images(self, images: list[NewImage]) -> list[GeneratedImage]:
        """Insert generating image rows."""

    def list_session_images(
        self, session_id: UUID, status: str | None = None
    ) -> list[GeneratedImage]:
        """Return a session's images, oldest first."""

    def find_generating_by_prompt(self, prompt_id: str) -> GeneratedImage | None:
        """Return the generating image bound to a provider prompt."""

    def complete_image(
        self,
        image_id: UUID,
        image_url: str,
        astria_url: str,
        seed: int | None,
    ) -> bool:
        """Mark a generating image completed; false when it already moved."""

    def fail_image(self, image_id: UUID) -> bool:
        """Mark a generating image failed; false when it already moved."""

    def delete_session_images(self, session_id: UUID) -> None:
        """Delete every image of a session."""

    def list_user_images(self, user_id: UUID) -> list[GeneratedImage]:
        """Return completed images across the user's sessions, newest first."""

    def owned_image_ids(self, user_id: UUID, image_ids: list[UUID]) -> set[UUID]:
        """Return the subset of ids that are the user's completed images."""


@dataclass(frozen=True)
class PhotoshootRequest:
    """Input for a new photoshoot session."""

    session_type: str
    theme_id: UUID
    child: ChildProfile | None = None
    family_members: list[FamilyMember] = field(default_factory=list)
    photo_urls: list[str] = field(default_factory=list)
    existing_photos: list[str] = field(default_factory=list)
    reuse_session_id: UUID | None = None
    reuse_child_id: UUID | None = None

    @property
    def total_photos(self) -> int:
        return len(self.photo_urls) + len(self.existing_photos)

    @property
    def is_exact_reuse(self) -> bool:
        """True when an earlier model is requested explicitly without new photos."""
        requested = self.reuse_session_id is not None or self.reuse_child_id is not None
        return (
            requested
            and not self.photo_urls
            and len(self.existing_photos) >= MIN_PHOTOS
        )


@dataclass(frozen=True)
class _Subject:
    base_prompt: str
    child_id: UUID | None = None
    fingerprint: str | None = None


@dataclass
class PhotoshootService:
    """Application service for photoshoot sessions."""

    session_repository: SessionRepository
    image_repository: ImageRepository
    child_repository: ChildRepository
    theme_service: ThemeService
    credit_service: CreditService
    user_service: UserService
    astria_client: AstriaClient
    trigger_token: str = "ohwx"
    class_name: str = "person"
    model_reuse_days: int = 30

    async def create_session(
        self, user: AuthenticatedUser, request: PhotoshootRequest
    ) -> dict[str, object]:
        """Create a session, reusing a recent model or starting training."""
        self.user_service.ensure_user(user)
        self.credit_service.require_balance(
            user.id, SESSION_COST, "create a photoshoot session"
        )
        if request.total_photos < MIN_PHOTOS:
            raise InvalidRequestError("At least 3 photos are required")
        theme = self.theme_service.get_active_theme(request.theme_id)
        if theme is None:
            raise NotFoundError("Theme not found")

        base_prompt = _base_prompt(request)
        exact = self._find_exact_reuse(user.id, request)
        if exact is not None:
            subject = _reused_subject(base_prompt, request, exact)
            reused: PhotoshootSession | None = exact
            photos = list(request.existing_photos)
        else:
            subject = self._resolve_subject(user.id, request, base_prompt)
            reused = (
                None
                if request.is_exact_reuse
                else self._find_recent_model(user.id, subject)
            )
            photos = (
                reused.uploaded_photos
                if reused
                else [*request.photo_urls, *request.existing_photos]
            )
        session = self.session_repository.create_session(
            NewSession(
                user_id=user.id,
                status=SessionStatus.READY if reused else SessionStatus.PENDING,
                selected_theme_id=theme.id,
                base_prompt=subject.base_prompt,
                enhanced_prompt=enhance_with_theme(subject.base_prompt, theme.prompt),
                child_id=subject.child_id,
                uploaded_photos=photos,
                model_id=reused.model_id if reused else None,
                training_job_id=reused.training_job_id if reused else None,
                family_fingerprint=subject.fingerprint,
            )
        )
        label = "Child" if request.session_type == "child" else "Family"
        self.credit_service.deduct_for_session(
            user.id,
            session.id,
            SESSION_COST,
            f"Photoshoot created - {label} session",
        )

        if reused:
            logger.info(
                "Reusing trained model",
                extra={"session_id": str(session.id), "source": str(reused.id)},
            )
            return {
                "session_id": session.id,
                "status": SessionStatus.READY,
                "model_reused": True,
                "message": "Using existing trained model - ready for generation!",
            }

        await self._start_training(session, photos)
        return {
            "session_id": session.id,
            "status": SessionStatus.TRAINING,
            "model_reused": False,
            "message": "Training started successfully",
        }

    def _resolve_subject(
        self, user_id: UUID, request: PhotoshootRequest, base_prompt: str
    ) -> _Subject:
        if request.session_type == "child" and request.child:
            child = self.child_repository.find_by_name(user_id, request.child.name)
            if child is None:
                child = self.child_repository.create_child(user_id, request.child)
            return _Subject(base_prompt=base_prompt, child_id=child.id)
        return _Subject(
            base_prompt=base_prompt,
            fingerprint=family_fingerprint(request.family_members),
        )

    def _find_exact_reuse(
        self, user_id: UUID, request: PhotoshootRequest
    ) -> PhotoshootSession | None:
        """Return the model session explicitly requested for reuse, if usable."""
        if not request.is_exact_reuse:
            return None
        if request.reuse_session_id:
            return self.session_repository.find_model_session(
                user_id, session_id=request.reuse_session_id
            )
        return self.session_repository.find_model_session(
            user_id, child_id=request.reuse_child_id
        )

    def _find_recent_model(
        self, user_id: UUID, subject: _Subject
    ) -> PhotoshootSession | None:
        since = datetime.now(tz=UTC) - timedelta(days=self.model_reuse_days)
        if subject.child_id:
            return self.session_repository.find_model_session(
                user_id, child_id=subject.child_id, updated_since=since
            )
        if subject.fingerprint:
            return self.session_repository.find_model_session(
                user_id, family_fingerprint=subject.fingerprint, updated_since=since
            )
        return None

    async def _start_training(
        self, session: PhotoshootSession, photos: list[str]
    ) -> None:
        try:
            raw = await self.astria_client.create_tune(
                title=f"session_{session.id}",
                class_name=self.class_name,
                image_urls=photos,
            )
            tune = AstriaTune.model_validate(raw)
            self.session_repository.transition_status(
                session.id,
                {SessionStatus.PENDING},
                SessionStatus.TRAINING,
                {"training_job_id": tune.id},
            )
        except Exception as exc:
            logger.exception(
                "Failed to start training", extra={"session_id": str(session.id)}
            )
            self.session_repository.transition_status(
                session.id, {SessionStatus.PENDING}, SessionStatus.FAILED
            )
            raise ServiceError("Failed to start training", details=str(exc)) from exc

    async def start_generation(
        self, user_id: UUID, session_id: UUID
    ) -> dict[str, object]:
        """Submit one provider prompt per theme scene for a ready session."""
        session = self.get_owned_session(user_id, session_id)
        if session.status != SessionStatus.READY:
            raise InvalidRequestError("Session is not ready for generation")
        if not session.model_id:
            raise InvalidRequestError("No trained model available")
        theme = (
            self.theme_service.get_theme(session.selected_theme_id)
            if session.selected_theme_id
            else None
        )
        if not self.session_repository.transition_status(
            session.id, {SessionStatus.READY}, SessionStatus.GENERATING
        ):
            raise ConflictError("Generation already started for this session")

        images: list[NewImage] = []
        try:
            await self._submit_prompts(session, theme, images)
            self.image_repository.create_images(images)
            self.session_repository.update_session(
                session.id,
                {
                    "generation_job_id": images[0].astria_prompt_id,
                    "generation_prompt": " | ".join(image.prompt for image in images),
                },
            )
        except Exception as exc:
            logger.exception(
                "Failed to start generation",
                extra={
                    "session_id": str(session.id),
                    "orphaned_prompt_ids": [
                        image.astria_prompt_id for image in images
                    ],
                },
            )
            self.session_repository.transition_status(
                session.id, {SessionStatus.GENERATING}, SessionStatus.READY
            )
            raise ServiceError(
                "Failed to start image generation", details=str(exc)
            ) from exc

        return {
            "session_id": session.id,
            "status": SessionStatus.GENERATING,
            "images_requested": len(images),
            "message": f"Started generating {len(images)} images",
        }

    async def _submit_prompts(
        self,
        session: PhotoshootSession,
        theme: Theme | None,
        submitted: list[NewImage],
    ) -> None:
        """Create provider jobs, appending each one to submitted as it is queued."""
        model_id = session.model_id or ""
        scenes = theme.scene_prompts() if theme else []
        if not scenes:
            text = generation_prompt(
                self.trigger_token,
                self.class_name,
                session.enhanced_prompt or session.base_prompt or "",
            )
            job = await self._create_prompt(model_id, text)
            submitted.append(NewImage(session.id, prompt=text, astria_prompt_id=job.id))
            return

        for scene in scenes:
            text = generation_prompt(
                self.trigger_token,
                self.class_name,
                session.base_prompt or "",
                scene.prompt_text,
            )
            job = await self._create_prompt(model_id, text)
            submitted.append(
                NewImage(
                    session.id,
                    prompt=text,
                    astria_prompt_id=job.id,
                    theme_prompt_id=scene.id,
                )
            )

    async def _create_prompt(self, model_id: str, text: str) -> AstriaPrompt:
        raw = await self.astria_client.create_prompt(model_id, text, num_images=1)
        return AstriaPrompt.model_validate(raw)

    def get_owned_session(self, user_id: UUID, session_id: UUID) -> PhotoshootSession:
        session = self.session_repository.get_user_session(session_id, user_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session

    def get_session_detail(self, user_id: UUID, session_id: UUID) -> dict[str, object]:
        """Return a session with its child, theme and images."""
        session = self.get_owned_session(user_id, session_id)
        child = None
        if session.child_id:
            found = self.child_repository.get_child(session.child_id, user_id)
            if found:
                child = {
                    "name": found.profile.name,
                    "age_in_months": found.profile.age_in_months,
                }
        theme = None
        if session.selected_theme_id:
            found_theme = self.theme_service.get_theme(session.selected_theme_id)
            if found_theme:
                theme = {
                    "name": found_theme.name,
                    "description": found_theme.description,
                }
        return {
            "session": session,
            "child": child,
            "theme": theme,
            "images": self.image_repository.list_session_images(session.id),
        }

    def list_sessions(self, user_id: UUID) -> list[PhotoshootSession]:
        return self.session_repository.list_user_sessions(user_id)

    def delete_session(self, user_id: UUID, session_id: UUID) -> None:
        """Delete a session together with its ledger entries and images."""
        session = self.get_owned_session(user_id, session_id)
        self.credit_service.delete_session_transactions(session.id)
        self.image_repository.delete_session_images(session.id)
        self.session_repository.delete_session(session.id)
        logger.info("Deleted session", extra={"session_id": str(session.id)})

    def list_user_images(self, user_id: UUID) -> list[GeneratedImage]:
        return self.image_repository.list_user_images(user_id)


def _base_prompt(request: PhotoshootRequest) -> str:
    if request.session_type == "child" and request.child:
        return build_child_prompt(request.child)
    if request.session_type == "family" and request.family_members:
        return build_family_prompt(request.family_members)
    raise InvalidRequestError("Invalid session type or missing data")


def _reused_subject(
    base_prompt: str, request: PhotoshootRequest, reused: PhotoshootSession
) -> _Subject:
    """Bind a new session to the subject whose model is being reused."""
    if request.reuse_session_id is None:
        return _Subject(base_prompt=base_prompt, child_id=request.reuse_child_id)
    if reused.child_id:
        return _Subject(base_prompt=base_prompt, child_id=reused.child_id)
    return _Subject(base_prompt=base_prompt, fingerprint=reused.family_fingerprint)
