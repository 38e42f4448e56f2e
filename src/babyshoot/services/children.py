"""Child profiles and their reusable models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from babyshoot.domain.children import Child, ChildProfile
from babyshoot.errors import InvalidRequestError, NotFoundError
from babyshoot.services.prompts import days_until_expiration, is_model_valid

if TYPE_CHECKING:
    from babyshoot.services.credits import CreditService
    from babyshoot.services.photoshoots import SessionRepository


class ChildRepository(Protocol):
    """Persistence interface for child profiles."""

    def list_children(self, user_id: UUID) -> list[Child]:
        """Return the user's children, newest first."""

    def get_child(self, child_id: UUID, user_id: UUID) -> Child | None:
        """Return a child only when it belongs to the user."""

    def find_by_name(self, user_id: UUID, name: str) -> Child | None:
        """Return the user's child with an exact name, if any."""

    def create_child(self, user_id: UUID, profile: ChildProfile) -> Child:
        """Insert a child profile."""

    def delete_child(self, child_id: UUID) -> None:
        """Delete a child profile."""


@dataclass
class ChildService:
    repository: ChildRepository
    session_repository: SessionRepository
    credit_service: CreditService
    model_reuse_days: int = 30

    def list_children(self, user_id: UUID) -> list[Child]:
        return self.repository.list_children(user_id)

    def create_child(self, user_id: UUID, profile: ChildProfile) -> Child:
        """Create a child profile; requires a positive credit balance."""
        self.credit_service.require_balance(user_id, 1, "create child profiles")
        return self.repository.create_child(user_id, profile)

    def delete_child(self, user_id: UUID, child_id: UUID) -> None:
        if self.repository.get_child(child_id, user_id) is None:
            raise NotFoundError("Child not found")
        if self.session_repository.child_has_sessions(child_id):
            raise InvalidRequestError(
                "Cannot delete child with existing photoshoot sessions"
            )
        self.repository.delete_child(child_id)

    def latest_session(self, user_id: UUID, child_id: UUID) -> dict[str, object]:
        """Return the child's newest session with a trained model."""
        child = self.repository.get_child(child_id, user_id)
        if child is None:
            raise NotFoundError("Child not found")
        session = self.session_repository.find_model_session(
            user_id, child_id=child_id
        )
        if session is None:
            raise NotFoundError("No completed session found for this child")
        model_valid = False
        days_left = 0
        if session.updated_at:
            model_valid = is_model_valid(session.updated_at, self.model_reuse_days)
            days_left = days_until_expiration(
                session.updated_at, self.model_reuse_days
            )
        return {
            "session": session,
            "child": child,
            "model_valid": model_valid,
            "days_until_expiration": days_left,
        }
