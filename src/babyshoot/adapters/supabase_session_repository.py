"""Supabase-backed photoshoot session repository."""

from collections.abc import Collection
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import SESSION_COLUMNS, to_session
from babyshoot.domain.sessions import NewSession, PhotoshootSession, SessionStatus
from babyshoot.services.photoshoots import SessionRepository

_TABLE = "photoshoot_sessions"


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for photoshoot sessions."""

    client: Client

    def create_session(self, session: NewSession) -> PhotoshootSession:
        """Insert a session row and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": str(session.user_id),
                    "child_id": str(session.child_id) if session.child_id else None,
                    "status": session.status,
                    "selected_theme_id": str(session.selected_theme_id),
                    "base_prompt": session.base_prompt,
                    "enhanced_prompt": session.enhanced_prompt,
                    "uploaded_photos": session.uploaded_photos,
                    "model_id": session.model_id,
                    "training_job_id": session.training_job_id,
                    "family_fingerprint": session.family_fingerprint,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        return to_session(response.data[0])

    def get_session(self, session_id: UUID) -> PhotoshootSession | None:
        response = (
            self.client.table(_TABLE)
            .select(SESSION_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return to_session(response.data[0])

    def get_user_session(
        self, session_id: UUID, user_id: UUID
    ) -> PhotoshootSession | None:
        response = (
            self.client.table(_TABLE)
            .select(SESSION_COLUMNS)
            .eq("id", str(session_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return to_session(response.data[0])

    def list_user_sessions(self, user_id: UUID) -> list[PhotoshootSession]:
        response = (
            self.client.table(_TABLE)
            .select(SESSION_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [to_session(row) for row in response.data or []]

    def count_user_sessions(self, user_id: UUID, since: datetime | None = None) -> int:
        query = (
            self.client.table(_TABLE)
            .select("id", count="exact")
            .eq("user_id", str(user_id))
        )
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        response = query.execute()
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def list_by_status(self, statuses: Collection[str]) -> list[PhotoshootSession]:
        response = (
            self.client.table(_TABLE)
            .select(SESSION_COLUMNS)
            .in_("status", [str(status) for status in statuses])
            .order("created_at")
            .execute()
        )
        return [to_session(row) for row in response.data or []]

    def list_by_training_job(self, training_job_id: str) -> list[PhotoshootSession]:
        response = (
            self.client.table(_TABLE)
            .select(SESSION_COLUMNS)
            .eq("training_job_id", training_job_id)
            .execute()
        )
        return [to_session(row) for row in response.data or []]

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
        query = (
            self.client.table(_TABLE)
            .select(SESSION_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("status", SessionStatus.COMPLETED.value)
            .not_.is_("model_id", "null")
        )
        if session_id is not None:
            query = query.eq("id", str(session_id))
        if child_id is not None:
            query = query.eq("child_id", str(child_id))
        if family_fingerprint is not None:
            query = query.eq("family_fingerprint", family_fingerprint)
        if updated_since is not None:
            query = query.gte("updated_at", updated_since.isoformat())
        response = query.order("updated_at", desc=True).limit(1).execute()
        if not response.data:
            return None
        return to_session(response.data[0])

    def child_has_sessions(self, child_id: UUID) -> bool:
        response = (
            self.client.table(_TABLE)
            .select("id")
            .eq("child_id", str(child_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def update_session(self, session_id: UUID, changes: dict[str, object]) -> None:
        self.client.table(_TABLE).update({**changes, "updated_at": _now()}).eq(
            "id", str(session_id)
        ).execute()

    def transition_status(
        self,
        session_id: UUID,
        expected: Collection[str],
        status: str,
        changes: dict[str, object] | None = None,
    ) -> bool:
        """Update only while the row is still in an expected status."""
        response = (
            self.client.table(_TABLE)
            .update({**(changes or {}), "status": str(status), "updated_at": _now()})
            .eq("id", str(session_id))
            .in_("status", [str(value) for value in expected])
            .execute()
        )
        return bool(response.data)

    def delete_session(self, session_id: UUID) -> None:
        self.client.table(_TABLE).delete().eq("id", str(session_id)).execute()
