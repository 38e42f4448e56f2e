"""Per-user dashboard summary."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from babyshoot.services.children import ChildService
from babyshoot.services.credits import CreditService
from babyshoot.services.photoshoots import SessionRepository


@dataclass
class DashboardService:
    child_service: ChildService
    session_repository: SessionRepository
    credit_service: CreditService

    def get_dashboard(
        self, user_id: UUID, now: datetime | None = None
    ) -> dict[str, object]:
        """Return children, sessions, balance and usage counts for a user."""
        current = now or datetime.now(tz=UTC)
        month_start = current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return {
            "children": self.child_service.list_children(user_id),
            "sessions": self.session_repository.list_user_sessions(user_id),
            "credit_balance": self.credit_service.get_balance(user_id),
            "usage": {
                "total_sessions": self.session_repository.count_user_sessions(user_id),
                "sessions_this_month": self.session_repository.count_user_sessions(
                    user_id, since=month_start
                ),
            },
        }
