"""Credit balance, ledger and package catalog."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from babyshoot.domain.credits import CreditPackage, CreditTransaction
from babyshoot.errors import InsufficientCreditsError
from babyshoot.services.cache import Cache, cached

logger = logging.getLogger(__name__)

_PACKAGES_CACHE_KEY = "credit_packages"
_PACKAGES_TTL_SECONDS = 300
_BASELINE_CENTS_PER_CREDIT = 1000
_BULK_PACKAGE_CREDITS = 50


class CreditRepository(Protocol):
    """Persistence interface for credits."""

    def get_balance(self, user_id: UUID) -> int:
        """Return the user's current balance."""

    def modify_credits(
        self,
        user_id: UUID,
        amount: int,
        transaction_type: str,
        description: str,
        session_id: UUID | None,
    ) -> None:
        """Apply a ledger entry through the credit stored procedure."""

    def list_transactions(
        self, user_id: UUID, limit: int, offset: int
    ) -> list[CreditTransaction]:
        """Return ledger entries, newest first."""

    def delete_session_transactions(self, session_id: UUID) -> None:
        """Remove ledger entries that reference a session."""

    def list_packages(self) -> list[CreditPackage]:
        """Return active packages ordered by price."""


@dataclass
class CreditService:
    """Application service for credits."""

    repository: CreditRepository
    cache: Cache

    def get_balance(self, user_id: UUID) -> int:
        return self.repository.get_balance(user_id)

    def require_balance(self, user_id: UUID, required: int, action: str) -> int:
        """Raise when the balance is below required; return the balance."""
        balance = self.repository.get_balance(user_id)
        if balance < required:
            raise InsufficientCreditsError(
                "Insufficient credits",
                message=(
                    f"You need at least {required} credit(s) to {action}. "
                    f"Current balance: {balance}"
                ),
                current_balance=balance,
                required_credits=required,
            )
        return balance

    def deduct_for_session(
        self, user_id: UUID, session_id: UUID, amount: int, description: str
    ) -> bool:
        """Charge credits for a session; failures are logged, not raised."""
        try:
            self.repository.modify_credits(
                user_id,
                amount=-amount,
                transaction_type="usage",
                description=description,
                session_id=session_id,
            )
        except Exception:
            logger.exception(
                "Failed to deduct credits after session creation",
                extra={"user_id": str(user_id), "session_id": str(session_id)},
            )
            return False
        return True

    def delete_session_transactions(self, session_id: UUID) -> None:
        self.repository.delete_session_transactions(session_id)

    def list_transactions(
        self, user_id: UUID, limit: int = 50, offset: int = 0
    ) -> dict[str, object]:
        transactions = self.repository.list_transactions(user_id, limit, offset)
        return {
            "transactions": transactions,
            "has_more": len(transactions) == limit,
        }

    def list_packages(self) -> list[dict[str, object]]:
        packages = cached(
            self.cache,
            _PACKAGES_CACHE_KEY,
            _PACKAGES_TTL_SECONDS,
            self.repository.list_packages,
        )
        return [_format_package(package) for package in packages]


def _format_package(package: CreditPackage) -> dict[str, object]:
    cents_per_credit = package.price_cents / package.credits if package.credits else 0
    savings = 0
    if package.credits >= _BULK_PACKAGE_CREDITS:
        savings = round(
            (_BASELINE_CENTS_PER_CREDIT - cents_per_credit)
            / _BASELINE_CENTS_PER_CREDIT
            * 100
        )
    return {
        "id": package.id,
        "name": package.name,
        "credits": package.credits,
        "price_cents": package.price_cents,
        "description": package.description,
        "price": package.price_cents / 100,
        "price_per_credit": f"{cents_per_credit / 100:.2f}",
        "savings": savings,
    }
