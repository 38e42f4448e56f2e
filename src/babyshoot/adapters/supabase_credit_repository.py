"""Supabase-backed credit ledger repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from babyshoot.adapters.supabase_rows import optional_str, optional_uuid, parse_datetime
from babyshoot.domain.credits import CreditPackage, CreditTransaction
from babyshoot.services.credits import CreditRepository


@dataclass
class SupabaseCreditRepository(CreditRepository):
    """Credits are computed and written by stored procedures."""

    client: Client

    def get_balance(self, user_id: UUID) -> int:
        response = self.client.rpc(
            "get_user_credit_balance", {"user_uuid": str(user_id)}
        ).execute()
        return int(response.data or 0)

    def modify_credits(
        self,
        user_id: UUID,
        amount: int,
        transaction_type: str,
        description: str,
        session_id: UUID | None,
    ) -> None:
        self.client.rpc(
            "modify_user_credits",
            {
                "user_uuid": str(user_id),
                "credit_amount": amount,
                "transaction_type": transaction_type,
                "transaction_description": description,
                "session_id": str(session_id) if session_id else None,
            },
        ).execute()

    def list_transactions(
        self, user_id: UUID, limit: int, offset: int
    ) -> list[CreditTransaction]:
        response = (
            self.client.table("credit_transactions")
            .select(
                "id, user_id, type, amount, description, "
                "photoshoot_session_id, created_at"
            )
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [
            CreditTransaction(
                id=UUID(str(row["id"])),
                user_id=UUID(str(row["user_id"])),
                type=str(row["type"]),
                amount=int(row["amount"]),
                description=optional_str(row.get("description")),
                photoshoot_session_id=optional_uuid(row.get("photoshoot_session_id")),
                created_at=parse_datetime(row.get("created_at")),
            )
            for row in response.data or []
        ]

    def delete_session_transactions(self, session_id: UUID) -> None:
        self.client.table("credit_transactions").delete().eq(
            "photoshoot_session_id", str(session_id)
        ).execute()

    def list_packages(self) -> list[CreditPackage]:
        response = (
            self.client.table("credit_packages")
            .select("id, name, credits, price_cents, description")
            .eq("is_active", True)
            .order("price_cents")
            .execute()
        )
        return [
            CreditPackage(
                id=UUID(str(row["id"])),
                name=str(row["name"]),
                credits=int(row["credits"]),
                price_cents=int(row["price_cents"]),
                description=optional_str(row.get("description")),
            )
            for row in response.data or []
        ]
