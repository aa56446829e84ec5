"""Cassandra access for account records."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from clipfeed.auth.permissions import AccountRole

from .models import Account, AccountStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class AccountRepository:
    """Reads accounts and applies the few writes this service owns."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._get_account = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.accounts
            WHERE account_id = ?
        """)

        self._insert_account = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.accounts
            (account_id, username, avatar_url, bio, role, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._update_role = self.session.prepare(f"""
            UPDATE {self.keyspace}.accounts
            SET role = ?, updated_at = ?
            WHERE account_id = ?
        """)

        self._update_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.accounts
            SET status = ?, updated_at = ?
            WHERE account_id = ?
        """)

    async def get(self, account_id: UUID) -> Account | None:
        result = await self.session.aexecute(self._get_account, [account_id])
        row = result.one()
        return Account.from_row(row) if row else None

    async def exists(self, account_id: UUID) -> bool:
        return await self.get(account_id) is not None

    async def insert(self, account: Account) -> None:
        """Store an account record handed over by the identity provider."""
        await self.session.aexecute(
            self._insert_account,
            [
                account.account_id,
                account.username,
                account.avatar_url,
                account.bio,
                account.role.value,
                account.status.value,
                account.created_at,
                account.updated_at,
            ],
        )

    async def set_role(self, account_id: UUID, role: AccountRole) -> None:
        await self.session.aexecute(
            self._update_role, [role.value, datetime.now(UTC), account_id]
        )

    async def set_status(self, account_id: UUID, status: AccountStatus) -> None:
        await self.session.aexecute(
            self._update_status, [status.value, datetime.now(UTC), account_id]
        )
