"""Database models for account records.

Accounts are created by the identity provider; this service reads them,
escalates roles on administrative action and flips the soft ``status`` when
a ban sweep runs. Accounts are never hard-deleted.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from clipfeed.auth.permissions import AccountRole


class AccountStatus(str, Enum):
    """Soft lifecycle state of an account."""

    ACTIVE = "active"
    BANNED = "banned"


ACCOUNT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.accounts (
    account_id UUID PRIMARY KEY,
    username TEXT,
    avatar_url TEXT,
    bio TEXT,
    role TEXT,
    status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

ACCOUNTS_TABLES_CQL = [
    ACCOUNT_TABLE_CQL,
]


@dataclass
class Account:
    """Account entity."""

    account_id: UUID
    username: str
    avatar_url: str | None
    bio: str | None
    role: AccountRole
    status: AccountStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Account":
        """Create Account from Cassandra row."""
        return cls(
            account_id=row.account_id,
            username=row.username or "user",
            avatar_url=row.avatar_url,
            bio=row.bio,
            role=AccountRole(row.role or AccountRole.MEMBER.value),
            status=AccountStatus(row.status or AccountStatus.ACTIVE.value),
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )

    @property
    def is_banned(self) -> bool:
        return self.status == AccountStatus.BANNED


@dataclass
class UserProfile:
    """Public view of an account with its social and engagement totals."""

    account: Account
    follower_count: int
    following_count: int
    video_count: int
    total_likes: int
    followed_by_current_user: bool
