"""Pydantic schemas for the authenticated caller."""

from uuid import UUID

from pydantic import BaseModel, Field

from clipfeed.auth.permissions import AccountRole


class AuthenticatedAccount(BaseModel):
    """Identity resolved from a verified bearer token."""

    id: UUID = Field(description="Account id (token subject)")
    role: AccountRole = Field(default=AccountRole.MEMBER, description="Account role")
