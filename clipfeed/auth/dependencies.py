"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current account extraction from JWT
- Optional account for endpoints open to anonymous viewers

Role checks for moderation and administration live in the services so they
hold for every caller, not only HTTP.
"""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from pydantic import ValidationError

from clipfeed.auth.permissions import AccountRole
from clipfeed.auth.schemas import AuthenticatedAccount
from clipfeed.auth.security import decode_access_token
from clipfeed.core.context import set_account_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Args:
        request: FastAPI request

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def _account_from_payload(payload: dict[str, Any]) -> AuthenticatedAccount:
    account = AuthenticatedAccount(
        id=payload["sub"],
        role=payload.get("role") or AccountRole.MEMBER,
    )
    # Set account_id in context for logging
    set_account_id(account.id)
    return account


async def get_current_account(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> AuthenticatedAccount:
    """Get current authenticated account from JWT token.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return _account_from_payload(decode_access_token(token))
    except (JWTError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_account_optional(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> AuthenticatedAccount | None:
    """Get current account if authenticated, None otherwise.

    Use this for endpoints that work for both authenticated and anonymous users.
    """
    if not token:
        return None

    try:
        return _account_from_payload(decode_access_token(token))
    except (JWTError, ValidationError):
        return None


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

# Basic authenticated account
CurrentUser = Annotated[AuthenticatedAccount, Depends(get_current_account)]

# Optional account (for endpoints that work both ways)
OptionalUser = Annotated[
    AuthenticatedAccount | None, Depends(get_current_account_optional)
]
