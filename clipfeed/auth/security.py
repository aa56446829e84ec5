"""Bearer token verification.

Tokens are issued by the identity provider and signed with the shared
secret; this service only checks them:
- JWT signature and expiration (python-jose)
- Token type == "access"
- ``sub`` carries the account id, ``role`` the account role
"""

from typing import Any

from jose import JWTError, jwt

from clipfeed.config.settings import get_settings


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Args:
        token: JWT string

    Returns:
        Decoded payload dictionary

    Raises:
        JWTError: If token is invalid, expired, of the wrong type or has no subject
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type", "access") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise JWTError(msg)

    return payload
