"""Authentication module: bearer token verification and role hierarchy."""

from .permissions import AccountRole


__all__ = ["AccountRole"]
