"""Accounts module.

Account records owned by the identity provider, public profiles and
administrator role changes.
"""

from .models import Account, AccountStatus, UserProfile


__all__ = ["Account", "AccountStatus", "UserProfile"]
