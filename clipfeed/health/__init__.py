"""Health check module."""

from clipfeed.health.router import router


__all__ = ["router"]
