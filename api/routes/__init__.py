"""API Routes Package."""

from api.routes import health, calendar, proxy

__all__ = [
    "health",
    "calendar",
    "proxy",
]
