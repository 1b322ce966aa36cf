"""API route handlers."""

from contest_media.api.openapi.routes import conversion, health, playback, uploads

__all__ = [
    "conversion",
    "health",
    "playback",
    "uploads",
]
