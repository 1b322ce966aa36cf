"""API layer - REST endpoints."""

from contest_media.api.main import app, create_app

__all__ = [
    "app",
    "create_app",
]
