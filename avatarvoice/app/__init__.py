"""Application layer - FastAPI application and composition root."""

from avatarvoice.app.main import create_app, run_server

__all__ = ["create_app", "run_server"]
