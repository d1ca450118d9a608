"""HTTP and WebSocket routers."""

from avatarvoice.app.routers.avatars import router as avatars_router
from avatarvoice.app.routers.changes import router as changes_router
from avatarvoice.app.routers.queries import router as queries_router
from avatarvoice.app.routers.voices import router as voices_router

__all__ = ["avatars_router", "changes_router", "queries_router", "voices_router"]
