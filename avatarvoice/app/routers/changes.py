"""WebSocket change feed.

Every client receives the full collection on connect and again after each
successful mutation:

    {"type": "snapshot", "avatars": [...]}
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from avatarvoice.app.schemas import AvatarResponse
from avatarvoice.domain.models import Avatar
from avatarvoice.domain_service import AvatarRepository

logger = logging.getLogger(__name__)

router = APIRouter()

# Older snapshots are dropped once a slow client falls this far behind
MAX_QUEUED_SNAPSHOTS = 16


def create_snapshot_message(avatars: tuple[Avatar, ...]) -> dict[str, Any]:
    """Create snapshot message."""
    return {
        "type": "snapshot",
        "avatars": [
            AvatarResponse.from_avatar(avatar).model_dump(mode="json")
            for avatar in avatars
        ],
    }


@router.websocket("/ws/changes")
async def changes(websocket: WebSocket) -> None:
    repository: AvatarRepository = websocket.app.state.repository
    queue: asyncio.Queue[tuple[Avatar, ...]] = asyncio.Queue(MAX_QUEUED_SNAPSHOTS)

    def on_change(avatars: tuple[Avatar, ...]) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(avatars)

    await websocket.accept()
    unsubscribe = repository.subscribe(on_change)
    receiver = asyncio.create_task(websocket.receive())
    getter: asyncio.Task[tuple[Avatar, ...]] | None = None
    try:
        await websocket.send_json(create_snapshot_message(repository.avatars))
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {getter, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            if getter in done:
                await websocket.send_json(create_snapshot_message(getter.result()))
            else:
                getter.cancel()
            if receiver in done:
                # Client messages are ignored; only a disconnect matters.
                if receiver.result()["type"] == "websocket.disconnect":
                    break
                receiver = asyncio.create_task(websocket.receive())
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        receiver.cancel()
        if getter is not None:
            getter.cancel()
        logger.debug("Change feed client disconnected")
