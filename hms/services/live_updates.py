# hms/services/live_updates.py
"""
Per-hospital WebSocket fan-out.

Connections join the room `hospital:<id>` of their principal. Every change
pushed here is a hint for clients to refetch over REST; nothing is replayed
or acknowledged.
"""

import logging
import time
import uuid
from collections import defaultdict
from typing import Any

from fastapi import BackgroundTasks, WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


def room_name(hospital_id: uuid.UUID | str) -> str:
    return f"hospital:{hospital_id}"


class LiveUpdateHub:
    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)

    def join(self, websocket: WebSocket, hospital_id: uuid.UUID | str) -> str:
        room = room_name(hospital_id)
        self._rooms[room].add(websocket)
        logger.info("Live-update client joined %s (%d connected)", room, len(self._rooms[room]))
        return room

    def leave(self, websocket: WebSocket, room: str) -> None:
        members = self._rooms.get(room)
        if not members:
            return
        members.discard(websocket)
        if not members:
            del self._rooms[room]

    def connection_count(self, hospital_id: uuid.UUID | str | None = None) -> int:
        if hospital_id is None:
            return sum(len(members) for members in self._rooms.values())
        return len(self._rooms.get(room_name(hospital_id), ()))

    async def broadcast(
        self,
        hospital_id: uuid.UUID | str,
        entity: str,
        action: str,
        payload: Any,
    ) -> int:
        """
        Send `<entity>:change` to every socket in the hospital's room.
        Dead sockets are dropped. Returns the number of sockets reached.
        """
        room = room_name(hospital_id)
        message = {
            "event": f"{entity}:change",
            "data": {
                "action": action,
                "payload": jsonable_encoder(payload),
                "timestamp": int(time.time() * 1000),
            },
        }

        delivered = 0
        for websocket in list(self._rooms.get(room, ())):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception:
                logger.warning("Dropping dead live-update socket in %s", room)
                self.leave(websocket, room)
        return delivered

    async def close_all(self) -> None:
        for room, members in list(self._rooms.items()):
            for websocket in list(members):
                try:
                    await websocket.close(code=1001)
                except Exception:
                    logger.debug("Socket in %s already closed", room)
        self._rooms.clear()


class ChangeNotifier:
    """
    Request-scoped handle that schedules a broadcast after the response is sent.

    The payload is encoded immediately, while the ORM session is still open.
    """

    def __init__(self, hub: LiveUpdateHub, background_tasks: BackgroundTasks):
        self.hub = hub
        self.background_tasks = background_tasks

    def publish(
        self,
        hospital_id: uuid.UUID | None,
        entity: str,
        action: str,
        payload: Any,
    ) -> None:
        if hospital_id is None:
            return
        self.background_tasks.add_task(
            self.hub.broadcast,
            hospital_id,
            entity,
            action,
            jsonable_encoder(payload, by_alias=True),
        )
