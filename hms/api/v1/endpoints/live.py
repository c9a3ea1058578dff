# hms/api/v1/endpoints/live.py
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from hms.core.errors import Unauthenticated
from hms.dependencies.auth import principal_from_token

router = APIRouter()
logger = logging.getLogger(__name__)

# Application close codes (4000-4999 are free for private use)
CLOSE_UNAUTHENTICATED = 4401
CLOSE_NO_HOSPITAL = 4403


@router.websocket("/ws")
async def live_updates(websocket: WebSocket, token: str | None = Query(None)):
    """
    Push channel for `<entity>:change` events of the caller's hospital.

    The access token comes in the `token` query parameter because browsers
    can't set headers on a WebSocket handshake. Clients only ever receive
    hints; the data itself is refetched over REST.
    """
    services = websocket.app.state.services
    try:
        if not token:
            raise Unauthenticated("No token provided")
        principal = principal_from_token(services.settings, token)
    except Unauthenticated:
        await websocket.close(code=CLOSE_UNAUTHENTICATED)
        return

    if principal.hospital_id is None:
        await websocket.close(code=CLOSE_NO_HOSPITAL)
        return

    await websocket.accept()
    hub = services.live_updates
    room = hub.join(websocket, principal.hospital_id)
    try:
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict) and message.get("event") == "request:sync":
                await websocket.send_json(
                    {
                        "event": "sync:use-api",
                        "data": {"message": "Fetch current state over the REST API"},
                    }
                )
    except WebSocketDisconnect:
        logger.debug("Live-update client left %s", room)
    except ValueError:
        logger.warning("Closing live-update socket in %s after a malformed frame", room)
        await websocket.close(code=1003)
    finally:
        hub.leave(websocket, room)
