"""WebSocket route for live dependency updates."""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from deptracker.services.broadcast import broadcaster

router = APIRouter()


@router.websocket("/ws")
async def dependency_updates(websocket: WebSocket):
    await broadcaster.connect(websocket)
    try:
        while True:
            # Clients only listen; inbound frames are discarded
            await websocket.receive_text()
    except WebSocketDisconnect:
        broadcaster.disconnect(websocket)
