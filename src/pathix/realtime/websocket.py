"""WebSocket endpoint — connection scaffolding for future live features.

Learn: Clients connect to /ws and every text frame they send comes back
as "Echo: <text>". There is no auth, no framing and no shared state
between connections; each connection lives in its own handler coroutine.
"""

import uuid

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws")
async def echo_websocket(websocket: WebSocket):
    """Echo every text frame back to the sender."""
    await websocket.accept()
    connection_id = uuid.uuid4().hex[:8]
    logger.info("ws.connected", connection_id=connection_id)

    try:
        while True:
            message = await websocket.receive_text()
            logger.debug("ws.received", connection_id=connection_id, size=len(message))
            await websocket.send_text(f"Echo: {message}")
    except WebSocketDisconnect:
        logger.info("ws.disconnected", connection_id=connection_id)
