"""Control WebSocket: pushes queue, audio and history events to the UI."""

import json
import logging
import uuid
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..services.events import QUEUE_UPDATE

logger = logging.getLogger(__name__)

router = APIRouter()


def _duration_ms(value: Any) -> Optional[int]:
    """Playback reports duration in seconds."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value < 0:
        return None
    return int(round(value * 1000))


@router.websocket("/ws/control")
async def control_socket(websocket: WebSocket):
    app_state = websocket.app.state
    hub = getattr(app_state, "event_hub", None)
    scheduler = getattr(app_state, "scheduler", None)
    if hub is None or scheduler is None:
        logger.error("Event hub or scheduler not initialized")
        await websocket.close(code=1013, reason="Server not ready")
        return

    client_id = websocket.query_params.get("client_id") or str(uuid.uuid4())
    await hub.connect(websocket, client_id)
    await hub.send_message(
        client_id, {"type": QUEUE_UPDATE, **scheduler.snapshot().model_dump(mode="json")}
    )

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                await hub.send_message(client_id, {"type": "ERROR", "message": "Invalid JSON"})
                continue
            if not isinstance(data, dict):
                continue

            event_type = data.get("type")
            if event_type == "AUDIO_FINISHED":
                item_id = data.get("id")
                if not isinstance(item_id, str):
                    await hub.send_message(
                        client_id, {"type": "ERROR", "message": "AUDIO_FINISHED requires an id"}
                    )
                    continue
                result = await scheduler.playback_finished(
                    item_id, _duration_ms(data.get("duration"))
                )
                if not result.success:
                    logger.warning(f"Ignored AUDIO_FINISHED for {item_id}: {result.error}")
            else:
                logger.debug(f"Unhandled control message from {client_id}: {event_type}")
    except WebSocketDisconnect:
        hub.disconnect(client_id)
