"""Inbound WebSocket used by the chat bot to enqueue viewer messages."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..schemas.queue import ErrorMessage, TTSQueuedMessage, TTSRequestMessage

logger = logging.getLogger(__name__)

router = APIRouter()


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid message")
    return f"Invalid message: {location}: {message}" if location else f"Invalid message: {message}"


@router.websocket("/ws/tts")
async def tts_socket(websocket: WebSocket):
    """Accept ``TTS`` messages and acknowledge each with ``TTS_QUEUED``.

    Malformed messages are answered with ``ERROR`` and the connection stays open.
    """
    scheduler = getattr(websocket.app.state, "scheduler", None)
    if scheduler is None:
        logger.error("Queue scheduler not initialized")
        await websocket.close(code=1013, reason="Server not ready")
        return

    await websocket.accept()
    logger.info("TTS source connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = TTSRequestMessage.model_validate_json(raw)
            except ValidationError as exc:
                error = _describe_validation_error(exc)
                logger.warning(f"Rejected TTS message: {error}")
                await websocket.send_json(ErrorMessage(message=error).model_dump())
                continue

            item, position = scheduler.enqueue(
                message.text,
                alias=message.alias,
                username=message.username,
                redemption_id=message.redemption_id,
                reward_id=message.reward_id,
            )
            await websocket.send_json(
                TTSQueuedMessage(id=item.id, position=position).model_dump()
            )
    except WebSocketDisconnect:
        logger.info("TTS source disconnected")
